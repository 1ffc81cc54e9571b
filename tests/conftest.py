"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides factories for fake application bundles.
"""

import plistlib
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local lodestar package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of lodestar modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("lodestar"):
        del sys.modules[module_name]

MakeApp = Callable[..., Path]
MakeDesktop = Callable[..., Path]


@pytest.fixture
def make_app() -> MakeApp:
    """Factory writing a minimal ``*.app`` bundle with an Info.plist."""

    def _make(
        parent: Path,
        name: str,
        identifier: str | None = None,
        *,
        info: dict[str, Any] | None = None,
        with_manifest: bool = True,
    ) -> Path:
        bundle = parent / f"{name}.app"
        contents = bundle / "Contents"
        contents.mkdir(parents=True)
        if with_manifest:
            plist: dict[str, Any] = {"CFBundleName": name}
            if identifier is not None:
                plist["CFBundleIdentifier"] = identifier
            plist.update(info or {})
            with (contents / "Info.plist").open("wb") as f:
                plistlib.dump(plist, f)
        return bundle

    return _make


@pytest.fixture
def make_desktop() -> MakeDesktop:
    """Factory writing a freedesktop ``*.desktop`` entry."""

    def _make(parent: Path, stem: str, **fields: str) -> Path:
        parent.mkdir(parents=True, exist_ok=True)
        entry = {"Type": "Application", "Name": stem.title(), "Exec": stem, **fields}
        lines = ["[Desktop Entry]", *(f"{k}={v}" for k, v in entry.items())]
        path = parent / f"{stem}.desktop"
        path.write_text("\n".join(lines) + "\n")
        return path

    return _make
