"""Bundle readers: recognise a launchable unit and read its manifest.

Two conventions are supported:
- macOS application bundles: ``*.app`` directories with ``Contents/Info.plist``
- freedesktop desktop entries: ``*.desktop`` files with a ``[Desktop Entry]`` group

A reader never raises for a bad manifest. It returns a descriptor without an
identifier and the catalog builder drops it.
"""

from __future__ import annotations

import configparser
import plistlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol
from xml.parsers.expat import ExpatError

import structlog

from lodestar.index.models import EPOCH, ResourceDescriptor

logger = structlog.get_logger()

APP_EXTENSION = ".app"
DESKTOP_EXTENSION = ".desktop"

# Info.plist keys tried in order for the description
_DESCRIPTION_KEYS = (
    "CFBundleGetInfoString",
    "NSHumanReadableCopyright",
    "CFBundleShortVersionString",
    "CFBundleVersion",
)


class BundleReader(Protocol):
    """Recognises one bundle convention."""

    def matches(self, path: Path, *, is_dir: bool) -> bool: ...

    def read(self, path: Path) -> ResourceDescriptor: ...


def _mtime(path: Path) -> datetime:
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        return EPOCH


def _as_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class AppBundleReader:
    """Reads ``*.app`` directories via their Info.plist."""

    extension = APP_EXTENSION

    def matches(self, path: Path, *, is_dir: bool) -> bool:
        return is_dir and path.suffix.lower() == self.extension

    def read(self, path: Path) -> ResourceDescriptor:
        name = path.stem
        info = self._load_info(path)

        identifier = _as_text(info.get("CFBundleIdentifier"))
        display_name = _as_text(info.get("CFBundleDisplayName")) or _as_text(
            info.get("CFBundleName")
        )
        description = next(
            (d for d in (_as_text(info.get(k)) for k in _DESCRIPTION_KEYS) if d), None
        )
        category = _as_text(info.get("LSApplicationCategoryType"))

        return ResourceDescriptor(
            location=path,
            identifier=identifier,
            name=name,
            display_name=display_name,
            description=description,
            categories=(category,) if category else (),
            last_modified=_mtime(path),
        )

    @staticmethod
    def _load_info(path: Path) -> dict[str, Any]:
        plist_path = path / "Contents" / "Info.plist"
        try:
            with plist_path.open("rb") as f:
                data = plistlib.load(f)
        except FileNotFoundError:
            logger.debug("manifest_missing", path=str(path))
            return {}
        except (OSError, plistlib.InvalidFileException, ExpatError, ValueError) as e:
            logger.debug("manifest_unreadable", path=str(path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}


class DesktopEntryReader:
    """Reads freedesktop ``*.desktop`` application entries."""

    extension = DESKTOP_EXTENSION
    _GROUP = "Desktop Entry"

    def matches(self, path: Path, *, is_dir: bool) -> bool:
        return not is_dir and path.suffix.lower() == self.extension

    def read(self, path: Path) -> ResourceDescriptor:
        name = path.stem
        entry = self._load_entry(path)

        hidden = entry.get("NoDisplay", "").lower() == "true" or (
            entry.get("Hidden", "").lower() == "true"
        )
        is_app = entry.get("Type", "Application") == "Application"
        identifier = name if entry and is_app and not hidden else None

        return ResourceDescriptor(
            location=path,
            identifier=identifier,
            name=name,
            display_name=_as_text(entry.get("Name")),
            description=_as_text(entry.get("Comment")) or _as_text(entry.get("GenericName")),
            categories=_split_list(entry.get("Categories", "")),
            extra_keywords=_split_list(entry.get("Keywords", "")),
            last_modified=_mtime(path),
        )

    def _load_entry(self, path: Path) -> dict[str, str]:
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        try:
            with path.open(encoding="utf-8", errors="replace") as f:
                parser.read_file(f)
        except (OSError, configparser.Error) as e:
            logger.debug("manifest_unreadable", path=str(path), error=str(e))
            return {}
        if not parser.has_section(self._GROUP):
            return {}
        return dict(parser.items(self._GROUP))


def _split_list(value: str) -> tuple[str, ...]:
    """Split a freedesktop ``a;b;c;`` list."""
    return tuple(part.strip() for part in value.split(";") if part.strip())


def default_readers() -> tuple[BundleReader, ...]:
    return (AppBundleReader(), DesktopEntryReader())
