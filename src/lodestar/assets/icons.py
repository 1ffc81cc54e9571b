"""Icon loading with Pillow.

Resolves the icon file a bundle declares, decodes it and shrinks it to a
square thumbnail. Bundles without a usable icon get a generated placeholder
tile keyed on their id.
"""

from __future__ import annotations

import configparser
import plistlib
from pathlib import Path
from xml.parsers.expat import ExpatError

import structlog
from PIL import Image, ImageDraw, UnidentifiedImageError

from lodestar.index.bundles import APP_EXTENSION, DESKTOP_EXTENSION
from lodestar.index.models import Resource

logger = structlog.get_logger()

_PLACEHOLDER_BG = (60, 60, 60, 255)
_PLACEHOLDER_FG = (200, 200, 200, 255)

ICON_THEME_DIRS: tuple[Path, ...] = (
    Path("/usr/share/icons/hicolor/256x256/apps"),
    Path("/usr/share/icons/hicolor/128x128/apps"),
    Path("/usr/share/icons/hicolor/48x48/apps"),
    Path("/usr/share/pixmaps"),
)


def placeholder_letter(resource_id: str) -> str:
    """"com.apple.Safari" -> "S". Ids without dots use their first letter."""
    resource_id = resource_id.strip()
    tail = resource_id.rsplit(".", 1)[-1].strip() or resource_id
    return (tail[:1] or "?").upper()


class IconLoader:
    """Callable that turns a Resource into a ``size x size`` RGBA image."""

    def __init__(self, size: int = 24, theme_dirs: tuple[Path, ...] = ICON_THEME_DIRS) -> None:
        self.size = size
        self.theme_dirs = theme_dirs

    def __call__(self, resource: Resource) -> Image.Image:
        return self.load(resource)

    def load(self, resource: Resource) -> Image.Image:
        icon_path = self.resolve_icon_path(resource.location)
        if icon_path is None:
            return self.placeholder(resource.id)
        try:
            with Image.open(icon_path) as img:
                img.load()
                icon = img.convert("RGBA")
        except (OSError, UnidentifiedImageError, ValueError) as e:
            logger.debug("icon_unreadable", path=str(icon_path), error=str(e))
            return self.placeholder(resource.id)
        icon.thumbnail((self.size, self.size))
        return icon

    def resolve_icon_path(self, location: Path) -> Path | None:
        suffix = location.suffix.lower()
        if suffix == APP_EXTENSION:
            return self._app_icon(location)
        if suffix == DESKTOP_EXTENSION:
            return self._desktop_icon(location)
        return None

    def placeholder(self, resource_id: str) -> Image.Image:
        """Grey tile with the first letter of the id's last segment."""
        img = Image.new("RGBA", (self.size, self.size), _PLACEHOLDER_BG)
        letter = placeholder_letter(resource_id)
        draw = ImageDraw.Draw(img)
        draw.text((self.size // 3, self.size // 4), letter, fill=_PLACEHOLDER_FG)
        return img

    @staticmethod
    def _app_icon(bundle: Path) -> Path | None:
        resources = bundle / "Contents" / "Resources"
        icon_name = "AppIcon"
        try:
            with (bundle / "Contents" / "Info.plist").open("rb") as f:
                info = plistlib.load(f)
            declared = info.get("CFBundleIconFile") if isinstance(info, dict) else None
            if isinstance(declared, str) and declared:
                icon_name = declared
        except (OSError, plistlib.InvalidFileException, ExpatError, ValueError):
            pass
        for candidate in (resources / icon_name, resources / f"{icon_name}.icns"):
            if candidate.is_file():
                return candidate
        return None

    def _desktop_icon(self, entry: Path) -> Path | None:
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        try:
            with entry.open(encoding="utf-8", errors="replace") as f:
                parser.read_file(f)
            icon = parser.get("Desktop Entry", "Icon", fallback="").strip()
        except (OSError, configparser.Error):
            return None
        if not icon:
            return None
        icon_path = Path(icon)
        if icon_path.is_absolute():
            return icon_path if icon_path.is_file() else None
        for theme_dir in self.theme_dirs:
            candidate = theme_dir / f"{icon}.png"
            if candidate.is_file():
                return candidate
        return None
