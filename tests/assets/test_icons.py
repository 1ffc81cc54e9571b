"""Tests for Pillow icon loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from lodestar.assets import icon_cache
from lodestar.assets.icons import IconLoader, placeholder_letter
from lodestar.config.models import AssetsConfig
from lodestar.index.builder import build_catalog
from lodestar.index.bundles import AppBundleReader
from lodestar.index.models import Resource


def _png(path: Path, size: int = 64, color: tuple[int, int, int] = (255, 0, 0)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (size, size), color).save(path, format="PNG")
    return path


def _resource(location: Path, name: str = "Safari") -> Resource:
    return Resource(id=f"test.{name}", name=name, display_name=name, location=location)


class TestIconLoader:
    """IconLoader resolution and decoding."""

    def test_given_declared_icon_file_when_loaded_then_thumbnail(
        self, tmp_path: Path, make_app
    ) -> None:
        # Given
        bundle = make_app(
            tmp_path, "Safari", "com.apple.Safari", info={"CFBundleIconFile": "icon.png"}
        )
        _png(bundle / "Contents" / "Resources" / "icon.png")
        loader = IconLoader(size=24)

        # When
        icon = loader(_resource(bundle))

        # Then
        assert icon.size == (24, 24)
        assert icon.mode == "RGBA"
        assert icon.getpixel((12, 12)) == (255, 0, 0, 255)

    def test_given_no_icon_when_loaded_then_placeholder(self, tmp_path: Path, make_app) -> None:
        bundle = make_app(tmp_path, "Notes", "com.apple.Notes")
        loader = IconLoader(size=32)

        icon = loader.load(_resource(bundle, "Notes"))

        assert icon.size == (32, 32)
        assert icon.getpixel((0, 0)) == (60, 60, 60, 255)

    def test_given_corrupt_icon_when_loaded_then_placeholder(
        self, tmp_path: Path, make_app
    ) -> None:
        bundle = make_app(
            tmp_path, "Broken", "com.example.broken", info={"CFBundleIconFile": "x.png"}
        )
        target = bundle / "Contents" / "Resources" / "x.png"
        target.parent.mkdir(parents=True)
        target.write_bytes(b"not an image")

        icon = IconLoader(size=16).load(_resource(bundle, "Broken"))

        assert icon.size == (16, 16)
        assert icon.getpixel((0, 0)) == (60, 60, 60, 255)

    def test_given_desktop_entry_with_absolute_icon_then_resolved(
        self, tmp_path: Path, make_desktop
    ) -> None:
        icon_path = _png(tmp_path / "icons" / "gedit.png")
        entry = make_desktop(tmp_path / "apps", "gedit", Icon=str(icon_path))

        assert IconLoader().resolve_icon_path(entry) == icon_path

    def test_given_desktop_entry_with_theme_icon_then_found_in_theme_dirs(
        self, tmp_path: Path, make_desktop
    ) -> None:
        theme = tmp_path / "theme"
        icon_path = _png(theme / "firefox.png")
        entry = make_desktop(tmp_path / "apps", "firefox", Icon="firefox")

        assert IconLoader(theme_dirs=(theme,)).resolve_icon_path(entry) == icon_path

    def test_unknown_location_kind_has_no_icon(self, tmp_path: Path) -> None:
        assert IconLoader().resolve_icon_path(tmp_path / "script.sh") is None

    def test_placeholder_handles_blank_name(self) -> None:
        assert IconLoader(size=8).placeholder("  ").size == (8, 8)

    @pytest.mark.parametrize(
        ("resource_id", "letter"),
        [
            ("com.apple.Safari", "S"),
            ("org.gnome.gedit", "G"),
            ("firefox", "F"),
            ("com.example.", "C"),
            ("  ", "?"),
        ],
    )
    def test_placeholder_letter_comes_from_last_id_segment(
        self, resource_id: str, letter: str
    ) -> None:
        assert placeholder_letter(resource_id) == letter


class TestIconCache:
    @pytest.mark.asyncio
    async def test_icon_cache_resolves_against_catalog(self, tmp_path: Path, make_app) -> None:
        # Given
        bundle = make_app(
            tmp_path, "Safari", "com.apple.Safari", info={"CFBundleIconFile": "icon.png"}
        )
        _png(bundle / "Contents" / "Resources" / "icon.png", size=128)
        catalog = build_catalog([AppBundleReader().read(bundle)])
        cache = icon_cache(lambda: catalog, AssetsConfig(icon_size=48))

        # When
        icon = await cache.get_asset("com.apple.Safari")
        missing = await cache.get_asset("com.example.missing")

        # Then
        assert icon.size == (48, 48)
        assert missing.size == (48, 48)
        assert len(cache) == 1
        cache.close()

    @pytest.mark.asyncio
    async def test_unknown_id_and_iconless_bundle_share_one_placeholder(
        self, tmp_path: Path, make_app
    ) -> None:
        # Given
        bundle = make_app(tmp_path, "Notes", "com.apple.Notes")
        catalog = build_catalog([AppBundleReader().read(bundle)])
        known = icon_cache(lambda: catalog, AssetsConfig(icon_size=24))
        unknown = icon_cache(lambda: build_catalog([]), AssetsConfig(icon_size=24))

        # When
        loaded = await known.get_asset("com.apple.Notes")
        fallback = await unknown.get_asset("com.apple.Notes")

        # Then
        assert loaded.tobytes() == fallback.tobytes()
        assert len(unknown) == 0
        known.close()
        unknown.close()
