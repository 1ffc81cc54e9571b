"""Tests for bundle readers."""

from __future__ import annotations

from pathlib import Path

from lodestar.index.bundles import AppBundleReader, DesktopEntryReader, default_readers


class TestAppBundleReader:
    """Tests for *.app bundles."""

    def test_matches_only_app_directories(self, tmp_path: Path) -> None:
        reader = AppBundleReader()
        assert reader.matches(tmp_path / "Safari.app", is_dir=True)
        assert reader.matches(tmp_path / "Old.APP", is_dir=True)
        assert not reader.matches(tmp_path / "Safari.app", is_dir=False)
        assert not reader.matches(tmp_path / "Safari", is_dir=True)

    def test_given_info_plist_when_read_then_fields_extracted(self, tmp_path: Path, make_app) -> None:
        # Given
        bundle = make_app(
            tmp_path,
            "Safari",
            "com.apple.Safari",
            info={
                "CFBundleDisplayName": "Safari Browser",
                "CFBundleGetInfoString": "Browse the web",
                "LSApplicationCategoryType": "public.app-category.productivity",
            },
        )

        # When
        descriptor = AppBundleReader().read(bundle)

        # Then
        assert descriptor.identifier == "com.apple.Safari"
        assert descriptor.name == "Safari"
        assert descriptor.display_name == "Safari Browser"
        assert descriptor.description == "Browse the web"
        assert descriptor.categories == ("public.app-category.productivity",)
        assert descriptor.location == bundle
        assert not descriptor.is_malformed

    def test_given_no_manifest_when_read_then_malformed(self, tmp_path: Path, make_app) -> None:
        bundle = make_app(tmp_path, "Ghost", with_manifest=False)

        descriptor = AppBundleReader().read(bundle)

        assert descriptor.identifier is None
        assert descriptor.is_malformed

    def test_given_garbage_manifest_when_read_then_malformed(self, tmp_path: Path) -> None:
        # Given
        bundle = tmp_path / "Garbage.app"
        (bundle / "Contents").mkdir(parents=True)
        (bundle / "Contents" / "Info.plist").write_bytes(b"\x00\x01 not a plist")

        # When
        descriptor = AppBundleReader().read(bundle)

        # Then
        assert descriptor.is_malformed
        assert descriptor.name == "Garbage"

    def test_falls_back_to_bundle_name(self, tmp_path: Path, make_app) -> None:
        bundle = make_app(tmp_path, "Notes", "com.apple.Notes")
        descriptor = AppBundleReader().read(bundle)
        assert descriptor.display_name == "Notes"
        assert descriptor.description is None


class TestDesktopEntryReader:
    """Tests for freedesktop entries."""

    def test_matches_only_desktop_files(self, tmp_path: Path) -> None:
        reader = DesktopEntryReader()
        assert reader.matches(tmp_path / "firefox.desktop", is_dir=False)
        assert not reader.matches(tmp_path / "firefox.desktop", is_dir=True)
        assert not reader.matches(tmp_path / "firefox.txt", is_dir=False)

    def test_given_entry_when_read_then_fields_extracted(self, tmp_path: Path, make_desktop) -> None:
        # Given
        path = make_desktop(
            tmp_path,
            "org.gnome.gedit",
            Name="Text Editor",
            Comment="Edit text files",
            Categories="Utility;TextEditor;",
            Keywords="text;plaintext;",
        )

        # When
        descriptor = DesktopEntryReader().read(path)

        # Then
        assert descriptor.identifier == "org.gnome.gedit"
        assert descriptor.name == "org.gnome.gedit"
        assert descriptor.display_name == "Text Editor"
        assert descriptor.description == "Edit text files"
        assert descriptor.categories == ("Utility", "TextEditor")
        assert descriptor.extra_keywords == ("text", "plaintext")

    def test_generic_name_used_without_comment(self, tmp_path: Path, make_desktop) -> None:
        path = make_desktop(tmp_path, "firefox", GenericName="Web Browser")
        assert DesktopEntryReader().read(path).description == "Web Browser"

    def test_given_no_display_entry_then_malformed(self, tmp_path: Path, make_desktop) -> None:
        path = make_desktop(tmp_path, "helper", NoDisplay="true")
        assert DesktopEntryReader().read(path).is_malformed

    def test_given_hidden_entry_then_malformed(self, tmp_path: Path, make_desktop) -> None:
        path = make_desktop(tmp_path, "removed", Hidden="True")
        assert DesktopEntryReader().read(path).is_malformed

    def test_given_link_entry_then_malformed(self, tmp_path: Path, make_desktop) -> None:
        path = make_desktop(tmp_path, "homepage", Type="Link")
        assert DesktopEntryReader().read(path).is_malformed

    def test_given_missing_group_then_malformed(self, tmp_path: Path) -> None:
        path = tmp_path / "odd.desktop"
        path.write_text("[Something Else]\nName=Odd\n")
        assert DesktopEntryReader().read(path).is_malformed

    def test_given_unparseable_file_then_malformed(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.desktop"
        path.write_text("Name=No section header\n")
        assert DesktopEntryReader().read(path).is_malformed


def test_default_readers_cover_both_conventions() -> None:
    kinds = {type(r) for r in default_readers()}
    assert kinds == {AppBundleReader, DesktopEntryReader}
