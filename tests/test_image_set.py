"""
Test Image-Set Indexer

Filename parsing and grouping of scan files by position and kind.
"""

import logging

import pytest

from core.exceptions import ImageSetError, IoError
from core.types import ImageKind
from storage.image_set import ImageSet, ImageSetEntry
from storage.naming import FramePattern, default_pattern, format_frame_name, parse_frame_name


def touch(directory, *names):
    for name in names:
        (directory / name).write_bytes(b"")


class TestNaming:

    def test_parse_left_frame(self):
        assert parse_frame_name("scan190aL.yuv") == (0x190a, ImageKind.LEFT)

    @pytest.mark.parametrize("name, expected", [
        ("scan0000N.yuv", (0, ImageKind.NONE)),
        ("scan0040R.yuv", (0x40, ImageKind.RIGHT)),
        ("scan18c0W.yuv", (0x18c0, ImageKind.RAW)),
        ("0abcL.yuv", (0xabc, ImageKind.LEFT)),
    ])
    def test_parse_kinds(self, name, expected):
        assert parse_frame_name(name) == expected

    @pytest.mark.parametrize("name", [
        "readme.txt",
        "scan190AL.yuv",      # uppercase hex
        "scan190aX.yuv",      # unknown kind
        "scan190aL.yuv.bak",  # must match at the end
        "scan19aL.yuv",       # three digits
        "scan190aL.png",
    ])
    def test_non_frames_do_not_parse(self, name):
        assert parse_frame_name(name) is None

    def test_format_is_zero_padded_lowercase(self):
        assert format_frame_name("data/scan", 0x4a, ImageKind.NONE) == "data/scan004aN.yuv"
        assert format_frame_name("s", 0x18C0, ImageKind.RIGHT) == "s18c0R.yuv"

    def test_formatted_names_parse_back(self):
        name = format_frame_name("scan", 0x1234, ImageKind.RAW)
        assert parse_frame_name(name) == (0x1234, ImageKind.RAW)

    def test_default_pattern_is_memoized(self):
        assert default_pattern() is default_pattern()

    def test_custom_extension(self):
        pattern = FramePattern(extension="raw")
        assert pattern.parse("scan0040L.raw") == (0x40, ImageKind.LEFT)
        assert pattern.parse("scan0040L.yuv") is None


class TestEntry:

    def test_complete_needs_left_right_and_ambient(self):
        entry = ImageSetEntry()
        entry.set(ImageKind.LEFT, "l")
        entry.set(ImageKind.RIGHT, "r")
        assert not entry.is_complete()
        assert entry.missing() == [ImageKind.NONE]

        entry.set(ImageKind.NONE, "n")
        assert entry.is_complete()

    def test_raw_is_not_required(self):
        entry = ImageSetEntry(raw="w")
        assert not entry.is_complete()
        assert entry.get(ImageKind.RAW) == "w"


class TestBuild:

    def test_complete_and_incomplete_positions(self, tmp_path):
        touch(tmp_path,
              "scan0000N.yuv", "scan0000L.yuv", "scan0000R.yuv",
              "scan0040N.yuv", "scan0040L.yuv", "scan0040R.yuv",
              "scan0080N.yuv", "scan0080L.yuv")

        image_set = ImageSet.build(tmp_path)

        assert image_set.summary() == {'positions': 3, 'complete': 2, 'incomplete': 1}
        assert [p for p, _ in image_set.complete_entries()] == [0, 0x40]
        assert [p for p, _ in image_set.incomplete_entries()] == [0x80]
        assert image_set[0x80].missing() == [ImageKind.RIGHT]

    def test_paths_include_directory(self, tmp_path):
        touch(tmp_path, "scan0040L.yuv")
        image_set = ImageSet.build(tmp_path)
        assert image_set[0x40].left == str(tmp_path / "scan0040L.yuv")
        assert image_set[0x40].none is None

    def test_unrecognized_files_are_logged_and_skipped(self, tmp_path, caplog):
        touch(tmp_path, "readme.txt", "scan0000N.yuv")

        with caplog.at_level(logging.INFO, logger="storage.image_set"):
            image_set = ImageSet.build(tmp_path)

        assert list(image_set) == [0]
        assert "Ignoring path readme.txt" in caplog.text

    def test_same_position_and_kind_last_wins(self, tmp_path):
        touch(tmp_path, "a0040L.yuv", "b0040L.yuv")
        image_set = ImageSet.build(tmp_path)
        assert len(image_set) == 1
        assert image_set[0x40].left in {str(tmp_path / "a0040L.yuv"), str(tmp_path / "b0040L.yuv")}

    def test_empty_directory(self, tmp_path):
        image_set = ImageSet.build(tmp_path)
        assert len(image_set) == 0
        assert image_set.summary()['complete'] == 0

    def test_missing_directory_is_an_io_error(self, tmp_path):
        with pytest.raises(ImageSetError) as excinfo:
            ImageSet.build(tmp_path / "nope")
        assert isinstance(excinfo.value, IoError)
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_add_creates_entries_lazily(self):
        image_set = ImageSet()
        assert 0x10 not in image_set
        image_set.add(0x10, ImageKind.NONE, "n")
        assert 0x10 in image_set
        assert image_set[0x10].none == "n"
