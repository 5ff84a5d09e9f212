"""
Tests for the exifread-based tag reader.

exifread is patched with lightweight tag doubles; no image files are needed.
"""

from __future__ import annotations

import pytest

from snapname import reader
from snapname.reader import describe, group_tags, read_tag_groups


class FakeRatio:
    def __init__(self, num, den):
        self.num = num
        self.den = den


class FakeTag:
    """Stands in for exifread.classes.IfdTag: printable, with .values."""

    def __init__(self, printable, values=None):
        self.printable = printable
        self.values = values if values is not None else []

    def __str__(self):
        return self.printable


class TestDescribe:
    def test_plain_tag(self):
        assert describe("Make", FakeTag("SONY ")) == "SONY"

    def test_exposure_time_gets_unit(self):
        assert describe("ExposureTime", FakeTag("1/200", [FakeRatio(1, 200)])) == "1/200 sec"

    def test_f_number(self):
        assert describe("FNumber", FakeTag("14/5", [FakeRatio(14, 5)])) == "f/2.8"
        assert describe("FNumber", FakeTag("8", [FakeRatio(8, 1)])) == "f/8"

    def test_focal_length(self):
        assert describe("FocalLength", FakeTag("206", [FakeRatio(206, 1)])) == "206 mm"

    def test_plain_number_values(self):
        assert describe("FocalLength", FakeTag("50", [50])) == "50 mm"

    def test_cfa_skips_repeat_dimensions(self):
        tag = FakeTag("[2, 0, 2, 0, 0, 1, 1, 2]", [2, 0, 2, 0, 0, 1, 1, 2])
        assert describe("CFAPattern", tag) == "Red,Green,Green,Blue"

    def test_bad_ratio_falls_back_to_text(self):
        assert describe("FNumber", FakeTag("0/0", [FakeRatio(0, 0)])) == "0/0"
        assert describe("FocalLength", FakeTag("?", [])) == "?"


class TestGroupTags:
    def test_groups_by_prefix(self):
        tags = {
            "Image Make": FakeTag("SONY"),
            "EXIF ISOSpeedRatings": FakeTag("3200"),
            "EXIF FNumber": FakeTag("14/5", [FakeRatio(14, 5)]),
            "Thumbnail ImageWidth": FakeTag("160"),
        }
        groups = {g.name: g.tags for g in group_tags(tags)}
        assert groups["Image"] == [("Make", "SONY")]
        assert groups["EXIF"] == [("ISOSpeedRatings", "3200"), ("FNumber", "f/2.8")]
        assert groups["Thumbnail"] == [("ImageWidth", "160")]

    def test_keys_without_group_skipped(self):
        assert group_tags({"JPEGThumbnail": b"\xff\xd8"}) == []


class TestReadTagGroups:
    def test_reads_file(self, tmp_path, monkeypatch):
        photo = tmp_path / "a.jpg"
        photo.write_bytes(b"\xff\xd8")
        seen = {}

        def fake_process_file(f, details=True):
            seen["details"] = details
            return {"Image Model": FakeTag("ILCE-7M3")}

        monkeypatch.setattr(reader.exifread, "process_file", fake_process_file)
        groups = read_tag_groups(str(photo))
        assert groups[0].name == "Image"
        assert groups[0].tags == [("Model", "ILCE-7M3")]
        assert seen["details"] is False

    def test_no_exif(self, tmp_path, monkeypatch):
        photo = tmp_path / "a.tif"
        photo.write_bytes(b"II*\x00")
        monkeypatch.setattr(reader.exifread, "process_file", lambda f, details=True: {})
        assert read_tag_groups(str(photo)) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_tag_groups(str(tmp_path / "gone.jpg"))
