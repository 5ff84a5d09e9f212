"""
Tests for the naming pattern compiler.

Covers:
  - Segment parsing (literals, fields, date fields) and its edge cases
  - Rendering against records, including missing and unknown codes
  - Determinism and sharing one compiled pattern across threads
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import make_record
from snapname.compiler import (
    DateField,
    Field,
    Literal,
    compile_directory_patterns,
    compile_pattern,
    parse_pattern,
)


@pytest.fixture()
def record(registry):
    return make_record(
        registry,
        et="1 hour 2 minutes 3 seconds",
        **{"is": "3200"},
        fl="206 mm",
        dt="2021:10:26 00:00:00",
        mk="SONY",
    )


# ─── Parsing ────────────────────────────────────────────────────────────


class TestParsePattern:
    def test_empty(self):
        assert parse_pattern("") == ()

    def test_literal_only(self):
        assert parse_pattern("Holiday 2021") == (Literal("Holiday 2021"),)

    def test_fields_and_literals(self):
        assert parse_pattern("$et_$is_$fl_Image") == (
            Field("et"),
            Literal("_"),
            Field("is"),
            Literal("_"),
            Field("fl"),
            Literal("_Image"),
        )

    def test_date_field(self):
        assert parse_pattern("$dt[yyyy-MM-dd]_x") == (DateField("dt", "yyyy-MM-dd"), Literal("_x"))

    def test_date_without_brackets_is_a_field(self):
        assert parse_pattern("$dt-") == (Field("dt"), Literal("-"))

    def test_date_at_end_is_a_field(self):
        assert parse_pattern("a$dt") == (Literal("a"), Field("dt"))

    def test_brackets_only_for_date_code(self):
        assert parse_pattern("$mk[x]") == (Field("mk"), Literal("[x]"))

    def test_unterminated_date_pattern(self):
        assert parse_pattern("$dt[yyyy") == ()
        assert parse_pattern("x_$dt[yyyy") == (Literal("x_"),)

    def test_trailing_sigil(self):
        assert parse_pattern("name$") == (Literal("name"), Field(""))

    def test_trailing_partial_code(self):
        assert parse_pattern("name$m") == (Literal("name"), Field("m"))

    def test_adjacent_fields(self):
        assert parse_pattern("$mk$md") == (Field("mk"), Field("md"))

    def test_sigil_inside_code(self):
        assert parse_pattern("$$mk") == (Field("$m"), Literal("k"))


# ─── Rendering ──────────────────────────────────────────────────────────


class TestRender:
    def test_default_file_pattern(self, record):
        assert compile_pattern("$et_$is_$fl_Image")(record) == "1h2m3s_iso3200_206mm_Image"

    def test_date_pattern(self, record):
        assert compile_pattern("$dt[yyyy-MM-dd]")(record) == "2021-10-26"

    def test_date_without_pattern_uses_file_value(self, record):
        assert compile_pattern("$dt")(record) == "10/26/2021 00:00"

    def test_empty_pattern(self, record, registry):
        compiled = compile_pattern("")
        assert compiled(record) == ""
        assert compiled(make_record(registry)) == ""

    def test_none_pattern(self, record):
        assert compile_pattern(None)(record) == ""

    def test_literal_only(self, record, registry):
        compiled = compile_pattern("Holiday")
        assert compiled(record) == "Holiday"
        assert compiled(make_record(registry)) == "Holiday"

    def test_missing_property_is_empty(self, registry):
        assert compile_pattern("[$mk]")(make_record(registry)) == "[]"

    def test_missing_date_is_empty(self, registry):
        assert compile_pattern("<$dt[yyyy]>")(make_record(registry)) == "<>"

    def test_unknown_code_is_empty(self, record, registry, caplog):
        compiled = compile_pattern("a$zzb", registry)
        assert compiled(record) == "ab"
        assert "unknown code $zz" in caplog.text

    def test_partial_code_is_empty(self, record):
        assert compile_pattern("$mk$")(record) == "SONY"
        assert compile_pattern("$mk$m")(record) == "SONY"

    def test_unterminated_date_renders_nothing(self, record):
        assert compile_pattern("$mk_$dt[yyyy")(record) == "SONY_"

    def test_codes(self):
        assert compile_pattern("$dt[yyyy]/$mk_x").codes == ["dt", "mk"]

    def test_repr(self):
        assert repr(compile_pattern("$mk")) == "CompiledPattern('$mk')"


class TestPurity:
    def test_same_pattern_compiled_twice(self, record):
        a = compile_pattern("$dt[yyyyMMdd]_$mk_$et")
        b = compile_pattern("$dt[yyyyMMdd]_$mk_$et")
        assert a(record) == b(record) == "20211026_SONY_1h2m3s"

    def test_repeated_calls(self, record):
        compiled = compile_pattern("$is-$fl")
        assert [compiled(record) for _ in range(3)] == ["iso3200-206mm"] * 3

    def test_shared_across_threads(self, registry):
        compiled = compile_pattern("$mk_$is")
        records = [make_record(registry, f"/p/{i}.ARW", mk=f"M{i}", **{"is": str(100 * i)}) for i in range(1, 50)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(compiled, records))
        assert results == [f"M{i}_iso{100 * i}" for i in range(1, 50)]


class TestDirectoryPatterns:
    def test_split_on_semicolon(self, record):
        patterns = compile_directory_patterns("$dt[yyyy];$dt[MM];$mk")
        assert [p(record) for p in patterns] == ["2021", "10", "SONY"]

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_no_directories(self, text):
        assert compile_directory_patterns(text) == []
