"""
test_address.py — Unit tests for gridfill.address.

Covers:
  - parse_address: plain, ranged, sheet-qualified, quoted sheets, "$" anchors
  - default sheet selection with and without a workbook
  - defined-name substitution (one level only)
  - permissive order (end before start is kept)
  - error paths
  - format_address and parse/format agreement
"""
from __future__ import annotations

import pytest

from gridfill.address import (
    CellAddress,
    RangeAddress,
    format_address,
    parse_address,
    parse_cell,
    resolve_defined_name,
    split_sheet,
)
from gridfill.document import Document
from gridfill.errors import AddressError, BAD_ADDRESS


def _doc() -> Document:
    doc = Document(["Sheet1", "Sheet2", "My Sheet"])
    doc.set_defined_name_text("Total", "Sheet2!$E$5")
    doc.set_defined_name_text("Block", "'My Sheet'!$B$2:$C$4")
    return doc


# ══════════════════════════════════════════════════════════════════════════════
# PARSING
# ══════════════════════════════════════════════════════════════════════════════

class TestParse:
    def test_single_cell_without_workbook(self):
        rng = parse_address("A1")
        assert rng == RangeAddress("", 1, 1, 1, 1)
        assert rng.is_single_cell

    def test_range_defaults_to_first_sheet(self):
        rng = parse_address("B2:D4", _doc())
        assert rng == RangeAddress("Sheet1", 2, 2, 4, 4)
        assert not rng.is_single_cell

    def test_sheet_qualified(self):
        assert parse_address("Sheet2!B2:D4", _doc()) == RangeAddress("Sheet2", 2, 2, 4, 4)

    def test_quoted_sheet_with_space(self):
        rng = parse_address("'My Sheet'!C3")
        assert rng.sheet == "My Sheet"
        assert (rng.col1, rng.row1) == (3, 3)

    def test_quoted_sheet_escaped_quote(self):
        assert parse_address("'It''s'!A1").sheet == "It's"

    def test_dollar_anchors_ignored(self):
        assert parse_address("$B$2:$D$4") == parse_address("B2:D4")

    def test_lowercase_letters(self):
        assert parse_address("ab10") == RangeAddress("", 28, 10, 28, 10)

    def test_last_column(self):
        assert parse_address("XFD1").col1 == 16384

    def test_end_before_start_is_kept(self):
        rng = parse_address("D4:B2")
        assert (rng.col1, rng.row1, rng.col2, rng.row2) == (4, 4, 2, 2)

    def test_parse_cell_returns_start(self):
        assert parse_cell("C7:D9", _doc()) == CellAddress("Sheet1", 3, 7)


class TestDefinedNames:
    def test_name_replaces_text(self):
        assert parse_address("Total", _doc()) == RangeAddress("Sheet2", 5, 5, 5, 5)

    def test_name_with_quoted_sheet(self):
        assert parse_address("Block", _doc()) == RangeAddress("My Sheet", 2, 2, 3, 4)

    def test_name_lookup_is_case_sensitive(self):
        with pytest.raises(AddressError):
            parse_address("total", _doc())

    def test_substitution_is_not_recursive(self):
        doc = _doc()
        doc.set_defined_name_text("Alias", "Total")
        with pytest.raises(AddressError):
            parse_address("Alias", doc)

    def test_first_match_wins(self):
        doc = Document(["S"])
        doc._defined_names.append(["Dup", "S!$A$1"])
        doc._defined_names.append(["Dup", "S!$B$2"])
        assert parse_address("Dup", doc) == RangeAddress("S", 1, 1, 1, 1)

    def test_resolve_defined_name(self):
        doc = _doc()
        assert resolve_defined_name(doc, "Total") == RangeAddress("Sheet2", 5, 5, 5, 5)
        assert resolve_defined_name(doc, "Missing") is None


class TestParseErrors:
    @pytest.mark.parametrize("text", ["", "   ", "12", "A", "A0", "XFE1", "A1:B2:C3", "Sheet1!"])
    def test_rejected(self, text):
        with pytest.raises(AddressError) as ei:
            parse_address(text)
        assert ei.value.code == BAD_ADDRESS

    def test_unknown_name_reports_address(self):
        with pytest.raises(AddressError) as ei:
            parse_address("NoSuchName1x", _doc())
        assert ei.value.details["address"] == "NoSuchName1x"


# ══════════════════════════════════════════════════════════════════════════════
# SHEET SPLITTING / FORMATTING
# ══════════════════════════════════════════════════════════════════════════════

def test_split_sheet():
    assert split_sheet("A1") == (None, "A1")
    assert split_sheet("Data!A1:B2") == ("Data", "A1:B2")
    assert split_sheet("'a!b'!C3") == ("a!b", "C3")


def test_format_plain_and_fixed():
    rng = RangeAddress("Sheet1", 1, 1, 3, 1)
    assert format_address(rng) == "Sheet1!A1:C1"
    assert format_address(rng, fixed=True) == "Sheet1!$A$1:$C$1"
    assert format_address(rng, include_sheet=False) == "A1:C1"


def test_format_parsed_single_cell_without_sheet():
    assert format_address(parse_address("A1")) == "A1"


def test_name_parses_like_its_text():
    doc = _doc()
    doc.set_defined_name_text("Total", "Sheet1!C3")
    assert parse_address("Total", doc) == parse_address("Sheet1!C3", doc)


def test_format_single_cell_omits_end():
    assert format_address(RangeAddress("S", 2, 2, 2, 2)) == "S!B2"


def test_format_quotes_sheet_with_space():
    assert format_address(RangeAddress("My Sheet", 1, 1, 1, 1)) == "'My Sheet'!A1"


def test_format_without_sheet_name():
    assert format_address(RangeAddress("", 5, 8, 6, 9)) == "E8:F9"


def test_parse_format_agree():
    for text in ["Sheet1!B2:D4", "'My Sheet'!$A$1:$C$1", "S!XFD1048576"]:
        rng = parse_address(text)
        assert parse_address(format_address(rng, fixed=True)) == rng


def test_shifted_and_grown():
    rng = RangeAddress("S", 1, 2, 3, 4)
    assert rng.shifted(rows=2) == RangeAddress("S", 1, 4, 3, 6)
    assert rng.shifted(cols=1) == RangeAddress("S", 2, 2, 4, 4)
    assert rng.grown(rows=1) == RangeAddress("S", 1, 2, 3, 5)
