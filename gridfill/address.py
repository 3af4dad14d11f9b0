"""
gridfill/address.py — Reference parsing and formatting.

Grammar:
  ["Sheet Name"|'Sheet Name'|Sheet!]Col Row[:Col Row]

  - Sheet token is optional and may be quoted; absent means the workbook's
    first sheet.
  - Column letters are case-insensitive, capped at MAX_COL.
  - "$" anchors are accepted and dropped.
  - A token that exactly matches a defined name is replaced by the name's
    reference text first (one level, never recursive).

Parsing is permissive about order: "D4:B2" keeps start=D4, end=B2.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Optional, Tuple

from .columns import MAX_COL, col_index_to_letters, col_letters_to_index
from .errors import AddressError
from .names import lookup_defined_name


_COL_PART_RE = re.compile(r"\$*([A-Za-z]+)")
_ROW_PART_RE = re.compile(r"\$*([0-9]+)")

_SHEET_STRIP = " \"'"


@dataclass(frozen=True)
class CellAddress:
    sheet: str
    col: int
    row: int = 1

    @property
    def column_letters(self) -> str:
        return col_index_to_letters(self.col)


@dataclass(frozen=True)
class RangeAddress:
    sheet: str
    col1: int
    row1: int
    col2: int
    row2: int

    @property
    def start(self) -> CellAddress:
        return CellAddress(self.sheet, self.col1, self.row1)

    @property
    def end(self) -> CellAddress:
        return CellAddress(self.sheet, self.col2, self.row2)

    @property
    def is_single_cell(self) -> bool:
        return self.col1 == self.col2 and (self.row1 == self.row2 or self.row2 == 0)

    def shifted(self, rows: int = 0, cols: int = 0) -> "RangeAddress":
        """Move both corners. Used only by structural edits."""
        return replace(
            self,
            row1=self.row1 + rows,
            row2=self.row2 + rows,
            col1=self.col1 + cols,
            col2=self.col2 + cols,
        )

    def grown(self, rows: int = 0, cols: int = 0) -> "RangeAddress":
        """Move only the end corner."""
        return replace(self, row2=self.row2 + rows, col2=self.col2 + cols)


# ── Parsing ───────────────────────────────────────────────────────────────────

def split_sheet(text: str) -> Tuple[Optional[str], str]:
    """
    Split "Sheet!A1" into (sheet, "A1").

    The separator is the first "!" outside quotes. Returns (None, text) when
    there is no sheet token.
    """
    s = text.strip()
    if s[:1] in ("'", '"'):
        quote = s[0]
        i = 1
        while i < len(s):
            if s[i] == quote:
                if i + 1 < len(s) and s[i + 1] == quote:
                    i += 2
                    continue
                break
            i += 1
        rest = s[i + 1:]
        if rest.startswith("!"):
            sheet = s[1:i].replace(quote * 2, quote)
            return sheet.strip(), rest[1:]
        # unterminated or no "!" after the quote: fall through to plain split
    idx = s.find("!")
    if idx < 0:
        return None, s
    sheet = s[:idx].strip(_SHEET_STRIP)
    return (sheet or None), s[idx + 1:]


def _parse_cell_token(token: str, source: str) -> Tuple[int, int]:
    """Return (col, row) for a single "A1" / "$A$1" token."""
    m_col = _COL_PART_RE.search(token)
    m_row = _ROW_PART_RE.search(token)
    if m_col is None:
        raise AddressError(
            f"Address {source!r} is wrong or named range not found",
            {"address": source, "token": token},
        )
    col = col_letters_to_index(m_col.group(1))
    if col > MAX_COL:
        raise AddressError(
            f"Column {m_col.group(1)!r} is beyond the last column",
            {"address": source, "column": col, "max_col": MAX_COL},
        )
    if m_row is None:
        raise AddressError(
            f"Address {source!r} is wrong or named range not found",
            {"address": source, "token": token},
        )
    row = int(m_row.group(1))
    if row < 1:
        raise AddressError(
            f"Row numbers must be >= 1: {source!r}",
            {"address": source, "row": row},
        )
    return col, row


def parse_address(text: str, workbook: Any = None, resolve_names: bool = True) -> RangeAddress:
    """
    Parse reference text into a RangeAddress.

    workbook is optional; when given it supplies defined names and the
    default sheet (its first worksheet). Without it the sheet defaults to "".
    resolve_names=False skips the defined-name substitution, for text that
    already came out of the name table.
    """
    if text is None or text.strip() == "":
        raise AddressError("Address must not be empty", {"address": text})

    ref = text
    if workbook is not None and resolve_names:
        named = lookup_defined_name(workbook, text)
        if named is not None:
            ref = named

    sheet, cells = split_sheet(ref)
    if sheet is None:
        first = workbook.first_sheet if workbook is not None else None
        sheet = first.name if first is not None else ""

    parts = cells.strip(" !").split(":")
    if len(parts) == 1:
        col, row = _parse_cell_token(parts[0], text)
        return RangeAddress(sheet, col, row, col, row)
    if len(parts) == 2:
        col1, row1 = _parse_cell_token(parts[0], text)
        col2, row2 = _parse_cell_token(parts[1], text)
        return RangeAddress(sheet, col1, row1, col2, row2)

    raise AddressError(f"Address {text!r} has too many parts", {"address": text})


def parse_cell(text: str, workbook: Any = None) -> CellAddress:
    """Parse reference text and return its start cell."""
    return parse_address(text, workbook).start


def resolve_defined_name(workbook: Any, name: str) -> Optional[RangeAddress]:
    """
    Range a defined name points at, or None when the name is unknown.
    Used to bind a data field name directly to a target cell.
    """
    text = lookup_defined_name(workbook, name)
    if text is None:
        return None
    return parse_address(text, workbook, resolve_names=False)


# ── Formatting ────────────────────────────────────────────────────────────────

def quote_sheet(name: str) -> str:
    if " " in name:
        return "'" + name.replace("'", "''") + "'"
    return name


def format_address(rng: RangeAddress, fixed: bool = False, include_sheet: bool = True) -> str:
    """
    Rebuild "Sheet!A1[:B2]".

    The end part is omitted for single-cell ranges. fixed=True anchors every
    column and row with "$". Sheet names containing a space are quoted.
    """
    mark = "$" if fixed else ""
    out = f"{mark}{col_index_to_letters(rng.col1)}{mark}{rng.row1}"
    if not rng.is_single_cell:
        out += f":{mark}{col_index_to_letters(rng.col2)}{mark}{rng.row2}"
    if include_sheet and rng.sheet.strip():
        out = f"{quote_sheet(rng.sheet)}!{out}"
    return out
