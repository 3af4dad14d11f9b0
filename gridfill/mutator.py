"""
gridfill/mutator.py — Row/column insertion inside a worksheet region.

Inserting a row below a line of a table means, for every column of the
table:
  1. shift merged regions anchored in that column at/after the insertion
     point down by `step`;
  2. clone every cell from the bottom of the sheet up to the insertion point
     `step` rows further down (bottom-up, so nothing is overwritten before
     it is copied);
  3. when the displaced line was a taller merged block (step > 1), clone its
     merge records by `step` so the new line has the same shape;
  4. shift defined names anchored in that column at/after the insertion
     point down by `step`.
Afterwards, defined names spanning exactly the table's columns and covering
the insertion row grow by `step`, so a name over a growing table keeps
covering all of it.

`step` is the merge-aware height of the line at the table's first column:
a two-row merged record moves as one two-row block.

Columns outside the table are never touched. Insertion re-clones every cell
below the insertion point: cost is O(rows below x table width).

insert_column_right is the transposed mirror.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Iterator, Tuple

from .address import RangeAddress, format_address, parse_address, split_sheet
from .document import CellKey, Worksheet
from .errors import AddressError
from .merges import MergedRegionIndex

logger = logging.getLogger(__name__)

_PLAIN_RANGE_RE = re.compile(r"\$?[A-Za-z]+\$?[0-9]+(:\$?[A-Za-z]+\$?[0-9]+)?")


class StructuralMutator:
    def __init__(self, workbook: Any, sheet: str):
        self.workbook = workbook
        self.sheet = sheet
        self.merges = MergedRegionIndex(workbook, sheet)

    # ── Public API ────────────────────────────────────────────────────────────

    def insert_row_below(self, at_row: int, col_start: int, col_end: int) -> int:
        """
        Open a merge-aware gap below `at_row` across col_start..col_end.
        Returns the number of rows inserted (0 when the sheet is missing).
        """
        ws = self.workbook.get_worksheet(self.sheet)
        if ws is None:
            logger.debug("insert_row_below: no sheet %r, nothing to do", self.sheet)
            return 0

        new_row = self.merges.next_row(at_row, col_start)
        step = new_row - at_row
        last_row = ws.max_row

        for c in range(col_start, col_end + 1):
            self._shift_merges(ws, c, new_row, step, down=True)
            for r in range(last_row + step, new_row - 1, -1):
                self._copy_cell(ws, (r - step, c), (r, c))
            if step > 1:
                self._clone_merges(ws, at_row, c, step, down=True)
            self._shift_names(c, new_row, step, down=True)

        self._extend_names(at_row, col_start, col_end, step, down=True)
        logger.debug(
            "inserted %d row(s) below %s!%d for columns %d..%d",
            step, self.sheet, at_row, col_start, col_end,
        )
        return step

    def insert_column_right(self, at_col: int, row_start: int, row_end: int) -> int:
        """
        Open a merge-aware gap right of `at_col` across row_start..row_end.
        Returns the number of columns inserted (0 when the sheet is missing).
        """
        ws = self.workbook.get_worksheet(self.sheet)
        if ws is None:
            logger.debug("insert_column_right: no sheet %r, nothing to do", self.sheet)
            return 0

        new_col = self.merges.next_col(row_start, at_col)
        step = new_col - at_col
        last_col = ws.max_col

        for r in range(row_start, row_end + 1):
            self._shift_merges(ws, r, new_col, step, down=False)
            for c in range(last_col + step, new_col - 1, -1):
                self._copy_cell(ws, (r, c - step), (r, c))
            if step > 1:
                self._clone_merges(ws, at_col, r, step, down=False)
            self._shift_names(r, new_col, step, down=False)

        self._extend_names(at_col, row_start, row_end, step, down=False)
        logger.debug(
            "inserted %d column(s) right of %s!col %d for rows %d..%d",
            step, self.sheet, at_col, row_start, row_end,
        )
        return step

    # ── Cells ─────────────────────────────────────────────────────────────────

    def _copy_cell(self, ws: Worksheet, src: CellKey, dst: CellKey) -> None:
        cell = ws.cells.get(src)
        if cell is None:
            ws.cells.pop(dst, None)
        else:
            ws.cells[dst] = self.workbook.clone_cell(cell)

    # ── Merges ────────────────────────────────────────────────────────────────

    @staticmethod
    def _anchor(region: RangeAddress, down: bool) -> Tuple[int, int]:
        """(line, position) of a region's anchor along the insertion axis."""
        if down:
            return region.col1, region.row1
        return region.row1, region.col1

    @staticmethod
    def _moved(region: RangeAddress, step: int, down: bool) -> RangeAddress:
        return region.shifted(rows=step) if down else region.shifted(cols=step)

    def _shift_merges(self, ws: Worksheet, line: int, new_pos: int, step: int, down: bool) -> None:
        for i, ref in enumerate(ws.merges):
            region = parse_address(ref, resolve_names=False)
            anchor_line, anchor_pos = self._anchor(region, down)
            if anchor_pos >= new_pos and anchor_line == line:
                ws.merges[i] = format_address(self._moved(region, step, down), include_sheet=False)

    def _clone_merges(self, ws: Worksheet, at: int, line: int, step: int, down: bool) -> None:
        for ref in list(ws.merges):
            region = parse_address(ref, resolve_names=False)
            anchor_line, anchor_pos = self._anchor(region, down)
            if anchor_pos == at and anchor_line == line:
                ws.merges.append(format_address(self._moved(region, step, down), include_sheet=False))

    # ── Defined names ─────────────────────────────────────────────────────────

    def _names_on_sheet(self) -> Iterator[Tuple[str, RangeAddress]]:
        """
        Defined names whose text is a single range on this sheet. Unions
        ("S!A1,S!C3") and formulas are left alone.
        """
        for name, text in self.workbook.defined_names():
            if text is None or text.strip() == "":
                continue
            if _PLAIN_RANGE_RE.fullmatch(split_sheet(text)[1].strip()) is None:
                logger.debug("defined name %r is not a single range (%r), skipped", name, text)
                continue
            try:
                rng = parse_address(text, self.workbook, resolve_names=False)
            except AddressError:
                logger.debug("defined name %r is not a range (%r), skipped", name, text)
                continue
            if rng.sheet == self.sheet:
                yield name, rng

    def _shift_names(self, line: int, new_pos: int, step: int, down: bool) -> None:
        for name, rng in list(self._names_on_sheet()):
            anchor_line, anchor_pos = self._anchor(rng, down)
            if anchor_pos >= new_pos and anchor_line == line:
                self.workbook.set_defined_name_text(
                    name, format_address(self._moved(rng, step, down), fixed=True)
                )

    def _extend_names(self, at: int, span_start: int, span_end: int, step: int, down: bool) -> None:
        for name, rng in list(self._names_on_sheet()):
            if down:
                covers = rng.row1 <= at <= rng.row2
                same_span = rng.col1 == span_start and rng.col2 == span_end
                grown = rng.grown(rows=step)
            else:
                covers = rng.col1 <= at <= rng.col2
                same_span = rng.row1 == span_start and rng.row2 == span_end
                grown = rng.grown(cols=step)
            if covers and same_span:
                self.workbook.set_defined_name_text(name, format_address(grown, fixed=True))
