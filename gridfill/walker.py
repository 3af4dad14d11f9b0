"""
gridfill/walker.py — Cursor over a target rectangle.

The walker steps through a rectangle line by line:
  - row-major:  a line is a row, fields go across, records go down;
  - transposed: a line is a column, fields go down, records go across.

Every step is merge-aware (see gridfill.merges). The walker never edits the
sheet; when it needs more room it says so and the caller inserts, then
reports the inserted size back through grow_primary / grow_secondary.
"""
from __future__ import annotations

from typing import Literal

from .address import RangeAddress
from .merges import MergedRegionIndex


Step = Literal["ok", "line_boundary", "needs_insertion", "outer_boundary"]


class GridWalker:
    def __init__(
        self,
        merges: MergedRegionIndex,
        target: RangeAddress,
        transposed: bool = False,
        extend: bool = False,
    ):
        self.merges = merges
        self.transposed = transposed
        self.extend = extend

        self.row_start = target.row1
        self.col_start = target.col1
        self.row_end = target.row2
        self.col_end = target.col2

        self.row = self.row_start
        self.col = self.col_start
        self.finished = False

    @property
    def line(self) -> int:
        """Primary-axis position of the current line."""
        return self.col if self.transposed else self.row

    def is_finished(self) -> bool:
        return self.finished

    def advance_secondary(self) -> Step:
        """
        Move to the next free cell within the current line.

        On a boundary the cursor stays put: "line_boundary" means the rest of
        the line is dropped, "needs_insertion" means the caller must grow the
        rectangle past its far edge and retry.
        """
        if self.transposed:
            nxt = self.merges.next_row(self.row, self.col)
            if nxt > self.row_end:
                return "needs_insertion" if self.extend else "line_boundary"
            self.row = nxt
        else:
            nxt = self.merges.next_col(self.row, self.col)
            if nxt > self.col_end:
                return "needs_insertion" if self.extend else "line_boundary"
            self.col = nxt
        return "ok"

    def advance_primary(self) -> Step:
        """
        Move to the start of the next line.

        Without extension, stepping past the far edge ends the walk.
        """
        if self.transposed:
            self.row = self.row_start
            self.col = self.merges.next_col(self.row, self.col)
            past_edge = self.col > self.col_end
        else:
            self.col = self.col_start
            self.row = self.merges.next_row(self.row, self.col)
            past_edge = self.row > self.row_end

        if past_edge and not self.extend:
            self.finished = True
            return "outer_boundary"
        return "ok"

    def grow_primary(self, step: int) -> None:
        if self.transposed:
            self.col_end += step
        else:
            self.row_end += step

    def grow_secondary(self, step: int) -> None:
        if self.transposed:
            self.row_end += step
        else:
            self.col_end += step
