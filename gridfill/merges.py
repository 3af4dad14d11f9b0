"""
gridfill/merges.py — Merge-aware cursor stepping.

A merged region is presented as one logical cell at its anchor (top-left).
Stepping from an anchor jumps past the region's far edge so a value written
at the anchor is never written again into the cells the merge covers.

Regions are re-read from the worksheet's merge table on every query: the
structural mutator edits that table in place, so nothing is cached.
"""
from __future__ import annotations

from typing import Any, List, Optional, Tuple

from .address import RangeAddress, parse_address


class MergedRegionIndex:
    def __init__(self, workbook: Any, sheet: str):
        self.workbook = workbook
        self.sheet = sheet

    def regions(self) -> List[RangeAddress]:
        """Current merged regions of the sheet, parsed fresh."""
        return [
            parse_address(ref, resolve_names=False)
            for ref in self.workbook.merged_regions(self.sheet)
            if ref and ref.strip()
        ]

    def anchored_at(self, row: int, col: int) -> Optional[RangeAddress]:
        for region in self.regions():
            if region.row1 == row and region.col1 == col:
                return region
        return None

    def next_row(self, row: int, col: int) -> int:
        region = self.anchored_at(row, col)
        return region.row2 + 1 if region is not None else row + 1

    def next_col(self, row: int, col: int) -> int:
        region = self.anchored_at(row, col)
        return region.col2 + 1 if region is not None else col + 1

    def next_cell(self, row: int, col: int, down: bool = False) -> Tuple[int, int]:
        """
        Next free cell across (default) or down from (row, col).
        Returns (next_row, next_col).
        """
        if down:
            return self.next_row(row, col), col
        return row, self.next_col(row, col)
