"""
gridfill/document.py — In-memory workbook arena.

The document is the collaborator every other module works against:
  - Worksheets hold cells keyed by (row, col) plus a merge table of
    reference strings such as "E8:F9".
  - The workbook holds an ordered sheet list and the defined-name table
    (name -> reference text such as "Sheet1!$A$1:$C$1").

Nothing here knows about the xlsx container; gridfill.io converts
between this arena and openpyxl. Nothing here parses references either:
merge and name text is opaque until gridfill.address reads it.

Not thread-safe. Callers serialize access to one Document.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .errors import AppError, SHEET_NOT_FOUND


CellKey = Tuple[int, int]
"""(row, col), both 1-based."""


@dataclass
class Cell:
    """
    One stored cell.

    data_type follows openpyxl's codes: 's' string, 'n' numeric,
    'b' boolean, 'd' date/time, 'f' formula.
    style is opaque and only ever copied, never interpreted.
    """
    value: Any = ""
    data_type: str = "s"
    style: Any = None


@dataclass
class Worksheet:
    name: str
    cells: Dict[CellKey, Cell] = field(default_factory=dict)
    merges: List[str] = field(default_factory=list)

    @property
    def max_row(self) -> int:
        return max((r for r, _ in self.cells), default=0)

    @property
    def max_col(self) -> int:
        return max((c for _, c in self.cells), default=0)

    def iter_cells(self) -> Iterator[Tuple[int, int, Cell]]:
        """Yield (row, col, cell) ordered by reference, row first."""
        for (r, c) in sorted(self.cells):
            yield r, c, self.cells[(r, c)]


class Document:
    """
    Workbook arena: ordered worksheets, defined names, custom properties.

    `source` keeps the openpyxl workbook a document was loaded from so that
    saving can write back into it; it is None for documents built in memory.
    """

    def __init__(self, sheet_names: Optional[List[str]] = None):
        self.worksheets: List[Worksheet] = [Worksheet(n) for n in (sheet_names or [])]
        self._defined_names: List[List[str]] = []
        self.custom_properties: Dict[str, Any] = {}
        self.active_index: int = 0
        self.source: Any = None

    # ── Worksheets ────────────────────────────────────────────────────────────

    @property
    def sheet_names(self) -> List[str]:
        return [ws.name for ws in self.worksheets]

    @property
    def first_sheet(self) -> Optional[Worksheet]:
        return self.worksheets[0] if self.worksheets else None

    def get_worksheet(self, name: str) -> Optional[Worksheet]:
        for ws in self.worksheets:
            if ws.name == name:
                return ws
        return None

    def require_worksheet(self, name: str) -> Worksheet:
        ws = self.get_worksheet(name)
        if ws is None:
            raise AppError(
                SHEET_NOT_FOUND,
                f"Sheet with name {name!r} is not found in workbook",
                {"sheet": name, "sheets": self.sheet_names},
            )
        return ws

    def add_worksheet(self, name: str) -> Worksheet:
        ws = self.get_worksheet(name)
        if ws is None:
            ws = Worksheet(name)
            self.worksheets.append(ws)
        return ws

    def delete_sheet(self, name: str) -> None:
        """Remove a sheet. Unknown names are ignored."""
        idx = next((i for i, ws in enumerate(self.worksheets) if ws.name == name), None)
        if idx is None:
            return
        del self.worksheets[idx]
        if self.active_index >= len(self.worksheets):
            self.active_index = max(0, len(self.worksheets) - 1)

    def set_active_sheet(self, sheet: Union[str, int]) -> None:
        """Select the active tab by name or zero-based index. Unknown names are ignored."""
        if isinstance(sheet, int):
            if 0 <= sheet < len(self.worksheets):
                self.active_index = sheet
            return
        for i, ws in enumerate(self.worksheets):
            if ws.name == sheet:
                self.active_index = i
                return

    # ── Cells ─────────────────────────────────────────────────────────────────

    def get_cell(self, sheet: str, col: int, row: int) -> Optional[Cell]:
        ws = self.get_worksheet(sheet)
        if ws is None:
            return None
        return ws.cells.get((row, col))

    def get_or_create_cell(self, sheet: str, col: int, row: int) -> Cell:
        """Return the cell at (col, row), creating an empty string cell if absent."""
        ws = self.require_worksheet(sheet)
        cell = ws.cells.get((row, col))
        if cell is None:
            cell = Cell()
            ws.cells[(row, col)] = cell
        return cell

    @staticmethod
    def clone_cell(cell: Cell) -> Cell:
        """Detached copy: value, data type and style."""
        return Cell(value=cell.value, data_type=cell.data_type, style=cell.style)

    # ── Merges ────────────────────────────────────────────────────────────────

    def merged_regions(self, sheet: str) -> List[str]:
        """The live merge table of a sheet; empty for unknown sheets."""
        ws = self.get_worksheet(sheet)
        if ws is None:
            return []
        return ws.merges

    # ── Defined names ─────────────────────────────────────────────────────────

    def defined_names(self) -> List[Tuple[str, str]]:
        return [(name, text) for name, text in self._defined_names]

    def set_defined_name_text(self, name: str, text: str) -> None:
        """Update the first entry called `name`, or append a new one."""
        for entry in self._defined_names:
            if entry[0] == name:
                entry[1] = text
                return
        self._defined_names.append([name, text])

    def get_custom_property(self, name: str) -> Any:
        return self.custom_properties.get(name)

    # ── Reference-text access (see gridfill.cells) ────────────────────────────

    def __getitem__(self, ref: str) -> Any:
        from .cells import get_cell_value
        return get_cell_value(self, ref)

    def __setitem__(self, ref: str, value: Any) -> None:
        from .cells import set_cell_value
        set_cell_value(self, ref, value)
