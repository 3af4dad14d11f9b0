"""
gridfill/io.py — openpyxl boundary.

  load_document / save_document convert between an xlsx file and the
  in-memory Document arena: cell values and data types, opaque cell styles,
  merge tables, workbook-level defined names, custom document properties
  and the active tab.

  load_csv / load_xlsx read plain tables used as record sources.

Everything else in gridfill works on the Document only.
"""
from __future__ import annotations

import csv
import logging
from copy import copy
from typing import Any, Dict, List, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.workbook.defined_name import DefinedName

from .document import Cell, Document, Worksheet

logger = logging.getLogger(__name__)


_STYLE_ATTRS = ("font", "fill", "border", "alignment", "number_format", "protection")


# ── Plain tables ──────────────────────────────────────────────────────────────

def normalize_table(rows: List[List[Any]]) -> List[List[Any]]:
    """
    Pad ragged rows to used width.
    """
    if not rows:
        return []

    used_width = max(len(r) for r in rows)
    return [r + [None] * (used_width - len(r)) for r in rows]


def load_csv(path: str) -> List[List[Any]]:
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        rows = [list(row) for row in reader]

    return normalize_table(rows)


def load_xlsx(path: str, sheet_name: str) -> List[List[Any]]:
    wb = load_workbook(path, data_only=True, read_only=True)
    try:
        if sheet_name not in wb.sheetnames:
            raise ValueError(f"Sheet not found: {sheet_name}")
        ws = wb[sheet_name]
        rows = [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()

    return normalize_table(rows)


# ── Styles (carried, never interpreted) ───────────────────────────────────────

def _capture_style(cell: Any) -> Optional[Dict[str, Any]]:
    if not cell.has_style:
        return None
    return {name: copy(getattr(cell, name)) for name in _STYLE_ATTRS}


def _apply_style(cell: Any, style: Dict[str, Any]) -> None:
    for name, value in style.items():
        setattr(cell, name, copy(value))


# ── Document load / save ──────────────────────────────────────────────────────

def _read_sheet(ws: Any, sheet: Worksheet) -> None:
    sheet.merges = [rng.coord for rng in ws.merged_cells.ranges]
    for row in ws.iter_rows():
        for cell in row:
            if isinstance(cell, MergedCell):
                continue
            if cell.value is None and not cell.has_style:
                continue
            sheet.cells[(cell.row, cell.column)] = Cell(
                value=cell.value,
                data_type=cell.data_type,
                style=_capture_style(cell),
            )


def load_document(path: str) -> Document:
    """Open an xlsx file as a Document. The openpyxl workbook is kept for saving."""
    wb = load_workbook(path)
    doc = Document()
    for ws in wb.worksheets:
        _read_sheet(ws, doc.add_worksheet(ws.title))

    for name, dn in wb.defined_names.items():
        doc.set_defined_name_text(name, dn.attr_text)

    for prop in wb.custom_doc_props.props:
        doc.custom_properties[prop.name] = prop.value

    active = wb.active
    doc.active_index = wb.worksheets.index(active) if active in wb.worksheets else 0
    doc.source = wb
    logger.debug("loaded %s: sheets=%s names=%d", path, doc.sheet_names, len(doc.defined_names()))
    return doc


def _write_sheet(ws: Any, sheet: Worksheet) -> None:
    for rng in list(ws.merged_cells.ranges):
        ws.unmerge_cells(rng.coord)

    for row in ws.iter_rows():
        for xc in row:
            if (xc.row, xc.column) in sheet.cells:
                continue
            xc.value = None
            if xc.has_style:
                xc.style = "Normal"

    for (r, c), cell in sheet.cells.items():
        xc = ws.cell(row=r, column=c)
        if cell.style:
            _apply_style(xc, cell.style)
        elif xc.has_style:
            xc.style = "Normal"
        xc.value = cell.value

    for ref in sheet.merges:
        ws.merge_cells(ref)


def save_document(doc: Document, path: str) -> None:
    """
    Write the Document to `path`. A document loaded from a file is written
    back into its originating openpyxl workbook; otherwise a new one is made.
    """
    fresh = doc.source is None
    wb = Workbook() if fresh else doc.source

    for ws in list(wb.worksheets):
        if doc.get_worksheet(ws.title) is None and not (fresh and ws.title == "Sheet"):
            wb.remove(ws)

    for sheet in doc.worksheets:
        ws = wb[sheet.name] if sheet.name in wb.sheetnames else wb.create_sheet(title=sheet.name)
        _write_sheet(ws, sheet)

    if fresh and doc.worksheets and "Sheet" in wb.sheetnames and doc.get_worksheet("Sheet") is None:
        wb.remove(wb["Sheet"])

    for name, text in doc.defined_names():
        if name in wb.defined_names:
            wb.defined_names[name].attr_text = text
        else:
            wb.defined_names[name] = DefinedName(name, attr_text=text)

    if wb.worksheets:
        wb.active = min(doc.active_index, len(wb.worksheets) - 1)

    wb.save(path)
    doc.source = wb
    logger.debug("saved %s", path)
