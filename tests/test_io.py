"""
test_io.py — Tests for gridfill.io against real openpyxl workbooks.

Covers:
  - load_document: values, merges, defined names, custom properties, active tab
  - save_document: filled tables, moved content, styles on cloned lines,
    updated defined names, deleted sheets, fresh documents
  - load_csv / load_xlsx table helpers
"""
from __future__ import annotations

import csv
import os
from tempfile import TemporaryDirectory

import pytest
from openpyxl import Workbook, load_workbook
from openpyxl.packaging.custom import StringProperty
from openpyxl.styles import Font
from openpyxl.workbook.defined_name import DefinedName

from gridfill.document import Document
from gridfill.fill import fill_area
from gridfill.io import load_csv, load_document, load_xlsx, save_document


# ══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════════════════════

def _make_template(path: str) -> str:
    wb = Workbook()
    ws = wb.active
    ws.title = "Report"
    ws["A1"] = "Item"
    ws["B1"] = "Qty"
    ws["A2"].font = Font(bold=True)
    ws["B2"].font = Font(bold=True)
    ws["A3"] = "Total"
    ws["D1"] = "Note"
    ws.merge_cells("D1:E1")
    wb.create_sheet("Scratch")["A1"] = "tmp"
    wb.defined_names["Lines"] = DefinedName("Lines", attr_text="Report!$A$2:$B$2")
    wb.defined_names["TotalLabel"] = DefinedName("TotalLabel", attr_text="Report!$A$3")
    wb.custom_doc_props.append(StringProperty(name="Client", value="Acme"))
    wb.save(path)
    return path


# ══════════════════════════════════════════════════════════════════════════════
# LOAD
# ══════════════════════════════════════════════════════════════════════════════

class TestLoadDocument:
    def test_sheets_values_merges(self):
        with TemporaryDirectory() as td:
            doc = load_document(_make_template(os.path.join(td, "t.xlsx")))
            assert doc.sheet_names == ["Report", "Scratch"]
            assert doc["A1"] == "Item"
            assert doc["Scratch!A1"] == "tmp"
            assert doc.merged_regions("Report") == ["D1:E1"]

    def test_names_and_properties(self):
        with TemporaryDirectory() as td:
            doc = load_document(_make_template(os.path.join(td, "t.xlsx")))
            names = dict(doc.defined_names())
            assert names["Lines"] == "Report!$A$2:$B$2"
            assert names["TotalLabel"] == "Report!$A$3"
            assert doc.get_custom_property("Client") == "Acme"

    def test_styled_empty_cells_kept(self):
        with TemporaryDirectory() as td:
            doc = load_document(_make_template(os.path.join(td, "t.xlsx")))
            cell = doc.get_cell("Report", 1, 2)
            assert cell is not None
            assert cell.value is None
            assert cell.style is not None

    def test_active_sheet(self):
        with TemporaryDirectory() as td:
            path = _make_template(os.path.join(td, "t.xlsx"))
            wb = load_workbook(path)
            wb.active = 1
            wb.save(path)
            assert load_document(path).active_index == 1


# ══════════════════════════════════════════════════════════════════════════════
# SAVE
# ══════════════════════════════════════════════════════════════════════════════

class TestSaveDocument:
    def test_filled_table_round_trip(self):
        with TemporaryDirectory() as td:
            src = _make_template(os.path.join(td, "t.xlsx"))
            out = os.path.join(td, "out.xlsx")

            doc = load_document(src)
            assert fill_area(doc, "Lines", [["a", 1], ["b", 2], ["c", 3]]) == 3
            save_document(doc, out)

            wb = load_workbook(out)
            ws = wb["Report"]
            assert [[c.value for c in row] for row in ws["A1:B5"]] == [
                ["Item", "Qty"], ["a", 1], ["b", 2], ["c", 3], ["Total", None],
            ]
            assert ws["A4"].font.b is True
            assert [r.coord for r in ws.merged_cells.ranges] == ["D1:E1"]
            assert ws["D1"].value == "Note"
            assert wb.defined_names["Lines"].attr_text == "Report!$A$2:$B$4"
            assert wb.defined_names["TotalLabel"].attr_text == "Report!$A$5"

    def test_cleared_cells_lose_stale_style(self):
        with TemporaryDirectory() as td:
            src = os.path.join(td, "t.xlsx")
            out = os.path.join(td, "out.xlsx")
            wb = Workbook()
            ws = wb.active
            ws.title = "S"
            ws["A3"] = "Total"
            ws["A3"].font = Font(bold=True)
            wb.save(src)

            doc = load_document(src)
            fill_area(doc, "A1", [["a"], ["b"]])
            save_document(doc, out)

            ws = load_workbook(out)["S"]
            assert ws["A4"].value == "Total"
            assert ws["A4"].font.b is True
            assert ws["A3"].value is None
            assert not ws["A3"].font.b

    def test_template_untouched_when_saving_elsewhere(self):
        with TemporaryDirectory() as td:
            src = _make_template(os.path.join(td, "t.xlsx"))
            doc = load_document(src)
            doc["A2"] = "changed"
            save_document(doc, os.path.join(td, "out.xlsx"))
            assert load_workbook(src)["Report"]["A2"].value is None

    def test_deleted_sheet_and_active_tab(self):
        with TemporaryDirectory() as td:
            src = _make_template(os.path.join(td, "t.xlsx"))
            out = os.path.join(td, "out.xlsx")
            doc = load_document(src)
            doc.add_worksheet("Extra")
            doc.delete_sheet("Scratch")
            doc.set_active_sheet("Extra")
            save_document(doc, out)

            wb = load_workbook(out)
            assert wb.sheetnames == ["Report", "Extra"]
            assert wb.active.title == "Extra"

    def test_moved_merges_written(self):
        with TemporaryDirectory() as td:
            out = os.path.join(td, "out.xlsx")
            doc = Document(["S"])
            doc.get_worksheet("S").merges.append("A2:A3")
            doc["A5"] = "end"
            fill_area(doc, "A2:B3", [["r1", 1], ["r2", 2]])
            save_document(doc, out)

            ws = load_workbook(out)["S"]
            assert sorted(r.coord for r in ws.merged_cells.ranges) == ["A2:A3", "A4:A5"]
            assert ws["A4"].value == "r2"
            assert ws["A7"].value == "end"

    def test_fresh_document(self):
        with TemporaryDirectory() as td:
            out = os.path.join(td, "new.xlsx")
            doc = Document(["One", "Two"])
            doc["Two!B2"] = 5
            doc.set_defined_name_text("Five", "Two!$B$2")
            save_document(doc, out)

            wb = load_workbook(out)
            assert wb.sheetnames == ["One", "Two"]
            assert wb["Two"]["B2"].value == 5
            assert wb.defined_names["Five"].attr_text == "Two!$B$2"
            assert doc.source is not None


# ══════════════════════════════════════════════════════════════════════════════
# TABLE HELPERS
# ══════════════════════════════════════════════════════════════════════════════

def test_load_csv_pads_ragged_rows():
    with TemporaryDirectory() as td:
        path = os.path.join(td, "s.csv")
        with open(path, "w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerows([["a", "b", "c"], ["d"]])
        assert load_csv(path) == [["a", "b", "c"], ["d", None, None]]


def test_load_xlsx_and_missing_sheet():
    with TemporaryDirectory() as td:
        path = os.path.join(td, "s.xlsx")
        wb = Workbook()
        ws = wb.active
        ws.title = "Data"
        ws.append(["x", 1])
        ws.append(["y", 2])
        wb.save(path)

        assert load_xlsx(path, "Data") == [["x", 1], ["y", 2]]
        with pytest.raises(ValueError):
            load_xlsx(path, "Nope")
