"""
gridfill/cells.py — Placing and reading single values.

Type handling is thin: a value keeps its Python type and gets
the matching openpyxl data-type code. Text starting with "=" is a formula.
"""
from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Any

from .address import RangeAddress, parse_address
from .errors import AddressError, AppError, VALUE_NOT_FOUND


_NUMERIC_TYPES = (int, float, Decimal)
_TIME_TYPES = (datetime.datetime, datetime.date, datetime.time, datetime.timedelta)


def data_type_for(value: Any) -> str:
    """openpyxl data-type code for a Python value."""
    if value is None:
        return "n"
    if isinstance(value, bool):
        return "b"
    if isinstance(value, _NUMERIC_TYPES):
        return "n"
    if isinstance(value, _TIME_TYPES):
        return "d"
    if isinstance(value, str) and value.startswith("=") and len(value) > 1:
        return "f"
    return "s"


def set_value(workbook: Any, sheet: str, col: int, row: int, value: Any) -> None:
    """
    Write one value at (col, row) of `sheet`, creating the cell if needed.
    Values of unknown types are stored as their string form.
    """
    cell = workbook.get_or_create_cell(sheet, col, row)
    data_type = data_type_for(value)
    if data_type == "s" and value is not None and not isinstance(value, str):
        value = str(value)
    cell.value = value
    cell.data_type = data_type


def get_value(workbook: Any, sheet: str, col: int, row: int) -> Any:
    """Value at (col, row), or None when the cell does not exist."""
    workbook.require_worksheet(sheet)
    cell = workbook.get_cell(sheet, col, row)
    return cell.value if cell is not None else None


def _parse_on_workbook(workbook: Any, ref: str) -> RangeAddress:
    rng = parse_address(ref, workbook)
    if workbook.get_worksheet(rng.sheet) is None:
        raise AddressError(
            f"Sheet {rng.sheet!r} of address {ref!r} is not in the workbook",
            {"address": ref, "sheet": rng.sheet, "sheets": workbook.sheet_names},
        )
    return rng


def set_cell_value(workbook: Any, ref: str, value: Any) -> None:
    """Write at the start cell of a reference or defined name."""
    rng = _parse_on_workbook(workbook, ref)
    set_value(workbook, rng.sheet, rng.col1, rng.row1, value)


def get_cell_value(workbook: Any, ref: str) -> Any:
    """
    Read the start cell of a reference or defined name.
    Raises AppError(VALUE_NOT_FOUND) when nothing is stored there.
    """
    rng = _parse_on_workbook(workbook, ref)
    value = get_value(workbook, rng.sheet, rng.col1, rng.row1)
    if value is None:
        raise AppError(VALUE_NOT_FOUND, f"Cell value not found in address {ref}", {"address": ref})
    return value
