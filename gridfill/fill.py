"""
gridfill/fill.py — Pours records into a target area.

fill_area walks the target with a GridWalker, writing one record per line:
  - with extend=True every record after the first opens a new line below
    (or, transposed, right of) the previous one, so the area grows and
    content after it moves along;
  - with extend=False the area is fixed: fields past the line's far edge
    are dropped, and records past the last line are never fetched.

fill_cells writes single values through defined names.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Tuple, Union

from .address import RangeAddress, parse_address, resolve_defined_name
from .cells import set_value
from .errors import AddressError
from .merges import MergedRegionIndex
from .mutator import StructuralMutator
from .sources import CursorRowSource, as_row_source
from .walker import GridWalker

logger = logging.getLogger(__name__)


def _insert_line(walker: GridWalker, mutator: StructuralMutator, at: int) -> int:
    """Open a new line after primary position `at`."""
    if walker.transposed:
        return mutator.insert_column_right(at, walker.row_start, walker.row_end)
    return mutator.insert_row_below(at, walker.col_start, walker.col_end)


def _insert_past_far_edge(walker: GridWalker, mutator: StructuralMutator) -> int:
    """Widen every line by inserting past the secondary-axis far edge."""
    if walker.transposed:
        return mutator.insert_row_below(walker.row_end, walker.col_start, walker.col_end)
    return mutator.insert_column_right(walker.col_end, walker.row_start, walker.row_end)


def fill_area(
    workbook: Any,
    target: Union[str, RangeAddress],
    source: Any,
    extend: bool = True,
    transposed: bool = False,
) -> int:
    """
    Write records from `source` (a RowSource or an iterable of sequences)
    into `target` (reference text, defined name or RangeAddress).

    Returns the number of records written.
    """
    rng = target if isinstance(target, RangeAddress) else parse_address(target, workbook)
    if workbook.get_worksheet(rng.sheet) is None:
        raise AddressError(
            f"Sheet {rng.sheet!r} of target {target!r} is not in the workbook",
            {"sheet": rng.sheet, "sheets": workbook.sheet_names},
        )

    merges = MergedRegionIndex(workbook, rng.sheet)
    mutator = StructuralMutator(workbook, rng.sheet)
    walker = GridWalker(merges, rng, transposed=transposed, extend=extend)
    rows = as_row_source(source)

    written = 0
    prev_line = None
    for record in rows.rows(should_stop=walker.is_finished):
        if extend and prev_line is not None:
            walker.grow_primary(_insert_line(walker, mutator, prev_line))

        for i, value in enumerate(record):
            if i > 0:
                status = walker.advance_secondary()
                while status == "needs_insertion":
                    step = _insert_past_far_edge(walker, mutator)
                    if step <= 0:
                        status = "line_boundary"
                        break
                    walker.grow_secondary(step)
                    status = walker.advance_secondary()
                if status == "line_boundary":
                    logger.debug(
                        "record %d: %d field(s) past the area edge dropped",
                        written + 1, len(record) - i,
                    )
                    break
            set_value(workbook, rng.sheet, walker.col, walker.row, value)

        written += 1
        prev_line = walker.line
        walker.advance_primary()

    logger.debug("filled %d record(s) into %r", written, target)
    return written


def fill_area_from_query(
    workbook: Any,
    target: Union[str, RangeAddress],
    connection: Any,
    sql: str,
    params: Any = None,
    extend: bool = True,
    transposed: bool = False,
) -> int:
    """fill_area over the rows of a SQL query on a DB-API connection."""
    source = CursorRowSource.from_query(connection, sql, params)
    try:
        return fill_area(workbook, target, source, extend=extend, transposed=transposed)
    finally:
        source.close()


def fill_cells(workbook: Any, values: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]) -> int:
    """
    Write each (name, value) pair to the cell its defined name points at.

    Pairs whose name is not defined, or whose value is None, are skipped.
    Returns the number of values written.
    """
    pairs = values.items() if isinstance(values, Mapping) else values
    written = 0
    for name, value in pairs:
        if value is None:
            continue
        rng = resolve_defined_name(workbook, name)
        if rng is None:
            logger.debug("no defined name %r, value skipped", name)
            continue
        set_value(workbook, rng.sheet, rng.col1, rng.row1, value)
        written += 1
    return written


def fill_cells_from_cursor(workbook: Any, cursor: Any) -> int:
    """
    Write the next row of an executed DB-API cursor through defined names,
    using the result column names as the names.
    """
    source = CursorRowSource(cursor)
    first = next(iter(source.rows()), None)
    if first is None:
        return 0
    return fill_cells(workbook, list(zip(source.column_names, first)))


def fill_cells_from_query(workbook: Any, connection: Any, sql: str, params: Any = None) -> int:
    """fill_cells_from_cursor over a fresh query on a DB-API connection."""
    source = CursorRowSource.from_query(connection, sql, params)
    try:
        return fill_cells_from_cursor(workbook, source.cursor)
    finally:
        source.close()
