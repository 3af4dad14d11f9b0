"""
gridfill/runner.py — Single-job executor.

Responsible for:
  - Opening the template workbook as a Document
  - Loading record sources (inline rows, CSV, XLSX, SQL)
  - Applying each step in order through gridfill.fill / gridfill.cells
  - Deleting sheets and selecting the active tab
  - Saving the filled workbook
  - Returning a RunReport

This module has NO knowledge of batch execution or progress callbacks.
"""
from __future__ import annotations

import logging
import os
import sqlite3
from typing import Any, List, Optional

from .cells import set_cell_value
from .document import Document
from .errors import (
    AppError,
    BAD_JOB, FILE_LOCKED, MISSING_TEMPLATE_PATH,
    SAVE_FAILED, SHEET_NOT_FOUND, SOURCE_READ_FAILED,
)
from .fill import fill_area, fill_area_from_query, fill_cells, fill_cells_from_query
from .io import load_csv, load_document, load_xlsx, save_document
from .models import FillJob, FillStep, RunReport, StepResult

logger = logging.getLogger(__name__)


# ── Private helpers ───────────────────────────────────────────────────────────

def _open_template(path: str) -> Document:
    """Load the template workbook. Raises AppError on failure."""
    if not (path or "").strip():
        raise AppError(MISSING_TEMPLATE_PATH, "Template file path is empty")
    try:
        return load_document(path)
    except PermissionError:
        raise AppError(
            FILE_LOCKED,
            f"Template file is locked: {path}",
            {"path": path},
        )
    except Exception as e:
        raise AppError(
            SOURCE_READ_FAILED,
            f"Could not open template file: {e}",
            {"path": path},
        )


def _load_table(step: FillStep) -> List[List[Any]]:
    """Inline rows, or a CSV/XLSX table. Raises AppError on failure."""
    if step.rows:
        return step.rows
    path = step.csv_path or step.xlsx_path
    if not path:
        raise AppError(BAD_JOB, f"Area step for {step.target!r} has no record source")
    try:
        if step.csv_path:
            return load_csv(step.csv_path)
        return load_xlsx(step.xlsx_path, step.xlsx_sheet)
    except PermissionError:
        raise AppError(
            FILE_LOCKED,
            f"Source file is locked: {path}",
            {"path": path},
        )
    except ValueError as e:
        raise AppError(SHEET_NOT_FOUND, str(e))
    except Exception as e:
        raise AppError(SOURCE_READ_FAILED, f"Failed to read source: {e}", {"path": path})


def _connect(job: FillJob) -> sqlite3.Connection:
    if not job.database:
        raise AppError(BAD_JOB, f"Job {job.name!r} has SQL steps but no database")
    try:
        return sqlite3.connect(job.database)
    except sqlite3.Error as e:
        raise AppError(
            SOURCE_READ_FAILED,
            f"Could not open database: {e}",
            {"path": job.database},
        )


def _run_step(doc: Document, step: FillStep, conn: Optional[sqlite3.Connection]) -> int:
    """Apply one step. Returns the number of records or values written."""
    try:
        if step.kind == "area":
            if not step.target:
                raise AppError(BAD_JOB, "Area step has no target")
            if step.sql and not (step.rows or step.csv_path or step.xlsx_path):
                return fill_area_from_query(
                    doc, step.target, conn, step.sql, step.params,
                    extend=step.extend, transposed=step.transposed,
                )
            table = _load_table(step)
            return fill_area(doc, step.target, table, extend=step.extend, transposed=step.transposed)

        if step.kind == "cells":
            return fill_cells(doc, step.values)

        if step.kind == "cells_sql":
            return fill_cells_from_query(doc, conn, step.sql, step.params)

        if step.kind == "value":
            set_cell_value(doc, step.target, step.value)
            return 1
    except sqlite3.Error as e:
        raise AppError(SOURCE_READ_FAILED, f"Query failed: {e}", {"sql": step.sql})

    raise AppError(BAD_JOB, f"Unknown step kind: {step.kind!r}", {"kind": step.kind})


def _needs_database(job: FillJob) -> bool:
    for step in job.steps:
        if step.kind == "cells_sql":
            return True
        if step.kind == "area" and step.sql and not (step.rows or step.csv_path or step.xlsx_path):
            return True
    return False


def _save(doc: Document, path: str) -> None:
    try:
        save_document(doc, path)
    except PermissionError as e:
        raise AppError(SAVE_FAILED, f"Permission denied saving: {e}", {"path": path})
    except Exception as e:
        raise AppError(SAVE_FAILED, f"Failed to save output: {e}", {"path": path})


# ── Public API ────────────────────────────────────────────────────────────────

def run_job(job: FillJob) -> RunReport:
    """
    Execute one job.

    Pipeline:
      1. Open the template
      2. Apply steps in order (fail fast on the first error)
      3. Delete sheets, select the active sheet
      4. Save to output_path, or over the template when blank

    Nothing is saved when a step fails.
    """
    results: List[StepResult] = []
    logger.info("job %r: template=%s", job.name, job.template_path)

    try:
        doc = _open_template(job.template_path)
    except AppError as e:
        logger.error("job %r: %s", job.name, e)
        results.append(StepResult(
            job_name=job.name, step_index=-1, kind="open", target=job.template_path,
            records_written=0, message=str(e),
            error_code=e.code, error_message=e.message, error_details=e.details,
        ))
        return RunReport(ok=False, results=results)

    conn: Optional[sqlite3.Connection] = None
    try:
        if _needs_database(job):
            conn = _connect(job)

        for i, step in enumerate(job.steps):
            try:
                n = _run_step(doc, step, conn)
            except AppError as e:
                logger.error("job %r step %d (%s): %s", job.name, i, step.kind, e)
                results.append(StepResult(
                    job_name=job.name, step_index=i, kind=step.kind, target=step.target,
                    records_written=0, message=str(e),
                    error_code=e.code, error_message=e.message, error_details=e.details,
                ))
                return RunReport(ok=False, results=results)
            logger.info("job %r step %d (%s): %d written", job.name, i, step.kind, n)
            results.append(StepResult(
                job_name=job.name, step_index=i, kind=step.kind, target=step.target,
                records_written=n, message=f"Wrote {n} to {step.target or 'defined names'}",
            ))
    except AppError as e:
        logger.error("job %r: %s", job.name, e)
        results.append(StepResult(
            job_name=job.name, step_index=-1, kind="database", target=job.database,
            records_written=0, message=str(e),
            error_code=e.code, error_message=e.message, error_details=e.details,
        ))
        return RunReport(ok=False, results=results)
    finally:
        if conn is not None:
            conn.close()

    for name in job.delete_sheets:
        doc.delete_sheet(name)
    if job.active_sheet:
        doc.set_active_sheet(job.active_sheet)

    out_path = job.output_path or job.template_path
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    try:
        _save(doc, out_path)
    except AppError as e:
        logger.error("job %r: %s", job.name, e)
        results.append(StepResult(
            job_name=job.name, step_index=-1, kind="save", target=out_path,
            records_written=0, message=str(e),
            error_code=e.code, error_message=e.message, error_details=e.details,
        ))
        return RunReport(ok=False, results=results)

    logger.info("job %r: saved %s", job.name, out_path)
    return RunReport(ok=True, results=results, saved_paths=[out_path])
