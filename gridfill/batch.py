"""
gridfill/batch.py — Batch (run_all) execution coordinator.

Responsible for:
  - Iterating jobs in order
  - Fail-fast on the first failed job
  - Emitting optional progress callbacks

This module has NO knowledge of fill logic; it delegates entirely
to gridfill.runner.run_job.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional

from .models import FillJob, RunReport, StepResult
from .runner import run_job

logger = logging.getLogger(__name__)


def run_all(
    jobs: Iterable[FillJob],
    on_progress: Optional[Callable[[str, Any], None]] = None,
) -> RunReport:
    """
    Execute jobs in order. Each job saves its own output.
    Fail-fast: after a failed job the remaining jobs are not executed.

    Events: "start" (job name), "result" / "error" (StepResult), "done" (RunReport).
    """
    results: List[StepResult] = []
    saved: List[str] = []
    ok = True

    def _emit(event: str, payload: Any) -> None:
        if on_progress is not None:
            try:
                on_progress(event, payload)
            except Exception:
                # Progress callbacks must never break execution.
                logger.debug("progress callback failed on %r", event, exc_info=True)

    for job in jobs:
        _emit("start", {"job_name": job.name, "template_path": job.template_path})
        report = run_job(job)
        saved.extend(report.saved_paths)
        for result in report.results:
            results.append(result)
            _emit("error" if result.error_code else "result", result)
        if not report.ok:
            ok = False
            break

    final = RunReport(ok=ok, results=results, saved_paths=saved)
    _emit("done", final)
    return final
