from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union


# ---- Job model ----

@dataclass
class FillStep:
    """
    One operation applied to a template workbook.

    kind:
      "area"      : pour records into `target`; records come from `rows`,
                    `csv_path`, `xlsx_path`/`xlsx_sheet` or `sql` (first non-empty wins)
                    `params` binds `sql`: a list for "?" markers, a dict for ":name"
      "cells"     : write `values` through defined names
      "cells_sql" : write the first row of `sql` through defined names
      "value"     : write `value` at `target`
    """
    kind: Literal["area", "cells", "cells_sql", "value"] = "area"
    target: str = ""
    rows: List[List[Any]] = field(default_factory=list)
    csv_path: str = ""
    xlsx_path: str = ""
    xlsx_sheet: str = "Sheet1"
    sql: str = ""
    params: Union[List[Any], Dict[str, Any]] = field(default_factory=list)
    values: Dict[str, Any] = field(default_factory=dict)
    value: Any = None
    extend: bool = True
    transposed: bool = False


@dataclass
class FillJob:
    """
    A template to fill and where to save it.
    Blank output_path means overwrite the template in place.
    database is an sqlite file used by sql steps.
    """
    name: str = "Job1"
    template_path: str = ""
    output_path: str = ""
    database: str = ""
    active_sheet: str = ""
    delete_sheets: List[str] = field(default_factory=list)
    steps: List[FillStep] = field(default_factory=list)


# ---- Run reporting ----

@dataclass
class StepResult:
    job_name: str
    step_index: int
    kind: str
    target: str
    records_written: int
    message: str = ""
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[Dict[str, Any]] = None


@dataclass
class RunReport:
    """
    Returned by runner.run_job / batch.run_all. Tests can assert it.
    """
    ok: bool
    results: List[StepResult] = field(default_factory=list)
    saved_paths: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(r.error_code for r in self.results)
