from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import AppError, BAD_JOB
from .models import FillJob, FillStep


ENV_JOB_DIR = "GRIDFILL_JOB_DIR"

_STEP_KINDS = ("area", "cells", "cells_sql", "value")


def resolve_job_dir(project_root: Optional[str] = None) -> str:
    """Resolve the default directory holding job files.

    Priority:
    1) GRIDFILL_JOB_DIR env var (absolute or relative)
    2) User-home scoped default: ~/.gridfill/jobs
    """
    env = os.getenv(ENV_JOB_DIR)
    if env:
        p = Path(env)
        if not p.is_absolute():
            base = Path(project_root) if project_root else Path.cwd()
            p = base / p
        return str(p)

    return str(Path.home() / ".gridfill" / "jobs")


def _step_from_dict(d: Dict[str, Any]) -> FillStep:
    kind = d.get("kind", "area")
    if kind not in _STEP_KINDS:
        raise AppError(BAD_JOB, f"Unknown step kind: {kind!r}", {"kind": kind})
    known = {k: v for k, v in d.items() if k in FillStep.__dataclass_fields__}
    return FillStep(**known)


def _job_from_dict(d: Dict[str, Any]) -> FillJob:
    return FillJob(
        name=d.get("name", "Job1"),
        template_path=d.get("template_path", ""),
        output_path=d.get("output_path", ""),
        database=d.get("database", ""),
        active_sheet=d.get("active_sheet", ""),
        delete_sheets=list(d.get("delete_sheets", [])),
        steps=[_step_from_dict(s) for s in d.get("steps", [])],
    )


@dataclass
class JobsConfig:
    jobs: List[FillJob] = field(default_factory=list)

    # ---------- Serialization ----------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobsConfig":
        return cls(jobs=[_job_from_dict(j) for j in data.get("jobs", [])])

    # ---------- File IO ----------

    def save_json(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_json(cls, path: str) -> "JobsConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    # ---------- Execution Flattening ----------

    def build_run_items(self) -> List[FillJob]:
        """
        Jobs in file order, skipping those without a template path.
        """
        return [job for job in self.jobs if job.template_path]
