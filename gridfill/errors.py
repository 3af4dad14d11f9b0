from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    """
    User-facing error with a short code and structured details.
    Raise AppError from gridfill modules; callers display .message and .details.
    """
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} ({self.details})"
        return f"{self.code}: {self.message}"


# ── Error codes (keep stable for tests and callers) ───────────────────────────

BAD_ADDRESS           = "BAD_ADDRESS"
SHEET_NOT_FOUND       = "SHEET_NOT_FOUND"
SOURCE_READ_FAILED    = "SOURCE_READ_FAILED"
FILE_LOCKED           = "FILE_LOCKED"
SAVE_FAILED           = "SAVE_FAILED"
MISSING_TEMPLATE_PATH = "MISSING_TEMPLATE_PATH"
BAD_JOB               = "BAD_JOB"
VALUE_NOT_FOUND       = "VALUE_NOT_FOUND"


class AddressError(AppError):
    """Malformed reference text, unknown sheet or out-of-range column/row."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(BAD_ADDRESS, message, details)


# ── Friendly message lookup ───────────────────────────────────────────────────

_LOCK_WORDS = ("permission", "locked", "access")


def _file_hint(e: AppError) -> str:
    path = (e.details or {}).get("path")
    return f" ({os.path.basename(path)})" if path else ""


def _looks_locked(text: str) -> bool:
    low = text.lower()
    return any(w in low for w in _LOCK_WORDS)


_SIMPLE = {
    BAD_ADDRESS: "Invalid cell reference. Use references like A1, B2:D4 or 'Sheet Name'!A1.\n({msg})",
    SHEET_NOT_FOUND: "Sheet not found in workbook. Check that the sheet name is correct.\n({msg})",
    MISSING_TEMPLATE_PATH: "No template file path set. Enter the workbook to fill in the job.",
    BAD_JOB: "The job definition is invalid. Check its steps.\n({msg})",
    VALUE_NOT_FOUND: "No value found at the given reference.\n({msg})",
}


def friendly_message(e: AppError) -> str:
    """
    One plain-English line for a log or terminal, without tracebacks.
    """
    msg = e.message or ""

    if e.code == FILE_LOCKED:
        return f"File is open in another program{_file_hint(e)}. Close it and try again."

    if e.code == SAVE_FAILED:
        if _looks_locked(msg):
            return f"Could not save, the file is open in another program{_file_hint(e)}. Close it and try again."
        return f"Could not save the output file{_file_hint(e)}. Check that the path is valid and the folder exists."

    if e.code == SOURCE_READ_FAILED:
        if _looks_locked(msg):
            return "Source file is open in another program. Close it and try again."
        if "no such file" in msg.lower() or "not found" in msg.lower():
            return "Source file not found. Check that the file path is correct."
        return f"Could not read the data source.\n({msg})"

    if e.code in _SIMPLE:
        return _SIMPLE[e.code].format(msg=msg)

    return msg.splitlines()[0] if msg else "An unexpected error occurred."
