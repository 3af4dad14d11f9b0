"""
gridfill/names.py — Defined-name lookup.

Names match exactly (case-sensitive) and the first match wins. The stored
text is returned as-is; gridfill.address decides how to read it.
"""
from __future__ import annotations

from typing import Any, Optional


def lookup_defined_name(workbook: Any, name: str) -> Optional[str]:
    """Return the reference text bound to `name`, or None."""
    if not name:
        return None
    for dn_name, dn_text in workbook.defined_names():
        if dn_name == name:
            return dn_text
    return None
