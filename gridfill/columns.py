"""
gridfill/columns.py — Column letter <-> index conversion.

Columns use bijective base-26: there is no zero digit, so the sequence runs
A..Z, AA..AZ, BA.. without gaps. Indices are 1-based and capped at MAX_COL.
"""
from __future__ import annotations

import re

from .errors import AddressError


MAX_COL = 16384

_COL_RE = re.compile(r"^[A-Za-z]+$")


def col_letters_to_index(col: str) -> int:
    """
    Convert column letters to a 1-based index (A->1, Z->26, AA->27).
    Case-insensitive. Does not enforce MAX_COL; callers validate range.
    """
    if col is None or col.strip() == "":
        raise AddressError("Column letters must not be empty", {"column": col})
    s = col.strip().upper()
    if not _COL_RE.match(s):
        raise AddressError(f"Bad column: {col!r}", {"column": col})
    n = 0
    for ch in s:
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n


def col_index_to_letters(n: int) -> str:
    """
    Convert a 1-based index to column letters (1->A, 27->AA).
    """
    if n <= 0:
        raise AddressError(f"Bad column index: {n}", {"column": n})
    out = []
    x = n
    while x:
        x, rem = divmod(x - 1, 26)
        out.append(chr(ord("A") + rem))
    return "".join(reversed(out))
