"""
gridfill/sources.py — Record sources for area fills.

A RowSource yields records (sequences of field values) one at a time. The
consumer passes a `should_stop` callback; a source checks it before fetching
each record, so a live query cursor never pulls rows that would land outside
a fixed target area.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Sequence, Union


def _never() -> bool:
    return False


class RowSource(ABC):
    @abstractmethod
    def rows(self, should_stop: Callable[[], bool] = _never) -> Iterator[Sequence[Any]]:
        """Yield records until exhausted or until should_stop() is true."""

    def close(self) -> None:
        pass


class MatrixRowSource(RowSource):
    """Records from an in-memory matrix or any iterable of sequences."""

    def __init__(self, data: Iterable[Sequence[Any]]):
        self.data = data

    def rows(self, should_stop: Callable[[], bool] = _never) -> Iterator[Sequence[Any]]:
        it = iter(self.data)
        while not should_stop():
            try:
                record = next(it)
            except StopIteration:
                return
            yield record


class CursorRowSource(RowSource):
    """
    Records pulled lazily from a DB-API 2.0 cursor with fetchone().

    Use from_query() to run SQL on a connection; the cursor it opens is
    closed by close().
    """

    def __init__(self, cursor: Any, owns_cursor: bool = False):
        self.cursor = cursor
        self.owns_cursor = owns_cursor

    @classmethod
    def from_query(
        cls,
        connection: Any,
        sql: str,
        params: Union[Mapping[str, Any], Sequence[Any], None] = None,
    ) -> "CursorRowSource":
        """Run `sql` with positional (sequence) or named (mapping) parameters."""
        if params is None:
            params = ()
        elif not isinstance(params, Mapping):
            params = tuple(params)
        cursor = connection.cursor()
        cursor.execute(sql, params)
        return cls(cursor, owns_cursor=True)

    @property
    def column_names(self) -> List[str]:
        return [d[0] for d in (self.cursor.description or [])]

    def rows(self, should_stop: Callable[[], bool] = _never) -> Iterator[Sequence[Any]]:
        while not should_stop():
            record = self.cursor.fetchone()
            if record is None:
                return
            yield record

    def close(self) -> None:
        if self.owns_cursor:
            self.cursor.close()


def as_row_source(data: Any) -> RowSource:
    if isinstance(data, RowSource):
        return data
    return MatrixRowSource(data)
