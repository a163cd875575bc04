"""A small ordered table of text values used for findings output."""

from __future__ import annotations

import csv
import io
import json
import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Sequence

MISSING = "NaN"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?[0-9]+[eE][+-]?[0-9]+"
)


class FrameError(ValueError):
    """Raised when a frame is built or queried with unknown columns."""


@dataclass(frozen=True)
class Frame:
    """Rows of string values under named, ordered columns."""

    columns: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        if len(set(self.columns)) != len(self.columns):
            raise FrameError(f"duplicate column names in {self.columns!r}")
        width = len(self.columns)
        for row in self.rows:
            if len(row) != width:
                raise FrameError(f"row {row!r} does not have {width} values")

    @classmethod
    def from_records(
        cls, records: Iterable[Mapping[str, Any]], columns: Sequence[str]
    ) -> "Frame":
        """Build a frame from mappings, keeping only ``columns`` in that order."""
        records = list(records)
        columns = tuple(columns)
        if records:
            known = {key for record in records for key in record}
            unknown = [name for name in columns if name not in known]
            if unknown:
                raise FrameError(f"unknown column(s): {', '.join(unknown)}")
        rows = tuple(
            tuple(str(record[name]) if name in record else MISSING for name in columns)
            for record in records
        )
        return cls(columns, rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[dict[str, str]]:
        for row in self.rows:
            yield dict(zip(self.columns, row))

    def _index(self, name: str) -> int:
        try:
            return self.columns.index(name)
        except ValueError:
            raise FrameError(f"unknown column: {name}") from None

    def select(self, columns: Sequence[str]) -> "Frame":
        """Return a frame with only the given columns, in the given order."""
        indexes = [self._index(name) for name in columns]
        rows = tuple(tuple(row[i] for i in indexes) for row in self.rows)
        return Frame(tuple(columns), rows)

    def concat(self, other: "Frame") -> "Frame":
        """Append the rows of ``other``; columns absent on one side become NaN."""
        columns = self.columns + tuple(c for c in other.columns if c not in self.columns)

        def widen(frame: Frame) -> Iterator[tuple[str, ...]]:
            for record in frame:
                yield tuple(record.get(name, MISSING) for name in columns)

        return Frame(columns, tuple(widen(self)) + tuple(widen(other)))

    def column(self, name: str) -> list[str]:
        """Return the values of one column."""
        index = self._index(name)
        return [row[index] for row in self.rows]

    def to_csv(self) -> str:
        """Render the frame as CSV text with a header line."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(self.columns)
        writer.writerows(self.rows)
        return buffer.getvalue()

    def _typed_columns(self) -> list[list[Any]]:
        typed = []
        for name in self.columns:
            values = self.column(name)
            present = [v for v in values if v != MISSING]
            if present and all(_INT_RE.fullmatch(v) for v in present):
                convert: Any = int
            elif present and all(
                _INT_RE.fullmatch(v) or _FLOAT_RE.fullmatch(v) for v in present
            ):
                convert = float
            else:
                typed.append(values)
                continue
            typed.append([None if v == MISSING else convert(v) for v in values])
        return typed

    def to_json(self) -> str:
        """Render the frame as a JSON array of objects, numbers kept numeric."""
        typed = self._typed_columns()
        records = [
            {name: typed[col][row] for col, name in enumerate(self.columns)}
            for row in range(len(self.rows))
        ]
        return json.dumps(records, sort_keys=True) + "\n"