"""Common utilities for loading tables: header resolution and frame building."""

import logging
from datetime import date, datetime
from typing import Any, List, Optional, Sequence, Union

import polars as pl

from ..cleaning.key_sanitizer import to_display_string
from ..context import RunContext, log_to

Position = Union[int, str, Sequence[Union[int, str]], None]

EMPTY_HEADER = "__EMPTY"


def column_index(position: Union[int, str]) -> int:
    """Convert a spreadsheet column letter (``"A"``, ``"AK"``) to a 0-based index."""
    if isinstance(position, int):
        return position
    letters = position.strip().upper()
    if not letters or not letters.isalpha() or not letters.isascii():
        raise ValueError(f"Invalid column letter: {position!r}")
    idx = 0
    for ch in letters:
        idx = idx * 26 + (ord(ch) - ord("A") + 1)
    return idx - 1


def _positions(fallback: Position) -> List[int]:
    if fallback is None:
        return []
    if isinstance(fallback, (int, str)):
        return [column_index(fallback)]
    return [column_index(p) for p in fallback]


def _fold(name: Any) -> str:
    return str(name).strip().upper() if name is not None else ""


def resolve_column(
    headers: Sequence[str],
    logical_name: Union[str, Sequence[str]],
    fallback_position: Position = None,
    ctx: Optional[RunContext] = None,
) -> Optional[str]:
    """Find a required column by exact (case-insensitive) name, else by position.

    ``logical_name`` may be a tuple of accepted names, tried in order. Using
    the positional fallback is logged as a warning. Returns ``None`` when the
    column cannot be resolved.
    """
    names = (logical_name,) if isinstance(logical_name, str) else tuple(logical_name)
    for name in names:
        wanted = _fold(name)
        for header in headers:
            if header and _fold(header) == wanted:
                return header

    for idx in _positions(fallback_position):
        if 0 <= idx < len(headers) and headers[idx]:
            log_to(
                ctx,
                f'AVISO: Coluna "{names[0]}" não encontrada pelo nome. '
                f"Usando fallback na posição {idx} ({headers[idx]}).",
                logging.WARNING,
            )
            return headers[idx]
    return None


def find_column_containing(
    headers: Sequence[str],
    needles: Sequence[str],
    fallback_position: Position = None,
) -> Optional[str]:
    """Loose variant of ``resolve_column``: first header containing any needle."""
    folded = [n.upper() for n in needles]
    for header in headers:
        name = _fold(header)
        if name and any(n in name for n in folded):
            return header
    for idx in _positions(fallback_position):
        if 0 <= idx < len(headers):
            return headers[idx]
    return None


def unique_headers(raw: Sequence[Any]) -> List[str]:
    """Text headers, blank ones named ``__EMPTY`` and duplicates suffixed ``_1``, ``_2``."""
    used = set()
    counts: dict = {}
    result = []
    for value in raw:
        base = to_display_string(value) or EMPTY_HEADER
        name = base
        while name in used:
            counts[base] = counts.get(base, 0) + 1
            name = f"{base}_{counts[base]}"
        used.add(name)
        result.append(name)
    return result


def free_name(base: str, taken) -> str:
    """``base``, or ``base_1``, ``base_2``... when it is already taken."""
    name = base
    n = 0
    while name in taken:
        n += 1
        name = f"{base}_{n}"
    return name


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, datetime):
        return "datetime"
    if isinstance(value, date):
        return "date"
    if isinstance(value, str):
        return "text"
    return "other"


def build_series(name: str, values: List[Any]) -> pl.Series:
    """Typed series when the column is homogeneous, raw Python values otherwise.

    Mixed columns (e.g. a revenue column holding numbers and ``"N/D"``) are
    kept as ``pl.Object`` so every cell is written back with its own type;
    key expressions render them with ``to_display_string``.
    """
    kinds = {_kind(v) for v in values if v is not None}
    if not kinds:
        return pl.Series(name, values, dtype=pl.Utf8)
    if len(kinds) == 1:
        kind = next(iter(kinds))
        if kind == "number" and any(isinstance(v, float) for v in values):
            return pl.Series(name, [None if v is None else float(v) for v in values], dtype=pl.Float64)
        if kind == "number" and all(v is None or abs(v) < 2**63 for v in values):
            return pl.Series(name, values, dtype=pl.Int64)
        if kind in {"bool", "datetime", "date", "text"}:
            return pl.Series(name, values)
    return pl.Series(name, values, dtype=pl.Object)


def grid_to_frame(header: Sequence[Any], rows: Sequence[Sequence[Any]]) -> pl.DataFrame:
    """Build a relation from a header row and positional data rows."""
    names = unique_headers(header)
    width = len(names)
    columns: List[List[Any]] = [[] for _ in range(width)]
    for row in rows:
        for i in range(width):
            columns[i].append(row[i] if i < len(row) else None)
    return pl.DataFrame([build_series(name, col) for name, col in zip(names, columns)])


def standard_frame(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> pl.DataFrame:
    """Relation with fixed standardized headers (empty frame keeps the schema)."""
    if not rows:
        return pl.DataFrame({h: pl.Series(h, [], dtype=pl.Utf8) for h in headers})
    return grid_to_frame(headers, rows)
