"""Final output column naming (Portuguese standardization)."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

import polars as pl

# Map internal standardized names -> final output names
OUTPUT_NAME_MAP: dict[str, str] = {
    "phase": "fase",
    "owner": "responsavel",
    "team": "Supervisor",
    "revenue": "faturamento",
}

# Output names (case-folded) accepted back when a produced artifact is re-read
INPUT_NAME_MAP: dict[str, str] = {
    "FASE": "phase",
    "RESPONSAVEL": "owner",
    "RESPONSÁVEL": "owner",
    "SUPERVISOR": "team",
    "FATURAMENTO": "revenue",
}


def rename_for_output(df: pl.DataFrame, columns: Optional[Mapping[str, str]] = None) -> pl.DataFrame:
    """Rename derived columns to their output names.

    ``columns`` maps each logical derived column to the column holding it;
    by default columns carrying the logical names themselves. A derived
    column whose output name is already taken by a business column keeps
    its own name.
    """
    if columns is None:
        columns = {c: c for c in OUTPUT_NAME_MAP if c in df.columns}
    taken = set(df.columns)
    mapping: dict[str, str] = {}
    for logical, src in columns.items():
        dst = OUTPUT_NAME_MAP.get(logical)
        if dst is None or src == dst or src not in taken or dst in taken:
            continue
        mapping[src] = dst
        taken.add(dst)
    return df.rename(mapping) if mapping else df


def locate_derived(columns: Sequence[str]) -> dict[str, str]:
    """Logical derived column -> column of a produced artifact holding it.

    Case-insensitive on the output names; the first matching column wins.
    """
    found: dict[str, str] = {}
    for col in columns:
        logical = INPUT_NAME_MAP.get(col.strip().upper())
        if logical and logical not in found:
            found[logical] = col
    return found
