"""Re-lookup artifact: a previously produced workbook with its embedded sheets."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import polars as pl

from ..config.source_mappings import (
    MAIN_SHEET,
    RELATIONSHIP_SHEET,
    RELATIONSHIP_SHEET_HINT,
    REVENUE_SHEET,
    REVENUE_SHEET_HINT,
    SUPERVISORS_SHEET,
    SUPERVISORS_SHEET_HINT,
)
from ..context import RunContext
from ..errors import EmptyRelationError, MissingInputError
from ..outputs.naming import locate_derived
from .crm import ArtifactCrmLoader
from .revenue import RevenueLoader
from .roster import ArtifactRosterLoader
from .utils import grid_to_frame


@dataclass
class Artifact:
    report: pl.DataFrame
    crm: pl.DataFrame
    roster: pl.DataFrame
    revenue: Optional[pl.DataFrame] = None
    # logical derived column -> report column holding it
    derived: Dict[str, str] = field(default_factory=dict)


def pick_sheet(names: List[str], exact: str, hint: str) -> Optional[str]:
    """Sheet called ``exact``, else the first whose name contains ``hint``."""
    if exact in names:
        return exact
    for name in names:
        if hint.lower() in name.lower():
            return name
    return None


def load_artifact(sheets: Dict[str, list], ctx: Optional[RunContext] = None) -> Artifact:
    names = list(sheets)
    main = MAIN_SHEET if MAIN_SHEET in sheets else (names[0] if names else None)
    relationship = pick_sheet(names, RELATIONSHIP_SHEET, RELATIONSHIP_SHEET_HINT)
    supervisors = pick_sheet(names, SUPERVISORS_SHEET, SUPERVISORS_SHEET_HINT)

    missing = [
        label
        for label, found in (
            (f"planilha {MAIN_SHEET}", main),
            (f"planilha {RELATIONSHIP_SHEET}", relationship),
            (f"planilha {SUPERVISORS_SHEET}", supervisors),
        )
        if found is None
    ]
    if missing:
        raise MissingInputError(missing)

    grid = sheets[main]
    if len(grid) < 2:
        raise EmptyRelationError(main)
    report = grid_to_frame(grid[0], grid[1:])
    if ctx is not None:
        ctx.info(f"[{main}] linhas={report.height}, colunas={report.width}")

    crm = ArtifactCrmLoader(ctx).load(sheets[relationship])
    roster = ArtifactRosterLoader(ctx).load(sheets[supervisors])

    revenue = None
    revenue_sheet = pick_sheet(
        [n for n in names if n not in {main, relationship, supervisors}],
        REVENUE_SHEET,
        REVENUE_SHEET_HINT,
    )
    if revenue_sheet is not None:
        revenue = RevenueLoader(ctx).load(sheets[revenue_sheet])

    return Artifact(
        report=report,
        crm=crm,
        roster=roster,
        revenue=revenue,
        derived=locate_derived(report.columns),
    )
