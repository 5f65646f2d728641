"""Primary eligibility report: positional grid plus derived placeholder columns."""

from typing import Dict, List, Optional

import polars as pl

from ..config.source_mappings import (
    DERIVED_COLUMNS,
    DERIVED_INSERT_POSITION,
    REVENUE_COLUMN,
)
from ..context import RunContext
from ..errors import EmptyRelationError
from .base import BaseLoader
from .utils import free_name, grid_to_frame, unique_headers


class ReportLoader(BaseLoader):
    source_name = "relatorio"

    def __init__(self, ctx: Optional[RunContext] = None, with_revenue: bool = False):
        super().__init__(ctx)
        self.with_revenue = with_revenue
        # logical derived column -> column name in the loaded frame
        self.placeholders: Dict[str, str] = {}

    @property
    def derived_columns(self) -> List[str]:
        return DERIVED_COLUMNS + ([REVENUE_COLUMN] if self.with_revenue else [])

    def _apply_load(self, grid: List[list]) -> pl.DataFrame:
        if len(grid) < 2:
            raise EmptyRelationError(self.source_name)

        pos = DERIVED_INSERT_POSITION
        width = max(pos, max(len(row) for row in grid))
        padded = [list(row) + [None] * (width - len(row)) for row in grid]

        # business headers are settled first; placeholders take whatever name is left
        business = unique_headers(padded[0])
        taken = set(business)
        self.placeholders = {}
        for logical in self.derived_columns:
            name = free_name(logical, taken)
            taken.add(name)
            self.placeholders[logical] = name
        names = list(self.placeholders.values())

        header = business[:pos] + names + business[pos:]
        rows = [row[:pos] + [None] * len(names) + row[pos:] for row in padded[1:]]
        if self.ctx is not None:
            self.ctx.info(
                f"Inserindo {len(names)} colunas em branco na posição {pos}: {', '.join(names)}"
            )
        return grid_to_frame(header, rows)
