"""Ordered row filters applied to the primary report."""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import polars as pl

from .cleaning.key_sanitizer import display_expr
from .config.source_mappings import (
    CC_STATUS_VALUE,
    ELIGIBLE_VALUE,
    FILTER_COLUMNS,
    PERSON_TYPE_VALUE,
)
from .context import RunContext, log_to
from .errors import MissingColumnError
from .transforms.utils import resolve_column


def is_eligible(column: str) -> pl.Expr:
    """Numeric or text ``1``."""
    return display_expr(column) == ELIGIBLE_VALUE


def is_legal_entity(column: str) -> pl.Expr:
    return display_expr(column).str.to_uppercase() == PERSON_TYPE_VALUE


def is_not_approved(column: str) -> pl.Expr:
    return display_expr(column) == ""


def is_released(column: str) -> pl.Expr:
    return display_expr(column).str.to_uppercase() == CC_STATUS_VALUE


class FilterStage:
    def __init__(self, logical_name: str, predicate: Callable[[str], pl.Expr], label: str):
        self.logical_name = logical_name
        self.predicate = predicate
        self.label = label

    def expr(self, column: str) -> pl.Expr:
        return self.predicate(column)


FILTER_CHAIN: List[FilterStage] = [
    FilterStage("ELIGIBLE", is_eligible, f'ELIGIBLE = "{ELIGIBLE_VALUE}"'),
    FilterStage("PERSON_TYPE", is_legal_entity, f'PERSON_TYPE = "{PERSON_TYPE_VALUE}"'),
    FilterStage("APPROVAL_DATE", is_not_approved, "APPROVAL_DATE vazia"),
    FilterStage("CC_STATUS", is_released, f'CC_STATUS = "{CC_STATUS_VALUE}"'),
]


@dataclass
class FilterOutcome:
    frame: pl.DataFrame
    counts: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def survivors(self) -> int:
        return self.frame.height


def resolve_filter_columns(headers: Sequence[str], ctx: Optional[RunContext] = None) -> Dict[str, str]:
    """Map every filter stage to a report column, or fail naming all unresolved ones."""
    resolved: Dict[str, str] = {}
    missing = []
    for stage in FILTER_CHAIN:
        names, fallback = FILTER_COLUMNS[stage.logical_name]
        column = resolve_column(headers, names, fallback, ctx)
        if column is None:
            missing.append(names[0])
        else:
            resolved[stage.logical_name] = column
    if missing:
        log_to(ctx, "Erro: não foi possível localizar todas as colunas de filtro (com fallback).")
        raise MissingColumnError(missing)
    return resolved


def apply_filters(
    df: pl.DataFrame,
    columns: Dict[str, str],
    ctx: Optional[RunContext] = None,
) -> FilterOutcome:
    """Run the chain in its fixed order, recording the surviving count after each stage."""
    counts = [("antes do filtro", df.height)]
    log_to(ctx, f"Total de linhas antes do filtro: {df.height}")
    for stage in FILTER_CHAIN:
        column = columns[stage.logical_name]
        if df.height:
            df = df.filter(stage.expr(column))
        counts.append((stage.label, df.height))
        log_to(ctx, f"Após filtro {stage.label} [{column}]: {df.height}")
    return FilterOutcome(frame=df, counts=counts)
