"""Lookup indexes built once per run from the standardized support relations."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Optional

import polars as pl

from .cleaning.key_sanitizer import display_expr, name_key_expr, tax_id_key_expr
from .config.source_mappings import CRM_HEADERS, REVENUE_HEADERS, ROSTER_HEADERS
from .context import RunContext, log_to


class CrmEntry(NamedTuple):
    phase: str
    owner: str


@dataclass(frozen=True)
class LookupIndexes:
    cnpj: Mapping[str, CrmEntry]
    teams: Mapping[str, str]
    revenue: Optional[Mapping[str, Any]] = None


def _keyed(df: pl.DataFrame, key_expr: pl.Expr, value_exprs: list, keep: str) -> pl.DataFrame:
    """Key column plus payload, empty keys dropped, one row per key."""
    return (
        df.select([key_expr.alias("_key"), *value_exprs])
        .filter(pl.col("_key") != "")
        .unique(subset="_key", keep=keep, maintain_order=True)
    )


def build_cnpj_index(crm: pl.DataFrame) -> Mapping[str, CrmEntry]:
    """Tax id -> (phase, owner). Later rows overwrite earlier ones."""
    cnpj_col, phase_col, owner_col = CRM_HEADERS
    keyed = _keyed(
        crm,
        tax_id_key_expr(cnpj_col),
        [display_expr(phase_col).alias("_phase"), display_expr(owner_col).alias("_owner")],
        keep="last",
    )
    return MappingProxyType(
        {key: CrmEntry(phase, owner) for key, phase, owner in keyed.iter_rows()}
    )


def build_team_index(roster: pl.DataFrame) -> Mapping[str, str]:
    """Owner name -> team. The first row of a repeated owner wins."""
    owner_col, team_col = ROSTER_HEADERS
    keyed = _keyed(roster, name_key_expr(owner_col), [display_expr(team_col).alias("_team")], keep="first")
    return MappingProxyType(dict(keyed.iter_rows()))


def build_revenue_index(revenue: pl.DataFrame) -> Mapping[str, Any]:
    """Tax id -> raw revenue value (type preserved). Later rows overwrite earlier ones."""
    cnpj_col, value_col = REVENUE_HEADERS
    keys = revenue.select(tax_id_key_expr(cnpj_col)).to_series().to_list()
    # values may be a mixed Object column; read them back as Python objects
    index = {}
    for key, value in zip(keys, revenue.get_column(value_col).to_list()):
        if key:
            index[key] = value
    return MappingProxyType(index)


def build_indexes(
    crm: pl.DataFrame,
    roster: pl.DataFrame,
    revenue: Optional[pl.DataFrame] = None,
    ctx: Optional[RunContext] = None,
) -> LookupIndexes:
    log_to(ctx, "Montando mapas de lookup...")
    indexes = LookupIndexes(
        cnpj=build_cnpj_index(crm),
        teams=build_team_index(roster),
        revenue=build_revenue_index(revenue) if revenue is not None else None,
    )
    sizes = f"CNPJs={len(indexes.cnpj)}, consultores={len(indexes.teams)}"
    if indexes.revenue is not None:
        sizes += f", faturamento={len(indexes.revenue)}"
    log_to(ctx, f"Mapas criados: {sizes}")
    return indexes
