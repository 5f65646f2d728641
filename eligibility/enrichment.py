"""Fill phase, owner, team and revenue of every report row from the lookup indexes."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import polars as pl

from .cleaning.key_sanitizer import tax_id_key_expr, to_name_key
from .config.source_mappings import NOT_FOUND, REVENUE_COLUMN, TAX_ID_EXACT, TAX_ID_HINT
from .context import RunContext, log_to
from .lookups import LookupIndexes
from .transforms.utils import free_name

SAMPLE_SIZE = 5


@dataclass
class EnrichmentStats:
    rows: int = 0
    cnpj_misses: int = 0
    team_misses: int = 0
    revenue_misses: Optional[int] = None
    unmatched_cnpj_sample: List[str] = field(default_factory=list)
    owners_without_team_sample: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        data = {
            "rows": self.rows,
            "cnpj_misses": self.cnpj_misses,
            "team_misses": self.team_misses,
        }
        if self.revenue_misses is not None:
            data["revenue_misses"] = self.revenue_misses
        return data


@dataclass
class EnrichmentResult:
    frame: pl.DataFrame
    stats: EnrichmentStats
    # logical derived column -> column holding it in ``frame``
    columns: Dict[str, str] = field(default_factory=dict)


def find_tax_id_column(columns: Sequence[str]) -> Optional[str]:
    """First column whose name contains CNPJ, else an exact ``CNPJ``/``cnpj``."""
    for col in columns:
        if TAX_ID_HINT in col.upper():
            return col
    for col in TAX_ID_EXACT:
        if col in columns:
            return col
    return None


def _sample(bucket: List[str], value: str) -> None:
    if len(bucket) < SAMPLE_SIZE and value not in bucket:
        bucket.append(value)


def enrich(
    df: pl.DataFrame,
    indexes: LookupIndexes,
    ctx: Optional[RunContext] = None,
    targets: Optional[Mapping[str, str]] = None,
) -> EnrichmentResult:
    """Look up every row; misses degrade to the NOT_FOUND placeholder, never raise.

    ``targets`` maps the logical derived columns (``phase, owner, team`` and
    ``revenue`` with a revenue index) to the placeholder columns to fill in
    place. Without it, columns already carrying those names are filled.
    Derived columns with no target are appended in that order.
    """
    log_to(ctx, "Executando lookups e preenchendo colunas...")
    stats = EnrichmentStats(rows=df.height)
    with_revenue = indexes.revenue is not None
    if with_revenue:
        stats.revenue_misses = 0

    tax_col = find_tax_id_column(df.columns)
    if tax_col is None:
        log_to(ctx, "AVISO: nenhuma coluna de CNPJ encontrada no relatório.", logging.WARNING)
        tax_keys: List[str] = [""] * df.height
    else:
        tax_keys = df.select(tax_id_key_expr(tax_col)).to_series().to_list() if df.height else []

    phases: List[str] = []
    owners: List[str] = []
    teams: List[str] = []
    revenues: List[Any] = []

    for tax_key in tax_keys:
        entry = indexes.cnpj.get(tax_key) if tax_key else None
        if entry is not None:
            phase = entry.phase or NOT_FOUND
            owner = entry.owner or NOT_FOUND
        else:
            phase = owner = NOT_FOUND
            stats.cnpj_misses += 1
            if tax_key:
                _sample(stats.unmatched_cnpj_sample, tax_key)

        team = NOT_FOUND
        if owner != NOT_FOUND:
            found_team = indexes.teams.get(to_name_key(owner))
            if found_team:
                team = found_team
            else:
                stats.team_misses += 1
                _sample(stats.owners_without_team_sample, owner)

        phases.append(phase)
        owners.append(owner)
        teams.append(team)

        if with_revenue:
            if tax_key and tax_key in indexes.revenue:
                revenues.append(indexes.revenue[tax_key])
            else:
                revenues.append(NOT_FOUND)
                stats.revenue_misses += 1

    derived = {
        "phase": phases,
        "owner": owners,
        "team": teams,
    }
    if with_revenue:
        derived[REVENUE_COLUMN] = revenues

    # placeholders are filled where they sit; anything else is appended under a free name
    targets = dict(targets) if targets is not None else {c: c for c in derived if c in df.columns}
    taken = set(df.columns) | set(targets.values())
    series = []
    for logical, values in derived.items():
        if logical not in targets:
            targets[logical] = free_name(logical, taken)
            taken.add(targets[logical])
        if logical == REVENUE_COLUMN:
            # raw values keep their type next to the text placeholder
            dtype = pl.Object if values else pl.Utf8
        else:
            dtype = pl.Utf8
        series.append(pl.Series(targets[logical], values, dtype=dtype))

    message = (
        f"Lookups concluídos. CNPJs não encontrados: {stats.cnpj_misses}. "
        f"Responsáveis (consultor) sem supervisor: {stats.team_misses}."
    )
    if with_revenue:
        message += f" CNPJs sem faturamento: {stats.revenue_misses}."
    log_to(ctx, message)

    return EnrichmentResult(frame=df.with_columns(series), stats=stats, columns=targets)
