"""Diagnostics helpers (opt-in via PROCESSOR_DIAG).

Keep diagnostics separate from core logic. Never mutate inputs.
Failures are logged as errors and do not raise.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable

import polars as pl

from ..config.source_mappings import NOT_FOUND

logger = logging.getLogger(__name__)


def _diag_enabled() -> bool:
    val = os.getenv("PROCESSOR_DIAG", "1").strip().lower()
    return val in {"1", "true", "yes", "on"}


def log_lookup_misses(stats) -> None:
    """Log samples of tax ids without CRM entry and owners without a team."""
    if not _diag_enabled():
        return
    try:
        if stats.unmatched_cnpj_sample:
            logger.info(f"Unmatched CNPJ sample: {stats.unmatched_cnpj_sample}")
        if stats.owners_without_team_sample:
            logger.info(f"Owners without team sample: {stats.owners_without_team_sample}")
    except Exception:
        logger.error("Lookup miss diagnostics failed", exc_info=True)


def log_fill_rates(df: pl.DataFrame, columns: Iterable[str]) -> None:
    """Share of rows whose derived column resolved to something other than NOT_FOUND."""
    if not _diag_enabled():
        return
    try:
        total = df.height
        if total == 0:
            return
        payload = {}
        for col in columns:
            if col not in df.columns:
                continue
            misses = sum(1 for v in df.get_column(col).to_list() if v == NOT_FOUND)
            payload[col] = f"{(total - misses) / total:.1%}"
        logger.info(f"Fill rates over {total} rows: {payload}")
    except Exception:
        logger.error("Fill rate diagnostics failed", exc_info=True)
