"""CRM extract: fixed letter positions re-emitted under standardized headers."""

from typing import List

import polars as pl

from ..cleaning.key_sanitizer import to_display_string
from ..config.source_mappings import ARTIFACT_CRM_MAP, CRM_HEADERS, CRM_MAP
from .base import BaseLoader, HeaderMappedLoader
from .utils import column_index, standard_frame


class CrmLoader(BaseLoader):
    source_name = "bitrix"
    output_columns = CRM_HEADERS

    def _apply_load(self, grid: List[list]) -> pl.DataFrame:
        positions = {name: column_index(letter) for letter, name in CRM_MAP.items()}
        rows = []
        dropped = 0
        # first row is the CRM's own header
        for raw in grid[1:]:
            row = [raw[positions[h]] if positions[h] < len(raw) else None for h in CRM_HEADERS]
            if not to_display_string(row[0]):
                dropped += 1
                continue
            rows.append(row)
        if dropped and self.ctx is not None:
            self.ctx.info(f"[{self.source_name}] {dropped} linha(s) sem CNPJ descartada(s)")
        return standard_frame(CRM_HEADERS, rows)


class ArtifactCrmLoader(HeaderMappedLoader):
    """The standardized relationship sheet embedded in a previous artifact."""

    source_name = "C6 - Relacionamento"
    column_map = ARTIFACT_CRM_MAP
