"""Revenue file: tax id by header substring, revenue always at position 1."""

from ..config.source_mappings import (
    REVENUE_HEADERS,
    REVENUE_TAX_ID_HINTS,
    REVENUE_VALUE_POSITION,
)
from .base import HeaderMappedLoader

REVENUE_MAP = {
    REVENUE_HEADERS[0]: (REVENUE_TAX_ID_HINTS, 0),
    REVENUE_HEADERS[1]: ((), REVENUE_VALUE_POSITION),
}


class RevenueLoader(HeaderMappedLoader):
    source_name = "faturamento"
    column_map = REVENUE_MAP
