"""Configuration management for the eligibility pipeline."""

from .source_mappings import (
    REPORT_FILE,
    CRM_FILE,
    ROSTER_FILE,
    REVENUE_FILE,
    ARTIFACT_FILE,
    RELOOKUP_OUTPUT_FILE,
    MAIN_SHEET,
    RELATIONSHIP_SHEET,
    SUPERVISORS_SHEET,
    REVENUE_SHEET,
    RESULT_SHEET,
    NOT_FOUND,
    DERIVED_COLUMNS,
    REVENUE_COLUMN,
    FILTER_COLUMNS,
)

__all__ = [
    "REPORT_FILE",
    "CRM_FILE",
    "ROSTER_FILE",
    "REVENUE_FILE",
    "ARTIFACT_FILE",
    "RELOOKUP_OUTPUT_FILE",
    "MAIN_SHEET",
    "RELATIONSHIP_SHEET",
    "SUPERVISORS_SHEET",
    "REVENUE_SHEET",
    "RESULT_SHEET",
    "NOT_FOUND",
    "DERIVED_COLUMNS",
    "REVENUE_COLUMN",
    "FILTER_COLUMNS",
]
