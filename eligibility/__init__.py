"""Eligibility report enrichment pipeline."""

from .processor import (
    AUTO_MODE,
    FULL_MODE,
    RELOOKUP_MODE,
    EligibilityProcessor,
    PipelineResult,
    SourceFiles,
)

__version__ = "1.0.0"

__all__ = [
    "AUTO_MODE",
    "FULL_MODE",
    "RELOOKUP_MODE",
    "EligibilityProcessor",
    "PipelineResult",
    "SourceFiles",
]
