"""Loaders turning raw grids into standardized relations."""

from .artifact import Artifact, load_artifact
from .base import BaseLoader, HeaderMappedLoader
from .crm import ArtifactCrmLoader, CrmLoader
from .report import ReportLoader
from .revenue import RevenueLoader
from .roster import ArtifactRosterLoader, RosterLoader
from .utils import (
    column_index,
    find_column_containing,
    grid_to_frame,
    resolve_column,
)

__all__ = [
    "Artifact",
    "load_artifact",
    "BaseLoader",
    "HeaderMappedLoader",
    "ArtifactCrmLoader",
    "CrmLoader",
    "ReportLoader",
    "RevenueLoader",
    "ArtifactRosterLoader",
    "RosterLoader",
    "column_index",
    "find_column_containing",
    "grid_to_frame",
    "resolve_column",
]
