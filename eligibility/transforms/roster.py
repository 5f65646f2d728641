"""Roster (team) file: owner and team columns detected by header substring."""

from ..config.source_mappings import (
    ARTIFACT_ROSTER_MAP,
    ROSTER_OWNER_FALLBACK,
    ROSTER_OWNER_HINTS,
    ROSTER_TEAM_FALLBACK,
    ROSTER_TEAM_HINTS,
)
from .base import HeaderMappedLoader

ROSTER_MAP = {
    "Consultor": (ROSTER_OWNER_HINTS, ROSTER_OWNER_FALLBACK),
    "Equipe": (ROSTER_TEAM_HINTS, (ROSTER_TEAM_FALLBACK, 0)),
}


class RosterLoader(HeaderMappedLoader):
    source_name = "time"
    column_map = ROSTER_MAP
    empty_as_blank = True


class ArtifactRosterLoader(HeaderMappedLoader):
    source_name = "supervisores"
    column_map = ARTIFACT_ROSTER_MAP
    empty_as_blank = True
