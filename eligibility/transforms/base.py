"""Base loader class that enforces the standardized relation contract."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

import polars as pl

from ..context import RunContext, log_to
from ..errors import MissingColumnError
from .utils import Position, find_column_containing, standard_frame, unique_headers


class BaseLoader(ABC):
    """
    An abstract base class for all table loaders.

    This class implements the Template Method pattern. The `load` method takes a
    positional grid, delegates the source-specific work to `_apply_load`, and
    enforces the output headers when the loader declares them.

    Subclasses must implement:
    - source_name: Human-readable name used in logs and errors.
    - _apply_load(): Turns the grid into a relation.
    Subclasses may declare:
    - output_columns: The exact standardized headers of the relation.
    """

    source_name: str = "tabela"
    output_columns: Optional[List[str]] = None

    def __init__(self, ctx: Optional[RunContext] = None):
        self.ctx = ctx

    @abstractmethod
    def _apply_load(self, grid: List[list]) -> pl.DataFrame:
        """Core loading logic to be implemented by subclasses."""
        pass

    def load(self, grid: List[list]) -> pl.DataFrame:
        df = self._apply_load(grid)
        if self.output_columns is not None and df.columns != self.output_columns:
            raise ValueError(
                f"[{self.__class__.__name__}] colunas inesperadas: {df.columns} != {self.output_columns}"
            )
        log_to(self.ctx, f"[{self.source_name}] linhas={df.height}, colunas={df.width}")
        return df


class HeaderMappedLoader(BaseLoader):
    """Loader for header-named inputs, driven by a column map.

    ``column_map`` maps each standardized output header to a pair of
    (header substrings, positional fallback). The map is resolved once per
    table against the header row; rows are then projected by index.
    """

    column_map: Dict[str, Tuple[Sequence[str], Position]] = {}
    empty_as_blank: bool = False

    def __init__(self, ctx: Optional[RunContext] = None, column_map=None):
        super().__init__(ctx)
        if column_map is not None:
            self.column_map = column_map
        self.output_columns = list(self.column_map)

    def resolve(self, headers: List[str]) -> Dict[str, int]:
        indexes: Dict[str, int] = {}
        missing = []
        for out_name, (needles, fallback) in self.column_map.items():
            found = find_column_containing(headers, needles, fallback)
            if found is None:
                missing.append(f"{self.source_name}.{out_name}")
            else:
                indexes[out_name] = headers.index(found)
        if missing:
            raise MissingColumnError(missing)
        for out_name, idx in indexes.items():
            log_to(self.ctx, f"[{self.source_name}] {out_name} <- '{headers[idx]}'", logging.DEBUG)
        return indexes

    def _apply_load(self, grid: List[list]) -> pl.DataFrame:
        if not grid:
            return standard_frame(self.output_columns, [])
        headers = unique_headers(grid[0])
        indexes = self.resolve(headers)
        rows = []
        for raw in grid[1:]:
            row = []
            for out_name in self.output_columns:
                idx = indexes[out_name]
                value = raw[idx] if idx < len(raw) else None
                if value is None and self.empty_as_blank:
                    value = ""
                row.append(value)
            rows.append(row)
        return standard_frame(self.output_columns, rows)
