"""Base reader interface and registry."""

import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

Grid = List[List[Any]]


class BaseReader(ABC):
    """Base interface for all tabular readers.

    A reader turns a file into a positional grid: a list of rows, each a list
    of cell values with ``None`` for empty cells. Fully blank rows are dropped.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    @abstractmethod
    def read_grid(self, path: str, **kwargs) -> Grid:
        """Read the first (or requested) table of a file."""
        pass

    def read_sheets(self, path: str) -> Dict[str, Grid]:
        """Read every table of a file keyed by sheet name."""
        return {"Sheet1": self.read_grid(path)}

    def validate_path(self, path: str) -> bool:
        """Validate if reader can handle this path."""
        return True


def drop_blank_rows(rows: Grid) -> Grid:
    return [row for row in rows if any(v is not None and v != "" for v in row)]


class ReaderRegistry:
    """Registry for file readers."""

    def __init__(self):
        self._readers: Dict[str, Type[BaseReader]] = {}

    def register(self, file_type: str, reader_class: Type[BaseReader]):
        """Register a reader for specific file type."""
        self._readers[file_type] = reader_class

    def get_reader(self, file_type: str) -> Optional[Type[BaseReader]]:
        """Get reader for file type."""
        return self._readers.get(file_type)

    def detect_reader(self, path: str) -> Optional[Type[BaseReader]]:
        """Pick a reader from the file extension.

        Handles polluted names such as ``file.xlsx~1`` or ``file.xlsx (1)``
        produced by browsers and sync clients.
        """
        basename = os.path.basename(str(path)).lower()
        for file_type in sorted(self._readers, key=len, reverse=True):
            ext = f".{file_type}"
            pos = basename.rfind(ext)
            if pos == -1:
                continue
            next_pos = pos + len(ext)
            if next_pos >= len(basename) or basename[next_pos] in " .~(":
                return self._readers[file_type]
        return None
