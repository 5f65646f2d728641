"""CSV file reader."""

import polars as pl

from .base import BaseReader, Grid, drop_blank_rows


class CSVReader(BaseReader):
    """Reader for CSV files."""

    def read_grid(self, path: str, **kwargs) -> Grid:
        """Read CSV file using polars, every cell as text."""
        read_config = {
            "has_header": False,
            "infer_schema_length": 0,
            "truncate_ragged_lines": True,
            "encoding": "utf8-lossy",
            **kwargs,
        }
        df = pl.read_csv(path, **read_config)
        return drop_blank_rows([list(row) for row in df.rows()])

    def validate_path(self, path: str) -> bool:
        """Validate CSV file path."""
        return path.lower().endswith((".csv", ".txt"))
