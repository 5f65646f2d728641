"""Excel file readers: pandas with openpyxl, or xlrd for legacy .xls."""

from datetime import datetime
from typing import Dict

from .base import BaseReader, Grid, drop_blank_rows


def _cell(value):
    import pandas as pd

    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return value
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    # numpy scalars -> python scalars
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        return value.item()
    return value


def _to_grid(df_pd) -> Grid:
    return drop_blank_rows([[_cell(v) for v in row] for row in df_pd.itertuples(index=False, name=None)])


class ExcelReader(BaseReader):
    """Reader for Excel workbooks (openpyxl)."""

    engine = "openpyxl"

    def read_grid(self, path: str, sheet_name=0, **kwargs) -> Grid:
        """Read one sheet as a positional grid, no header assumption."""
        import pandas as pd

        df_pd = pd.read_excel(
            path,
            sheet_name=sheet_name,
            header=None,
            dtype=object,
            engine=self.engine,
            **kwargs,
        )
        return _to_grid(df_pd)

    def read_sheets(self, path: str) -> Dict[str, Grid]:
        import pandas as pd

        sheets = pd.read_excel(path, sheet_name=None, header=None, dtype=object, engine=self.engine)
        return {str(name): _to_grid(pdf) for name, pdf in sheets.items()}

    def validate_path(self, path: str) -> bool:
        return path.lower().endswith((".xlsx", ".xlsm"))


class XlsReader(ExcelReader):
    """Reader for legacy binary .xls workbooks (xlrd)."""

    engine = "xlrd"

    def validate_path(self, path: str) -> bool:
        return path.lower().endswith(".xls")
