"""Workbook writer for the produced artifacts."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Mapping

import polars as pl
from openpyxl import Workbook

logger = logging.getLogger(__name__)


def _cell(value):
    # openpyxl rejects containers; anything exotic is written as text
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if hasattr(value, "isoformat"):
        return value
    return str(value)


def write_workbook(path, sheets: Mapping[str, pl.DataFrame]) -> Path:
    """Write each frame as a sheet (header row, then data rows), in mapping order.

    The workbook is written next to the target and moved into place, so a
    failure never leaves a partial file at ``path``.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    wb.remove(wb.active)
    for sheet_name, df in sheets.items():
        ws = wb.create_sheet(title=sheet_name[:31])
        ws.append(list(df.columns))
        for row in df.iter_rows():
            ws.append([_cell(v) for v in row])

    fd, tmp_name = tempfile.mkstemp(suffix=".xlsx", dir=path.parent)
    os.close(fd)
    try:
        wb.save(tmp_name)
        os.replace(tmp_name, path)
    except Exception:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info(f"Workbook saved to {path} (sheets: {', '.join(sheets)})")
    return path
