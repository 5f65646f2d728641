import sys

import polars as pl

from eligibility.config import MAIN_SHEET, NOT_FOUND
from eligibility.readers import read_sheets
from eligibility.transforms import grid_to_frame

DERIVED = ["fase", "responsavel", "Supervisor", "faturamento"]


def run(df: pl.DataFrame):
    print(f"rows={df.height}, cols={df.width}")
    for col in DERIVED:
        if col in df.columns:
            values = df.get_column(col).to_list()
            found = sum(1 for v in values if v is not None and v != NOT_FOUND)
            print(f"{col: <12}  found={found:>6}  missing={len(values) - found:>6}")
        else:
            print(f"{col: <12}  MISSING")


if __name__ == "__main__":
    # a produced workbook: elegiveis_auto.xlsx or relatorio_final.xlsx
    path = sys.argv[1] if len(sys.argv) > 1 else "elegiveis_auto.xlsx"
    sheets = read_sheets(path)
    grid = sheets.get(MAIN_SHEET) or next(iter(sheets.values()))
    run(grid_to_frame(grid[0], grid[1:]))
