import math
import re

import polars as pl

_NON_DIGIT = re.compile(r"[^0-9]")


def to_display_string(value) -> str:
    """Trimmed text form of a cell value; empty string for missing cells.

    Integral floats print without the decimal part, the way a spreadsheet
    shows them (``1.0`` -> ``"1"``).
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def to_name_key(value) -> str:
    return to_display_string(value).upper()


def to_tax_id_key(value) -> str:
    """Digits-only join key; punctuation and spacing are dropped, leading zeros kept."""
    return _NON_DIGIT.sub("", to_display_string(value))


def _mapped(col: str, fn) -> pl.Expr:
    # to_list() yields plain Python values for every dtype, Object columns included
    return pl.col(col).map_batches(
        lambda s: pl.Series(s.name, [fn(v) for v in s.to_list()], dtype=pl.Utf8),
        return_dtype=pl.Utf8,
    )


def display_expr(col: str) -> pl.Expr:
    return _mapped(col, to_display_string)


def name_key_expr(col: str) -> pl.Expr:
    return _mapped(col, to_name_key)


def tax_id_key_expr(col: str) -> pl.Expr:
    return _mapped(col, to_tax_id_key)
