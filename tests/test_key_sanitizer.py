import pytest
import polars as pl

from eligibility.cleaning.key_sanitizer import (
    display_expr,
    name_key_expr,
    tax_id_key_expr,
    to_display_string,
    to_name_key,
    to_tax_id_key,
)


@pytest.mark.parametrize(
    "input_val, expected_val",
    [
        (None, ""),
        (float("nan"), ""),
        ("  ABC  ", "ABC"),
        (1, "1"),
        (1.0, "1"),
        (2.5, "2.5"),
        (11222333000144.0, "11222333000144"),
        ("", ""),
    ]
)
def test_to_display_string(input_val, expected_val):
    assert to_display_string(input_val) == expected_val


@pytest.mark.parametrize(
    "input_val, expected_val",
    [
        ("12.345/678-90", "1234567890"),
        ("1234567890", "1234567890"),
        (" 00.123.456/0001-00 ", "00123456000100"),
        (11222333000144, "11222333000144"),
        ("sem cnpj", ""),
        (None, ""),
    ]
)
def test_to_tax_id_key(input_val, expected_val):
    assert to_tax_id_key(input_val) == expected_val


def test_key_equivalence():
    assert to_tax_id_key("12.345/678-90") == to_tax_id_key("1234567890")
    assert to_name_key(" ana Silva ") == to_name_key("ANA SILVA")


@pytest.mark.parametrize("value", [" ana Silva ", "12.345/678-90", 42, 3.0, None, "Não encontrado"])
def test_normalization_is_idempotent(value):
    assert to_tax_id_key(to_tax_id_key(value)) == to_tax_id_key(value)
    assert to_name_key(to_name_key(value)) == to_name_key(value)


def test_key_expressions_match_scalar_functions():
    """The vectorized helpers apply the same rules, nulls included."""
    df = pl.DataFrame({"ID": [" 11.222/333-44 ", None, "maria "]})
    out = df.select(
        display_expr("ID").alias("display"),
        name_key_expr("ID").alias("name"),
        tax_id_key_expr("ID").alias("tax"),
    )
    assert out["display"].to_list() == ["11.222/333-44", "", "maria"]
    assert out["name"].to_list() == ["11.222/333-44", "", "MARIA"]
    assert out["tax"].to_list() == ["1122233344", "", ""]
