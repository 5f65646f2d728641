import polars as pl
import pytest
from polars.testing import assert_frame_equal

from eligibility.config.source_mappings import (
    CRM_HEADERS,
    NOT_FOUND,
    REVENUE_HEADERS,
    ROSTER_HEADERS,
)
from eligibility.context import RunContext
from eligibility.enrichment import enrich, find_tax_id_column
from eligibility.lookups import build_indexes
from eligibility.transforms import ReportLoader
from eligibility.transforms.utils import grid_to_frame, standard_frame


def make_indexes(crm_rows, roster_rows, revenue_rows=None):
    revenue = standard_frame(REVENUE_HEADERS, revenue_rows) if revenue_rows is not None else None
    return build_indexes(
        standard_frame(CRM_HEADERS, crm_rows),
        standard_frame(ROSTER_HEADERS, roster_rows),
        revenue,
    )


def test_find_tax_id_column():
    assert find_tax_id_column(["Nome", "Num CNPJ Empresa", "CNPJ"]) == "Num CNPJ Empresa"
    assert find_tax_id_column(["nome", "cnpj"]) == "cnpj"
    assert find_tax_id_column(["Nome", "Documento"]) is None


def test_enrich_fills_placeholders_in_place():
    ctx = RunContext("test")
    report = ReportLoader().load(
        [
            ["NOME", "CNPJ", "STATUS"],
            ["Alfa", "11.222/333-44", "ok"],
            ["Beta", "55.666.777/0001-88", "ok"],
            ["Gama", "99.999/999-99", "ok"],
        ]
    )
    indexes = make_indexes(
        [["11222333-44", "Fase2", "Maria"], ["55666777000188", "Fase1", "Joao"]],
        [["MARIA", "North"], ["maria", "South"]],
    )

    result = enrich(report, indexes, ctx)
    df = result.frame

    assert df.columns == report.columns
    assert df.columns.index("phase") == 2
    assert df.select("phase", "owner", "team").rows() == [
        ("Fase2", "Maria", "North"),
        ("Fase1", "Joao", NOT_FOUND),
        (NOT_FOUND, NOT_FOUND, NOT_FOUND),
    ]
    assert result.stats.as_dict() == {"rows": 3, "cnpj_misses": 1, "team_misses": 1}
    assert result.stats.unmatched_cnpj_sample == ["9999999999"]
    assert result.stats.owners_without_team_sample == ["Joao"]
    assert any("CNPJs não encontrados: 1" in line for line in ctx.logs)


def test_enrich_appends_missing_columns():
    df = grid_to_frame(["NOME", "CNPJ"], [["Alfa", "1"]])
    result = enrich(df, make_indexes([["1", "F", "Ana"]], [["ANA", "East"]]))
    expected = pl.DataFrame(
        {"NOME": ["Alfa"], "CNPJ": ["1"], "phase": ["F"], "owner": ["Ana"], "team": ["East"]}
    )
    assert_frame_equal(result.frame, expected)


def test_empty_crm_fields_become_not_found():
    df = grid_to_frame(["CNPJ"], [["1"], ["2"]])
    result = enrich(df, make_indexes([["1", None, "Ana"], ["2", "F", None]], [["ANA", "East"]]))
    assert result.frame.select("phase", "owner", "team").rows() == [
        (NOT_FOUND, "Ana", "East"),
        ("F", NOT_FOUND, NOT_FOUND),
    ]
    # no owner means no team lookup, hence no team miss
    assert result.stats.team_misses == 0


def test_blank_team_counts_as_miss():
    df = grid_to_frame(["CNPJ"], [["1"]])
    result = enrich(df, make_indexes([["1", "F", "Ana"]], [["Ana", ""]]))
    assert result.frame["team"].to_list() == [NOT_FOUND]
    assert result.stats.team_misses == 1


def test_no_tax_id_column():
    ctx = RunContext("test")
    df = grid_to_frame(["NOME"], [["Alfa"], ["Beta"]])
    result = enrich(df, make_indexes([["1", "F", "Ana"]], []), ctx)
    assert result.frame["phase"].to_list() == [NOT_FOUND, NOT_FOUND]
    assert result.stats.cnpj_misses == 2
    assert any("nenhuma coluna de CNPJ" in line for line in ctx.logs)


def test_revenue_keeps_raw_value():
    df = ReportLoader(with_revenue=True).load(
        [["NOME", "CNPJ"], ["Alfa", "11.222/333-44"], ["Beta", "55"]]
    )
    indexes = make_indexes([], [], [["1122233344", 1500.5]])
    result = enrich(df, indexes)

    assert result.frame.columns == ["NOME", "CNPJ", "phase", "owner", "team", "revenue"]
    assert result.frame["revenue"].to_list() == [1500.5, NOT_FOUND]
    assert result.stats.as_dict() == {
        "rows": 2,
        "cnpj_misses": 2,
        "team_misses": 0,
        "revenue_misses": 1,
    }


def test_enrich_empty_frame():
    df = ReportLoader().load([["NOME", "CNPJ"], ["x", "1"]]).clear()
    result = enrich(df, make_indexes([["1", "F", "Ana"]], []))
    assert result.frame.height == 0
    assert result.frame.columns == df.columns
    assert result.frame["phase"].dtype == pl.Utf8


def test_enrich_fills_named_targets_and_leaves_business_columns():
    loader = ReportLoader()
    df = loader.load([["NOME", "CNPJ", "team"], ["Alfa", "1", "azul"]])
    indexes = make_indexes([["1", "F", "Ana"]], [["ANA", "East"]])

    result = enrich(df, indexes, targets=loader.placeholders)

    assert result.columns == {"phase": "phase", "owner": "owner", "team": "team_1"}
    assert result.frame.columns == df.columns
    row = result.frame.row(0, named=True)
    assert row["team_1"] == "East"
    assert row["team"] == "azul"


def test_enrich_appends_under_free_names():
    df = grid_to_frame(["CNPJ", "owner"], [["1", "negócio"]])
    result = enrich(df, make_indexes([["1", "F", "Ana"]], [["ANA", "East"]]), targets={})
    assert result.frame.columns == ["CNPJ", "owner", "phase", "owner_1", "team"]
    assert result.frame.row(0) == ("1", "negócio", "F", "Ana", "East")


@pytest.mark.parametrize("cnpj", [11222333000144, 11222333000144.0, "11.222.333/0001-44"])
def test_numeric_tax_id_column(cnpj):
    df = grid_to_frame(["CNPJ"], [[cnpj]])
    result = enrich(df, make_indexes([["11.222.333/0001-44", "F", "Ana"]], [["ANA", "East"]]))
    assert result.frame.row(0)[1:] == ("F", "Ana", "East")


def test_mixed_tax_id_column():
    df = grid_to_frame(["CNPJ"], [[11222333000144], ["55.666"]])
    assert df["CNPJ"].dtype == pl.Object
    result = enrich(df, make_indexes([["11222333000144", "F", "Ana"], ["55666", "G", "Bia"]], []))
    assert result.frame["phase"].to_list() == ["F", "G"]
    # original cells untouched
    assert result.frame["CNPJ"].to_list() == [11222333000144, "55.666"]


def test_revenue_mixed_source_keeps_numbers():
    df = grid_to_frame(["CNPJ"], [["1"], ["2"]])
    result = enrich(df, make_indexes([], [], [["1", 1500.5], ["2", "N/D"]]))
    revenue = result.frame["revenue"].to_list()
    assert revenue == [1500.5, "N/D"]
    assert isinstance(revenue[0], float)
