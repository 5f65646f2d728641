from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

REPORT_HEADER = [
    "NOME",
    "CNPJ",
    "FL_ELEGIVEL_VENDA_C6PAY",
    "TIPO_PESSOA",
    "DT_APROVACAO_PAY",
    "STATUS_CC",
]

# CRM extract: tax id in H, phase in B, owner in E
CRM_HEADER = ["ID", "Fase", "Titulo", "Origem", "Responsavel", "Criado", "Empresa", "CNPJ"]


def crm_row(cnpj, phase, owner):
    return [None, phase, None, None, owner, None, None, cnpj]


def write_xlsx(path: Path, sheets: dict) -> Path:
    """Write ``{sheet name: rows}`` to an xlsx file, first row being the header."""
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    wb.save(path)
    return path


def read_xlsx(path: Path, sheet: str) -> list:
    """Rows of a sheet as dicts keyed by the header row."""
    ws = load_workbook(path, read_only=True)[sheet]
    rows = list(ws.iter_rows(values_only=True))
    if not rows:
        return []
    header = list(rows[0])
    return [dict(zip(header, row)) for row in rows[1:]]


def sheet_header(path: Path, sheet: str) -> list:
    ws = load_workbook(path, read_only=True)[sheet]
    return list(next(ws.iter_rows(values_only=True)))


@pytest.fixture
def workdir(tmp_path):
    """A working directory with a complete set of full-mode inputs."""
    write_xlsx(
        tmp_path / "relatorio.xlsx",
        {
            "Plan1": [
                REPORT_HEADER,
                ["Alfa Ltda", "11.222/333-44", 1, "PJ", None, "liberada"],
                ["Beta SA", "55.666.777/0001-88", "1", "pj", None, "LIBERADA"],
                ["Gama ME", "99.999/999-99", 1, "PJ", None, "Liberada"],
                ["Delta", "12.345/678-90", 0, "PJ", None, "LIBERADA"],
                ["Epsilon", "22.333/444-55", 1, "PF", None, "LIBERADA"],
                ["Zeta", "33.444/555-66", 1, "PJ", "2024-01-10", "LIBERADA"],
                ["Eta", "44.555/666-77", 1, "PJ", None, "BLOQUEADA"],
            ]
        },
    )
    write_xlsx(
        tmp_path / "baixada_do_bitrix.xlsx",
        {
            "Negocios": [
                CRM_HEADER,
                crm_row("11222333-44", "Fase2", "Maria"),
                crm_row("55666777000188", "Fase1", "Joao"),
                crm_row(None, "FaseX", "Ninguem"),
            ]
        },
    )
    write_xlsx(
        tmp_path / "time_novembro.xlsx",
        {
            "Time": [
                ["Consultor", "Equipe"],
                ["MARIA", "North"],
                ["maria", "South"],
            ]
        },
    )
    return tmp_path
