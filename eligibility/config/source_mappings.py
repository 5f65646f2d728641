"""Source file, sheet and column mappings for every input of the pipeline.

Column positions are spreadsheet letters; they are resolved to indexes once,
when each table is loaded.
"""

# Fixed file names looked up in the working directory
REPORT_FILE = "relatorio.xlsx"
CRM_FILE = "baixada_do_bitrix.xlsx"
ROSTER_FILE = "time_novembro.xlsx"
REVENUE_FILE = "faturamento.xlsx"
ARTIFACT_FILE = "elegiveis_auto.xlsx"
RELOOKUP_OUTPUT_FILE = "relatorio_final.xlsx"

# Sheet names of the produced workbooks
MAIN_SHEET = "Sheet1"
RELATIONSHIP_SHEET = "C6 - Relacionamento"
SUPERVISORS_SHEET = "supervisores"
REVENUE_SHEET = "faturamento"
RESULT_SHEET = "Resultado"

# Substrings used to find the embedded sheets of a re-lookup artifact
RELATIONSHIP_SHEET_HINT = "relacion"
SUPERVISORS_SHEET_HINT = "supervis"
REVENUE_SHEET_HINT = "faturamento"

# Placeholder for every lookup that did not resolve
NOT_FOUND = "Não encontrado"

# Derived columns, in insertion order
DERIVED_COLUMNS = ["phase", "owner", "team"]
REVENUE_COLUMN = "revenue"
# Derived columns are inserted right after the 2nd column of the report
DERIVED_INSERT_POSITION = 2

# CRM extract: positional columns, re-emitted under standardized headers
CRM_MAP = {
    "H": "CNPJ",
    "B": "Fase",
    "E": "Responsavel",
}
CRM_HEADERS = ["CNPJ", "Fase", "Responsavel"]

# Roster: header substrings (case-insensitive) with positional fallbacks
ROSTER_OWNER_HINTS = ("CONSULTOR", "CONSULTANT", "OWNER")
ROSTER_TEAM_HINTS = ("EQUIPE", "TEAM")
ROSTER_OWNER_FALLBACK = 0
ROSTER_TEAM_FALLBACK = 1
ROSTER_HEADERS = ["Consultor", "Equipe"]

# Revenue: tax id by substring, value always at position 1
REVENUE_TAX_ID_HINTS = ("CNPJ",)
REVENUE_VALUE_POSITION = 1
REVENUE_HEADERS = ["CNPJ", "Faturamento"]

# Tax id lookup inside a primary record
TAX_ID_HINT = "CNPJ"
TAX_ID_EXACT = ("CNPJ", "cnpj")

# Embedded sheets of a re-lookup artifact: (substrings, positional fallback)
ARTIFACT_CRM_MAP = {
    "CNPJ": (("CNPJ",), 0),
    "Fase": (("FASE",), 1),
    "Responsavel": (("RESPONS",), 2),
}
ARTIFACT_ROSTER_MAP = {
    "Consultor": (("CONSULT",), 0),
    "Equipe": (("EQUIPE", "TEAM"), 1),
}

# Filter columns: logical name -> (accepted header names, fallback letter)
FILTER_COLUMNS = {
    "ELIGIBLE": (("FL_ELEGIVEL_VENDA_C6PAY", "ELIGIBLE"), "AK"),
    "PERSON_TYPE": (("TIPO_PESSOA", "PERSON_TYPE"), "H"),
    "APPROVAL_DATE": (("DT_APROVACAO_PAY", "APPROVAL_DATE"), "AK"),
    "CC_STATUS": (("STATUS_CC", "CC_STATUS"), "Y"),
}

ELIGIBLE_VALUE = "1"
PERSON_TYPE_VALUE = "PJ"
CC_STATUS_VALUE = "LIBERADA"
