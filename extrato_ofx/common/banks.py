"""
Supported statement layouts (bank id -> display name, FEBRABAN code).
Codes follow the FEBRABAN / BACEN compensation list.
"""

BRAZILIAN_BANKS = {
    "001": "Banco do Brasil S.A.",
    "033": "Banco Santander (Brasil) S.A.",
    "084": "Sisprime do Brasil - Cooperativa de Crédito",
    "102": "XP Investimentos CCTVM S.A.",
    "197": "Stone Instituição de Pagamento S.A.",
    "208": "Banco BTG Pactual S.A.",
    "237": "Banco Bradesco S.A.",
    "260": "Nu Pagamentos S.A. (Nubank)",
    "290": "PagSeguro Internet S.A.",
    "341": "Itaú Unibanco S.A.",
    "403": "Cora Sociedade de Crédito Direto S.A.",
    "422": "Banco Safra S.A.",
    "748": "Banco Cooperativo Sicredi S.A.",
    "756": "Banco Cooperativo do Brasil S.A. (SICOOB)",
}

# bank id -> (display name, FEBRABAN code)
STATEMENT_LAYOUTS = {
    "sicoob": ("Sicoob", "756"),
    "sicoob2": ("Sicoob 2", "756"),
    "sicoob3": ("Sicoob 3", "756"),
    "sicredi": ("Sicredi", "748"),
    "sicredi2": ("Sicredi 2", "748"),
    "itau": ("Itaú", "341"),
    "itau2": ("Itaú 2", "341"),
    "bradesco": ("Bradesco", "237"),
    "safra": ("Safra", "422"),
    "safra2": ("Safra 2", "422"),
    "santander": ("Santander", "033"),
    "santander2": ("Santander 2", "033"),
    "santander3": ("Santander 3", "033"),
    "xp": ("XP Investimentos", "102"),
    "bb": ("Banco do Brasil", "001"),
    "bb2": ("Banco do Brasil 2", "001"),
    "pagseguro": ("PagSeguro", "290"),
    "stone": ("Stone", "197"),
    "sisprime2": ("Sisprime", "084"),
    "cora": ("Cora", "403"),
    "nubank": ("Nubank", "260"),
    "btg": ("BTG Pactual", "208"),
}

# Used in <BANKID> when the bank id is not a known layout
DEFAULT_OFX_BANK_CODE = "756"


def get_bank_name(code: str) -> str:
    """Returns the institution name for a FEBRABAN code."""
    return BRAZILIAN_BANKS.get(code.replace(".", "").strip(), "Banco Desconhecido")


def get_layout_name(bank_id: str) -> str:
    """Display name of a statement layout, or the id itself when unknown."""
    entry = STATEMENT_LAYOUTS.get(bank_id)
    return entry[0] if entry else bank_id


def get_febraban_code(bank_id: str) -> str:
    entry = STATEMENT_LAYOUTS.get(bank_id)
    return entry[1] if entry else DEFAULT_OFX_BANK_CODE
