"""
PagSeguro account statement extractor.

    01/10/2025 Rendimento da conta - Rendimento líquido R$ 1,13
    02/10/2025 Pix enviado - Fulano -R$ 50,00
"""
import re
from typing import Dict, List

from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..classification import rule
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import contains_any, fold, normalize_text
from ..reconciliation import reconcile_balances
from ..values import br_date_to_iso, parse_br_amount

TABLE_HEADER = re.compile(r"Descri[çc][aã]o\s+Data\s+Valor", re.IGNORECASE)
PAGSEGURO_ROW = re.compile(r"(\d{2}/\d{2}/\d{4})\s+(.+?)\s+(-?R\$[\d.,]+)")


class PagSeguroExtractor(BaseExtractor):
    bank_id = "pagseguro"
    bank_name = "PagSeguro"
    classification_rules = (
        rule("XFER", "PIX RECEBIDO", "PIX ENVIADO", "QR CODE PIX"),
        rule("PAYMENT", "PAGAMENTO DE CONTA", "PAGAMENTO DE FATURA"),
        rule("INT", "RENDIMENTO"),
        rule("PAYMENT", "CARTAO DE CREDITO", "DARF"),
    )

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text, signed_currency=True)
        return contains_any(text, ["PAGSEGURO", "PAGBANK"]) and PAGSEGURO_ROW.search(text) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text, signed_currency=True)
        header = TABLE_HEADER.search(text)
        if header:
            text = text[header.end():]

        transactions = []
        daily_balances: Dict[str, float] = {}
        for m in PAGSEGURO_ROW.finditer(text):
            date_str, description, value_str = m.group(1), m.group(2).strip(), m.group(3)
            try:
                iso_date = br_date_to_iso(date_str)
                if "SALDO DO DIA" in fold(description):
                    value = parse_br_amount(value_str)
                    daily_balances[iso_date] = -value if value_str.startswith("-") else value
                    self._skip("balance_marker", raw=m.group(0)[:80])
                    continue
                transactions.append(self._build(iso_date, description, value_str, value_str.startswith("-")))
            except DateOutOfRange:
                self._skip("invalid_date", raw=m.group(0)[:80])
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=m.group(0)[:80])

        return reconcile_balances(transactions, daily_balances)
