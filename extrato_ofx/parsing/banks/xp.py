"""
XP Investimentos account statement extractor.

Rows print the liquidation and movement dates followed by the history, a
signed value and the resulting balance:

    02/01/2025 02/01/2025 RESGATE CDB XP - R$1.000,00 R$5.000,00
"""
import re
from typing import List

from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..classification import rule
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import contains_any, isolate_section, normalize_text
from ..values import br_date_to_iso

# "1 . 234 , 56" -> "1.234,56"
SPLIT_NUMBER = re.compile(r"(\d)\s*([.,])\s*(\d)")
XP_ROW = re.compile(
    r"(\d{2}/\d{2}/\d{4})\s+\d{2}/\d{2}/\d{4}\s+(.+?)\s+(-)?R\$([\d.,]+)\s+(-)?R\$([\d.,]+)")
XP_TABLE_HEADER = "Liq Mov Histórico Valor Saldo"


class XPExtractor(BaseExtractor):
    bank_id = "xp"
    bank_name = "XP Investimentos"
    classification_rules = (
        rule("XFER", "RETIRADA", requires=("TED",)),
        rule("DEP", "RECEBIMENTO DE TED", "RECEBIMENTO TED"),
        rule("XFER", "RESGATE", "APLICACAO"),
        rule("FEE", "IRRF", "IOF"),
        rule("XFER", "RECOMPRA", "COMPROMISSADA"),
    )

    def validate_format(self, text: str) -> bool:
        text = self._normalize(text)
        return contains_any(text, ["XP INVESTIMENTOS", XP_TABLE_HEADER]) and XP_ROW.search(text) is not None

    def _normalize(self, text: str) -> str:
        return SPLIT_NUMBER.sub(r"\1\2\3", normalize_text(text, colons=True, signed_currency=True))

    def extract(self, text: str) -> List[Transaction]:
        section = isolate_section(self._normalize(text), XP_TABLE_HEADER, bank_id=self.bank_id)

        transactions = []
        for m in XP_ROW.finditer(section.text):
            date_str, description, minus, value_str, balance_minus, balance_str = m.groups()
            description = re.sub(r"\s*-\s*$", "", description).strip()
            try:
                transactions.append(self._build(
                    br_date_to_iso(date_str), description, value_str, minus == "-",
                    balance=self._signed_balance((balance_minus or "") + balance_str)))
            except DateOutOfRange:
                self._skip("invalid_date", raw=m.group(0)[:80])
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=m.group(0)[:80])

        return transactions
