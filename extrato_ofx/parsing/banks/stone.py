"""
Stone account statement extractor.

    31/10/25 Saída Investimento - R$ 166,00 R$ 0,50
    31/10/25 Entrada Recebimento vendas R$ 7,90 R$ 166,50 Maestro | Débito

The direction column (Entrada/Saída) decides the sign; the last amount is
the balance after the movement.
"""
import re
from typing import List

from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..classification import rule
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import contains_any, normalize_text
from ..values import expand_two_digit_year, parse_br_amount, to_iso_date

STONE_ROW = re.compile(
    r"(\d{2})/(\d{2})/(\d{2})\s+(Entrada|Sa[ií]da)\s+(.+?)\s+(-?R?\$?\s*[\d.,]+)\s+R\$([\d.,]+)",
    re.IGNORECASE,
)


class StoneExtractor(BaseExtractor):
    bank_id = "stone"
    bank_name = "Stone"
    classification_rules = (
        rule("XFER", "PIX", "TRANSFERENCIA"),
        rule("PAYMENT", "RECEBIMENTO", "VENDAS"),
        rule("OTHER", "INVESTIMENTO"),
        rule("SRVCHG", "TARIFA", "TAXA"),
    )

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text, signed_currency=True)
        return contains_any(text, ["STONE"]) and STONE_ROW.search(text) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text, signed_currency=True)

        transactions = []
        for m in STONE_ROW.finditer(text):
            day, month, year, direction, description, value_str, balance_str = m.groups()
            is_debit = value_str.strip().startswith("-") or not direction.lower().startswith("entrada")
            try:
                transactions.append(self._build(
                    to_iso_date(day, month, expand_two_digit_year(year)), description, value_str, is_debit,
                    balance=parse_br_amount(balance_str)))
            except DateOutOfRange:
                self._skip("invalid_date", raw=m.group(0)[:80])
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=m.group(0)[:80])

        return transactions
