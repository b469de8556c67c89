"""
BTG Pactual account statement extractor.

The PDF splits digits of dates and amounts with spaces ("0 1/1 0/2 5",
"6.3 4 3,4 7"); they are re-joined before matching
"dd/mm/yy value balance" rows.
"""
import re
from typing import List, Set, Tuple

from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..classification import rule
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import contains_any, normalize_text
from ..values import expand_two_digit_year, parse_br_amount, to_iso_date

SPLIT_DATE = re.compile(r"(?<!\d)(\d)\s?(\d)\s?/\s?(\d)\s?(\d)\s?/\s?(\d)\s?(\d)(?!\d)")
SPLIT_AMOUNT = re.compile(r"(?<![\d,/])(-\s?)?\d(?:[\d.]|\s(?=[\d.]))*,\s?\d\s?\d")
BTG_ROW = re.compile(r"(\d{2})/(\d{2})/(\d{2})\s+(-?[\d.]+,\d{2})\s+(-?[\d.]+,\d{2})")


def rejoin_digits(text: str) -> str:
    """'0 1/1 0/2 5 - 1 3 4,9 7' -> '01/10/25 -134,97'"""
    text = SPLIT_DATE.sub(lambda m: "{}{}/{}{}/{}{}".format(*m.groups()), text)
    return SPLIT_AMOUNT.sub(lambda m: re.sub(r"\s", "", m.group(0)), text)


class BTGExtractor(BaseExtractor):
    bank_id = "btg"
    bank_name = "BTG Pactual"
    classification_rules = (
        rule("XFER", "PIX", "TED", "TRANSFERENCIA", "LIQ BOLSA"),
        rule("OTHER", "AJ POS", "AJ NEG"),
        rule("PAYMENT", "PAGAMENTO", "DARF"),
        rule("FEE", "TARIFA"),
        rule("DEP", "DEPOSITO"),
        rule("ATM", "SAQUE"),
        rule("INT", "RENDIMENTO"),
        rule("DEBIT", "DEBITO"),
        rule("CREDIT", "CREDITO"),
    )

    def validate_format(self, text: str) -> bool:
        return contains_any(text, ["BTG"]) and BTG_ROW.search(rejoin_digits(normalize_text(text))) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = rejoin_digits(normalize_text(text))

        transactions = []
        seen: Set[Tuple[str, ...]] = set()
        for m in BTG_ROW.finditer(text):
            day, month, year, value_str, balance_str = m.groups()
            # page headers repeat the last row of the previous page
            key = (day, month, year, value_str, balance_str)
            if key in seen:
                self._skip("duplicate", raw=m.group(0))
                continue
            seen.add(key)

            is_debit = value_str.startswith("-")
            try:
                value = parse_br_amount(value_str)
                if value < 0.01:
                    self._skip("zero_value", raw=m.group(0))
                    continue
                transactions.append(self._build(
                    to_iso_date(day, month, expand_two_digit_year(year)),
                    "Débito BTG" if is_debit else "Crédito BTG", value, is_debit,
                    balance=self._signed_balance(balance_str)))
            except DateOutOfRange:
                self._skip("invalid_date", raw=m.group(0))
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=m.group(0))

        return transactions
