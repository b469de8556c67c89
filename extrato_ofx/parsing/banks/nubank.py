"""
Nubank account statement extractor.

Movements are grouped under "dd MON yyyy" day headers. Inside a day the
"Total de entradas + X" and "Total de saídas - X" markers open the credit
and debit sections; each movement is a description followed by its value.
Days without the markers fall back to inferring the direction from the
description.
"""
import re
from typing import Dict, List, Optional

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..classification import rule
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import contains_any, fold, normalize_text
from ..reconciliation import reconcile_balances
from ..values import MONTH_ABBR_PATTERN, month_from_name, parse_br_amount, to_iso_date

logger = get_logger(__name__)

DAY_HEADER = re.compile(rf"\b(\d{{2}})\s+({MONTH_ABBR_PATTERN})\s+(\d{{4}})\b", re.IGNORECASE)
CREDITS_MARKER = re.compile(r"Total de entradas\s*\+\s*([\d.,]+)", re.IGNORECASE)
DEBITS_MARKER = re.compile(r"Total de sa[ií]das\s*-\s*([\d.,]+)", re.IGNORECASE)
DAY_BALANCE = re.compile(r"Saldo do dia\s*(-?[\d.,]+)", re.IGNORECASE)
SECTION_VALUE = re.compile(r"\s([\d.]+,\d{2})(?=\s|$)")
SUMMARY_DESCRIPTION = re.compile(r"^(total|saldo)", re.IGNORECASE)

# Descriptions that mean money coming in when the day has no section markers
CREDIT_HINTS = ("RECEBIDO", "ENTRADA", "CREDITO", "ESTORNO")


class NubankExtractor(BaseExtractor):
    bank_id = "nubank"
    bank_name = "Nubank"
    classification_rules = (
        rule("XFER", "ENVIADO", "ENVIADA", requires=("PIX",)),
        rule("DEP", "RECEBIDO", requires=("PIX",)),
        rule("XFER", "ENVIADA", requires=("TRANSFERENCIA",)),
        rule("DEP", "PAGAMENTO RECEBIDO"),
        rule("XFER", "TED", "DOC"),
        rule("FEE", "TARIFA", "TAR "),
        rule("PAYMENT", "BOLETO"),
        rule("CREDIT", "ESTORNO"),
    )

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text)
        return contains_any(text, ["NU PAGAMENTOS", "NUBANK"]) and DAY_HEADER.search(text) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text, colons=True)
        headers = list(DAY_HEADER.finditer(text))
        logger.debug("Nubank day headers", bank=self.bank_id, count=len(headers))

        transactions: List[Transaction] = []
        daily_balances: Dict[str, float] = {}
        for i, header in enumerate(headers):
            day, abbr, year = header.groups()
            try:
                iso_date = to_iso_date(day, month_from_name(abbr), year)
            except DateOutOfRange:
                self._skip("invalid_date", raw=header.group(0))
                continue
            end = headers[i + 1].start() if i + 1 < len(headers) else len(text)
            chunk = text[header.end():end]

            credits = CREDITS_MARKER.search(chunk)
            debits = DEBITS_MARKER.search(chunk)
            balance = DAY_BALANCE.search(chunk)
            balance_pos = balance.start() if balance else len(chunk)
            if balance:
                daily_balances[iso_date] = self._signed_balance(balance.group(1))

            if credits:
                section_end = debits.start() if debits else balance_pos
                transactions.extend(self._section(chunk[credits.end():section_end], iso_date, is_debit=False))
            if debits:
                transactions.extend(self._section(chunk[debits.end():balance_pos], iso_date, is_debit=True))
            if not credits and not debits:
                transactions.extend(self._section(chunk[:balance_pos], iso_date, is_debit=None))

        # repeated movements (e.g. several "Tarifa Boleto" on one day) are legitimate: no dedupe
        return reconcile_balances(transactions, daily_balances)

    def _section(self, section: str, iso_date: str, is_debit: Optional[bool]) -> List[Transaction]:
        """
        Movements of one section. is_debit=None infers each direction from
        the description.
        """
        transactions = []
        last_end = 0
        for m in SECTION_VALUE.finditer(section):
            try:
                value = parse_br_amount(m.group(1))
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=m.group(0))
                continue
            if value == 0:
                self._skip("zero_value", raw=m.group(0))
                continue

            description = re.sub(r"^\s*[-|]\s*", "", section[last_end:m.start()]).strip()
            description = " ".join(description.split())
            if len(description) < 3:
                self._skip("short_description", raw=m.group(0))
                continue
            if SUMMARY_DESCRIPTION.match(description):
                self._skip("balance_marker", raw=description[:80])
                continue

            debit = is_debit
            if debit is None:
                debit = not any(k in fold(description) for k in CREDIT_HINTS)
                self._recovered("inferred_direction", raw=description[:80], debit=debit)
            transactions.append(self._build(iso_date, description, value, debit))
            last_end = m.end()
        return transactions
