"""
Safra statement extractors.

Both variants chunk the "LANÇAMENTOS" section on dd/mm tokens and take the
last amount of each chunk as the movement. Safra 2 works on normalized
text and drops page boilerplate before looking for amounts.
"""
import re
from typing import List, Optional

from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor, Period
from ..classification import rule
from ..exceptions import AmountUnparsable, DateOutOfRange, SectionNotFound
from ..normalization import contains_any, fold, isolate_section, normalize_text
from ..reconciliation import apply_running_balance, sort_chronologically
from ..values import day_month_to_iso, parse_br_amount, parse_br_date

PERIOD = re.compile(r"Per[ií]odo\s+de\s+(\d{2}/\d{2}/\d{4})\s+a\s+(\d{2}/\d{2}/\d{4})", re.IGNORECASE)
DAY_MONTH = re.compile(r"(\d{2})/(\d{2})")
SAFRA_VALUE = re.compile(r"(-?[\d.]+,\d{2})")
SAFRA2_VALUE = re.compile(r"(-?)(?:R\$)?\s*([\d.]+,\d{2})")

BALANCE_ROWS = ("SALDO TOTAL", "SALDO APLIC", "SALDO CONTA")

SAFRA_RULES = (
    rule("XFER", "PIX ENVIADO", "PIX QR"),
    rule("DEP", "PIX RECEBIDO"),
    rule("PAYMENT", "PAGAMENTO", "TAR ", "TARIFA"),
    rule("XFER", "APLICACAO", "RESGATE"),
    rule("CREDIT", "CREDITO COBRANCA", "LIBERACAO"),
    rule("DEBIT", "LIQUIDACAO"),
)


def _find_period(text: str, bank_id: str) -> Period:
    match = PERIOD.search(text)
    if not match:
        raise SectionNotFound("Período não encontrado no extrato Safra", bank_id=bank_id, sample_text=text[:200])
    return parse_br_date(match.group(1)), parse_br_date(match.group(2))


def _valid_day_month(m) -> bool:
    return 1 <= int(m.group(1)) <= 31 and 1 <= int(m.group(2)) <= 12


class SafraExtractor(BaseExtractor):
    bank_id = "safra"
    bank_name = "Safra"
    classification_rules = SAFRA_RULES

    def validate_format(self, text: str) -> bool:
        return contains_any(text, ["SAFRA"]) and PERIOD.search(normalize_text(text)) is not None

    def extract(self, text: str) -> List[Transaction]:
        period = _find_period(normalize_text(text), self.bank_id)
        section = isolate_section(text, "LANÇAMENTOS", required=True, bank_id=self.bank_id).text

        dates = [m for m in DAY_MONTH.finditer(section) if _valid_day_month(m)]
        transactions = []
        for i, date_match in enumerate(dates):
            end = dates[i + 1].start() if i + 1 < len(dates) else len(section)
            chunk = section[date_match.start():end].strip()

            if "Data" in chunk or "Lançamento" in chunk or "Valor (R$)" in chunk:
                self._skip("header_row", raw=chunk[:80])
                continue

            values = list(SAFRA_VALUE.finditer(chunk))
            if not values:
                self._skip("no_amount", raw=chunk[:80])
                continue
            amount_str = values[-1].group(1)
            description = chunk[len(date_match.group(0)):values[-1].start()].strip()
            if any(k in description for k in BALANCE_ROWS):
                self._skip("balance_marker", raw=chunk[:80])
                continue

            txn = self._row(date_match.group(0), description, amount_str, period, chunk)
            if txn:
                transactions.append(txn)

        return apply_running_balance(sort_chronologically(transactions))

    def _row(self, day_month: str, description: str, amount_str: str, period: Period,
             raw: str) -> Optional[Transaction]:
        try:
            amount = parse_br_amount(amount_str)
            return self._build(day_month_to_iso(day_month, period), description, amount,
                               amount_str.startswith("-"))
        except DateOutOfRange:
            self._skip("invalid_date", raw=raw[:80])
        except AmountUnparsable:
            self._skip("unparsable_amount", raw=raw[:80])
        return None


SAFRA2_BOILERPLATE = re.compile(
    r"SALDO TOTAL|SALDO APLIC|SALDO CONTA|CENTRAL DE SUPORTE|\bSAC\b|OUVIDORIA|PAGINA|BANCO SAFRA|CNPJ:")


class Safra2Extractor(BaseExtractor):
    bank_id = "safra2"
    bank_name = "Safra 2"
    classification_rules = SAFRA_RULES

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text, colons=True)
        return contains_any(text, ["SAFRA"]) and PERIOD.search(text) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text, colons=True)
        period = _find_period(text, self.bank_id)

        anchor = "LANÇAMENTOS REALIZADOS" if contains_any(text, ["LANÇAMENTOS REALIZADOS"]) else "LANÇAMENTOS"
        section = isolate_section(text, anchor, required=True, bank_id=self.bank_id).text

        dates = [m for m in DAY_MONTH.finditer(section) if _valid_day_month(m)]
        transactions = []
        for i, date_match in enumerate(dates):
            end = dates[i + 1].start() if i + 1 < len(dates) else len(section)
            chunk = section[date_match.start():end].strip()
            folded = fold(chunk)

            if "DATA" in folded and "VALOR" in folded:
                self._skip("header_row", raw=chunk[:80])
                continue
            if SAFRA2_BOILERPLATE.search(folded):
                self._skip("footer", raw=chunk[:80])
                continue

            values = list(SAFRA2_VALUE.finditer(chunk))
            if not values:
                self._skip("no_amount", raw=chunk[:80])
                continue
            last = values[-1]
            description = chunk[len(date_match.group(0)):last.start()].strip()
            if not description:
                self._skip("short_description", raw=chunk[:80])
                continue
            if any(k in fold(description) for k in BALANCE_ROWS):
                self._skip("balance_marker", raw=chunk[:80])
                continue

            try:
                transactions.append(self._build(day_month_to_iso(date_match.group(0), period),
                                                description, last.group(2), last.group(1) == "-"))
            except DateOutOfRange:
                self._skip("invalid_date", raw=chunk[:80])
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=chunk[:80])

        return apply_running_balance(sort_chronologically(transactions))
