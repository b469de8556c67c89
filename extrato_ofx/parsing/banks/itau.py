"""
Itaú statement extractors.

- ItauExtractor: "Lançamentos do período" export with CPF/CNPJ column
- Itau2Extractor: app statement with "dd/mmm" dates and month headers
"""
import re
from datetime import date
from typing import Dict, List, Optional, Tuple

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import count_markers, fold, normalize_text
from ..reconciliation import apply_running_balance, is_duplicate, reconcile_balances, sort_chronologically
from ..values import (
    MONTH_ABBR_PATTERN, MONTH_NAME_PATTERN, br_date_to_iso, month_from_name, parse_br_amount, to_iso_date,
)

logger = get_logger(__name__)


# ======================================================================
# Itaú
# ======================================================================

ITAU_PERIOD = re.compile(
    r"(?:Lançamentos do período|período)[:\s]+(\d{2}/\d{2}/\d{4})\s+(?:até|a)\s+(\d{2}/\d{2}/\d{4})", re.IGNORECASE)
ITAU_OPENING = re.compile(r"SALDO\s+ANTERIOR\s+([-\d.,]+)", re.IGNORECASE)
CPF_CNPJ = r"(?:\d{2,3}\.){2,3}\d{3}(?:/\d{4})?-\d{2}|\d{3}\.\d{3}\.\d{3}-\d{2}"
ITAU_ROW = re.compile(
    rf"(\d{{2}}/\d{{2}}/\d{{4}})\s+([A-ZÁÉÍÓÚÂÊÎÔÛÃÕÇ][^\d]*?)\s+({CPF_CNPJ})\s+(-?[\d.,]+)\s*",
    re.IGNORECASE,
)
ITAU_DOCUMENT_SUFFIX = re.compile(rf"\s+({CPF_CNPJ})$")
ITAU_SEGMENT = re.compile(r"(?=\d{2}/\d{2}/\d{4}\s)")
ITAU_SEGMENT_HEAD = re.compile(r"^(\d{2}/\d{2}/\d{4})\s+(.+)", re.DOTALL)
ITAU_LOOSE_VALUE = re.compile(r"(-)?R?\$?\s*(-)?(?:\d{1,3}\.)*\d{1,3},\d{2}")

ITAU_DEBIT_KEYWORDS = ("PIX ENVIADO", "PAGAMENTO", "TARIFA", "DÉBITO", "DEB ", "TRANSFERIDO")

# Below this many rows the CPF/CNPJ pattern is assumed to have missed rows
ITAU_MIN_PRIMARY_ROWS = 10


class ItauExtractor(BaseExtractor):
    bank_id = "itau"
    bank_name = "Itaú"

    def validate_format(self, text: str) -> bool:
        markers = ["CONTA", "AGÊNCIA", "LANÇAMENTOS", "PERÍODO", "CNPJ", "PIX", "SALDO"]
        return count_markers(normalize_text(text), markers) >= 4

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text)
        future = text.lower().find("lançamentos futuros")
        if future != -1:
            text = text[:future]

        period = ITAU_PERIOD.search(text)
        if period:
            logger.debug("Statement period", bank=self.bank_id, start=period.group(1), end=period.group(2))

        opening = 0.0
        opening_match = ITAU_OPENING.search(text)
        if opening_match:
            try:
                opening = self._signed_balance(opening_match.group(1))
            except AmountUnparsable:
                opening = 0.0

        transactions = self._parse_with_document(text)
        if len(transactions) < ITAU_MIN_PRIMARY_ROWS:
            logger.debug("Few rows with CPF/CNPJ; running segment pass", bank=self.bank_id,
                         primary_rows=len(transactions))
            self._parse_segments(text, transactions)

        return apply_running_balance(sort_chronologically(transactions), opening)

    def _parse_with_document(self, text: str) -> List[Transaction]:
        transactions = []
        for m in ITAU_ROW.finditer(text):
            date_str, description, cpf_cnpj, value_str = m.groups()
            description = description.strip()
            if "SALDO" in description.upper():
                self._skip("balance_marker", raw=m.group(0)[:80])
                continue
            try:
                value = parse_br_amount(value_str)
                if value == 0:
                    self._skip("zero_value", raw=m.group(0)[:80])
                    continue
                is_debit = any(k in description.upper() for k in ITAU_DEBIT_KEYWORDS)
                transactions.append(self._build(br_date_to_iso(date_str), f"{description} ({cpf_cnpj})",
                                                value, is_debit))
            except DateOutOfRange:
                self._skip("invalid_date", raw=m.group(0)[:80])
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=m.group(0)[:80])
        return transactions

    def _parse_segments(self, text: str, transactions: List[Transaction]) -> None:
        """Date-led segments; the first amount of each is the movement (sign from '-')."""
        for segment in ITAU_SEGMENT.split(text):
            head = ITAU_SEGMENT_HEAD.match(segment)
            if not head:
                continue
            date_str, content = head.groups()
            upper = content.upper()
            if "SALDO ANTERIOR" in upper or "SALDO TOTAL" in upper:
                self._skip("balance_marker", raw=segment[:80])
                continue

            value_match = ITAU_LOOSE_VALUE.search(content)
            if not value_match:
                self._skip("no_amount", raw=segment[:80])
                continue
            raw_value = value_match.group(0)
            description = " ".join(content[:value_match.start()].split())
            document = ITAU_DOCUMENT_SUFFIX.search(description)
            if document:
                description = f"{description[:document.start()]} ({document.group(1)})"
            if len(description) < 3:
                self._skip("short_description", raw=segment[:80])
                continue

            try:
                value = parse_br_amount(raw_value)
                if value == 0:
                    self._skip("zero_value", raw=segment[:80])
                    continue
                iso_date = br_date_to_iso(date_str)
            except DateOutOfRange:
                self._skip("invalid_date", raw=segment[:80])
                continue
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=segment[:80])
                continue

            if is_duplicate(transactions, iso_date, description, value):
                self._skip("duplicate", raw=segment[:80])
                continue
            transactions.append(self._build(iso_date, description, value, "-" in raw_value))


# ======================================================================
# Itaú 2
# ======================================================================

MONTH_HEADER = re.compile(rf"\b({MONTH_NAME_PATTERN})\s+(\d{{4}})\b", re.IGNORECASE)
MONTH_HEADER_ROW = re.compile(
    rf"\b{MONTH_NAME_PATTERN}\s+\d{{4}}\s+([A-Z][A-Z0-9\s/\-#]+?)\s+(-?[\d.]+,\d{{2}})\s+(\d{{2}})/({MONTH_ABBR_PATTERN})",
    re.IGNORECASE,
)
PAGE_BREAK_ROW = re.compile(
    rf"atualizado em (\d{{2}}/\d{{2}}/\d{{4}})\s+\d{{2}}:\d{{2}}:\d{{2}}\s+([A-Z][A-Z\s]+?)\s+(-?[\d.]+,\d{{2}})\s+(\d{{2}})/({MONTH_ABBR_PATTERN})",
    re.IGNORECASE,
)
EMISSION_DATE = re.compile(r"atualizado em \d{2}/\d{2}/(\d{4})", re.IGNORECASE)
DAY_MONTH_ABBR = re.compile(rf"(\d{{2}})/({MONTH_ABBR_PATTERN})", re.IGNORECASE)
DAY_MONTH_PREFIX = re.compile(rf"^\d{{2}}/{MONTH_ABBR_PATTERN}\s*", re.IGNORECASE)
SALDO_DIA = re.compile(
    rf"(\d{{2}})/({MONTH_ABBR_PATTERN})\s+(?:\1/{MONTH_ABBR_PATTERN}\s+)?SALDO[^\d-]*?(-?[\d.]+,\d{{2}})",
    re.IGNORECASE,
)
SIGNED_VALUE = re.compile(r"-?[\d.]+,\d{2}")

# Contact/SAC boilerplate printed at every page foot
ITAU2_FOOTERS = (
    re.compile(r"Em caso de dúvidas,?\s+de posse do comprovante.*?(?:0800\s*\d{3}\s*\d{4}|auditivo/fala.*?0800.*?\d{4})",
               re.IGNORECASE | re.DOTALL),
    re.compile(r"contate seu gerente ou a Central.*?demais localidades\)?\.?", re.IGNORECASE | re.DOTALL),
    re.compile(r"Reclamações,?\s*informações e cancelamentos.*?www\.itau\.com\.br\S*", re.IGNORECASE | re.DOTALL),
    re.compile(r"Se não ficar satisfeito.*?das\s+\d+h\s+às\s+\d+h\.?", re.IGNORECASE | re.DOTALL),
    re.compile(r"Deficiente auditivo.*?0800\s*\d{3}\s*\d{4}", re.IGNORECASE | re.DOTALL),
)


def _signed_amount(raw: str) -> float:
    value = parse_br_amount(raw)
    return -value if raw.startswith("-") else value


class Itau2Extractor(BaseExtractor):
    """
    Itaú app statement.

    Dates are printed as "dd/mmm" without a year; the year comes from the
    "<month> <yyyy>" headers, then from the "atualizado em" emission date.
    Rows that the PDF text puts before their date (right after a month
    header or after a page break) are captured in two passes that run
    before the date-chunk pass.
    """
    bank_id = "itau2"
    bank_name = "Itaú 2"

    def validate_format(self, text: str) -> bool:
        return (re.search(r"ita[uú]", text, re.IGNORECASE) is not None
                and re.search(r"lan[cç]amentos", text, re.IGNORECASE) is not None
                and re.search(rf"\d{{2}}\s*/\s*{MONTH_ABBR_PATTERN}", text, re.IGNORECASE) is not None)

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text)
        text = re.sub(r"R\$\s*", "R$", text)
        for footer in ITAU2_FOOTERS:
            text = footer.sub(" ", text)

        years = self._years_by_month(text)
        transactions: List[Transaction] = []
        daily_balances: Dict[str, float] = {}
        opening = 0.0

        self._month_header_rows(text, years, transactions)
        self._page_break_rows(text, years, transactions)

        dates = list(DAY_MONTH_ABBR.finditer(text))
        for i, date_match in enumerate(dates):
            end = dates[i + 1].start() if i + 1 < len(dates) else len(text)
            chunk = text[date_match.start():end].strip()
            content = DAY_MONTH_PREFIX.sub("", chunk).strip()
            try:
                iso_date = self._iso(date_match.group(1), date_match.group(2), years)
            except DateOutOfRange:
                self._skip("invalid_date", raw=chunk[:80])
                continue

            if re.match(r"SALDO", content, re.IGNORECASE) or (
                    re.search(r"\bSALDO\b", content, re.IGNORECASE) and re.search(r"\bDIA\b", content, re.IGNORECASE)):
                balance = self._saldo_row(chunk, content, iso_date, dates, i, years, transactions)
                if balance is not None:
                    if "ANTERIOR" in fold(content.split(balance[1])[0]):
                        opening = balance[0]
                    else:
                        daily_balances[iso_date] = balance[0]
                continue

            self._regular_row(content, iso_date, transactions)

        transactions = sort_chronologically(transactions)
        return reconcile_balances(transactions, daily_balances, opening)

    # ------------------------------------------------------------------

    def _years_by_month(self, text: str) -> Dict[int, int]:
        years: Dict[int, int] = {}
        for m in MONTH_HEADER.finditer(text):
            years.setdefault(month_from_name(m.group(1)), int(m.group(2)))
        emission = EMISSION_DATE.search(text)
        if emission:
            years[0] = int(emission.group(1))
        elif years:
            years[0] = max(years.values())
        else:
            years[0] = date.today().year
            logger.warning("No year found in statement; assuming current year", bank=self.bank_id, year=years[0])
        return years

    def _iso(self, day: str, month_abbr: str, years: Dict[int, int]) -> str:
        month = month_from_name(month_abbr)
        if month is None:
            raise DateOutOfRange(f"unknown month {month_abbr!r}")
        return to_iso_date(day, month, years.get(month, years[0]))

    def _month_header_rows(self, text: str, years: Dict[int, int], transactions: List[Transaction]) -> None:
        """'abril 2025 PIX TRANSF SOUZA 25.000,00 01/abr' belongs to 01/abr."""
        for m in MONTH_HEADER_ROW.finditer(text):
            description, value_str, day, month_abbr = m.groups()
            description = description.strip()
            if "SALDO" in description.upper():
                self._skip("balance_marker", raw=m.group(0)[:80])
                continue
            self._add_signed(transactions, description, value_str, day, month_abbr, years, m.group(0))

    def _page_break_rows(self, text: str, years: Dict[int, int], transactions: List[Transaction]) -> None:
        """Rows printed right after the 'atualizado em' page header, before their date."""
        for m in PAGE_BREAK_ROW.finditer(text):
            _, description, value_str, day, month_abbr = m.groups()
            description = description.strip()
            if "SALDO" in description.upper() or len(description) < 5:
                self._skip("balance_marker" if "SALDO" in description.upper() else "short_description",
                           raw=m.group(0)[:80])
                continue
            try:
                iso_date = self._iso(day, month_abbr, years)
                value = parse_br_amount(value_str)
            except (DateOutOfRange, AmountUnparsable):
                self._skip("invalid_date", raw=m.group(0)[:80])
                continue
            if any(t.date == iso_date and abs(t.value - value) < 0.01 for t in transactions):
                self._skip("duplicate", raw=m.group(0)[:80])
                continue
            self._add_signed(transactions, description, value_str, day, month_abbr, years, m.group(0))

    def _add_signed(self, transactions, description, value_str, day, month_abbr, years, raw) -> None:
        try:
            iso_date = self._iso(day, month_abbr, years)
            signed = _signed_amount(value_str)
        except DateOutOfRange:
            self._skip("invalid_date", raw=raw[:80])
            return
        except AmountUnparsable:
            self._skip("unparsable_amount", raw=raw[:80])
            return
        if signed == 0:
            self._skip("zero_value", raw=raw[:80])
            return
        transactions.append(self._build(iso_date, description, signed, signed < 0))

    def _saldo_row(self, chunk: str, content: str, iso_date: str, dates, index: int,
                   years: Dict[int, int], transactions: List[Transaction]) -> Optional[Tuple[float, str]]:
        """
        Record a SALDO row and parse a transaction glued after its amount.

        Returns (signed balance, balance token) or None when no amount is printed.
        """
        saldo = SALDO_DIA.search(chunk)
        if not saldo:
            self._skip("balance_marker", raw=chunk[:80])
            return None
        saldo_str = saldo.group(3)
        self._skip("balance_marker", raw=chunk[:80], balance=saldo_str)

        tail = content[content.rfind(saldo_str) + len(saldo_str):].strip() if saldo_str in content else ""
        if not tail:
            return _signed_amount(saldo_str), saldo_str

        tx_date = iso_date
        header = MONTH_HEADER.search(tail)
        if header and index + 1 < len(dates):
            # text after a month header belongs to the next printed date
            nxt = dates[index + 1]
            try:
                tx_date = self._iso(nxt.group(1), nxt.group(2), years)
            except DateOutOfRange:
                tx_date = iso_date

        values = list(SIGNED_VALUE.finditer(tail))
        if values:
            value_match = next((v for v in values if v.start() == 0 or tail[v.start() - 1] != "/"), values[0])
            start = header.end() if header else 0
            description = " ".join(tail[start:value_match.start()].lstrip("-–— ").split())
            try:
                signed = _signed_amount(value_match.group(0))
            except AmountUnparsable:
                signed = 0.0

            if not description or re.search(r"\bSALDO\b", description, re.IGNORECASE) or signed == 0:
                self._skip("balance_marker", raw=tail[:80])
            elif is_duplicate(transactions, tx_date, description, abs(signed)):
                self._skip("duplicate", raw=tail[:80])
            else:
                self._recovered("balance_marker", raw=tail[:80])
                transactions.append(self._build(tx_date, description, signed, signed < 0))

        return _signed_amount(saldo_str), saldo_str

    def _regular_row(self, content: str, iso_date: str, transactions: List[Transaction]) -> None:
        header = MONTH_HEADER.search(content)
        if header:
            # rows after a month header are taken by the month-header pass
            content = content[:header.start()].strip()
        if len(content) < 3:
            self._skip("short_description", raw=content)
            return

        values = list(SIGNED_VALUE.finditer(content))
        if not values:
            self._skip("no_amount", raw=content[:80])
            return

        last_alpha = max((i for i, ch in enumerate(content) if ch.isalpha()), default=-1)
        value_match = next((v for v in values if v.start() > last_alpha), values[0])
        try:
            signed = _signed_amount(value_match.group(0))
        except AmountUnparsable:
            self._skip("unparsable_amount", raw=content[:80])
            return
        if signed == 0:
            self._skip("zero_value", raw=content[:80])
            return

        description = content[:value_match.start()].strip() if value_match.start() > 0 else content
        description = " ".join(description.split())
        if len(description) < 2:
            self._skip("short_description", raw=content[:80])
            return
        if "SALDO" in description.upper():
            self._skip("balance_marker", raw=content[:80])
            return
        if is_duplicate(transactions, iso_date, description, abs(signed)):
            self._skip("duplicate", raw=content[:80])
            return

        transactions.append(self._build(iso_date, description, signed, signed < 0))
