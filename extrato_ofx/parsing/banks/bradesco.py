"""
Bradesco statement extractor.

Rows are "[date] description [doc] value [value] balance"; dates are only
printed on the first row of each day, so both passes carry the last seen
date forward. Two independent passes run and the one recovering more rows
wins (ties go to the second pass).
"""
import re
from typing import List, Optional

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import contains_any, normalize_text
from ..values import br_date_to_iso, parse_br_amount

logger = get_logger(__name__)

DATE_SPLIT = re.compile(r"(\d{2}/\d{2}/\d{4})")
FULL_DATE_ONLY = re.compile(r"^\d{2}/\d{2}/\d{4}$")
VALUE = re.compile(r"-?\d{1,3}(?:\.\d{3})*,\d{2}")
ENTRY = re.compile(r"([A-Za-zÀ-ÿ][^0-9]*?)(?:\s+(\d{5,}))?\s+((?:-?\d{1,3}(?:\.\d{3})*,\d{2}\s*)+)")
TRAILING_DOC = re.compile(r"\s+\d{5,}$")
DOC = re.compile(r"(\d{5,})$")
PERIOD = re.compile(r"Entre\s*(\d{2}/\d{2}/\d{4})\s*e\s*(\d{2}/\d{2}/\d{4})", re.IGNORECASE)
ACCOUNT = re.compile(r"Ag[:\s]*(\d+)\s*\|\s*CC[:\s]*(\d+-?\d*)", re.IGNORECASE)

# Sections after the movements table
TABLE_END_MARKERS = ("Os dados acima", "Últimos Lançamentos", "Saldos Invest")


def _signed(raw: str) -> float:
    value = parse_br_amount(raw)
    return -value if raw.startswith("-") else value


class BradescoExtractor(BaseExtractor):
    bank_id = "bradesco"
    bank_name = "Bradesco"

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text)
        return contains_any(text, ["BRADESCO"]) and (
            PERIOD.search(text) is not None or contains_any(text, ["EXTRATO", "Saldo (R$)"]))

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text)

        account = ACCOUNT.search(text)
        period = PERIOD.search(text)
        logger.debug("Bradesco statement header", bank=self.bank_id,
                     account=f"Ag {account.group(1)} CC {account.group(2)}" if account else None,
                     period=f"{period.group(1)} a {period.group(2)}" if period else None)

        first = self._first_pass(text)
        second = self._second_pass(self._table_text(text))
        chosen = second if len(second) >= len(first) else first
        logger.debug("Bradesco passes", bank=self.bank_id, first_pass=len(first), second_pass=len(second),
                     chosen="second" if chosen is second else "first")
        return chosen

    # ------------------------------------------------------------------
    # Pass 1: description [doc] values per entry
    # ------------------------------------------------------------------

    def _first_pass(self, text: str) -> List[Transaction]:
        transactions: List[Transaction] = []
        current_date: Optional[str] = None

        for part in DATE_SPLIT.split(text):
            part = part.strip()
            if FULL_DATE_ONLY.match(part):
                try:
                    iso = br_date_to_iso(part)
                    if iso >= "2000-01-01":
                        current_date = iso
                        continue
                except DateOutOfRange:
                    self._skip("invalid_date", raw=part)

            if not current_date or not part:
                continue
            if "SALDO ANTERIOR" in part or "Total Disponível" in part:
                self._skip("balance_marker", raw=part[:80])
                continue
            if "Lançamento" in part or "Crédito (R$)" in part:
                self._skip("header_row", raw=part[:80])
                continue

            found = False
            for m in ENTRY.finditer(part):
                found = True
                description, document, values_str = m.group(1).strip(), m.group(2), m.group(3)
                if not description:
                    continue
                if description == "SALDO" or description.startswith("Total"):
                    self._skip("balance_marker", raw=m.group(0)[:80])
                    continue
                txn = self._from_values(current_date, description, document, VALUE.findall(values_str))
                if txn:
                    transactions.append(txn)

            if not transactions or not found:
                self._simple_entry(part, current_date, transactions)

        return transactions

    def _from_values(self, iso_date: str, description: str, document: Optional[str],
                     values: List[str]) -> Optional[Transaction]:
        """Last value is the balance; the movement is the first non-zero value before it."""
        if not values:
            return None
        candidates = values[:-1] if len(values) > 1 else values
        for raw in candidates:
            try:
                amount = _signed(raw)
                balance = _signed(values[-1])
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=raw)
                return None
            if amount != 0:
                return self._build(iso_date, description, amount, amount < 0,
                                   balance=balance, document=document)
        self._skip("zero_value", raw=description[:80])
        return None

    def _simple_entry(self, part: str, iso_date: str, transactions: List[Transaction]) -> None:
        values = list(VALUE.finditer(part))
        if not values:
            return
        description = part[:values[0].start()].strip()
        if not description or "Total" in description or "SALDO ANTERIOR" in description:
            return
        if any(t.date == iso_date and t.description == " ".join(description.split()) for t in transactions):
            self._skip("duplicate", raw=description[:80])
            return
        try:
            amount = _signed(values[0].group(0))
            balance = _signed(values[-1].group(0))
        except AmountUnparsable:
            self._skip("unparsable_amount", raw=part[:80])
            return
        if amount == 0:
            self._skip("zero_value", raw=part[:80])
            return
        transactions.append(self._build(iso_date, description, amount, amount < 0, balance=balance))

    # ------------------------------------------------------------------
    # Pass 2: value/balance pairs inside the isolated table
    # ------------------------------------------------------------------

    def _table_text(self, text: str) -> str:
        header_end = text.find("Saldo (R$)")
        if header_end > 0:
            text = text[header_end + len("Saldo (R$)"):]
        for marker in TABLE_END_MARKERS:
            idx = text.find(marker)
            if idx > 0:
                text = text[:idx]
        return text

    def _second_pass(self, text: str) -> List[Transaction]:
        entries: List[Transaction] = []
        current_date: Optional[str] = None

        for seg in DATE_SPLIT.split(text):
            seg = seg.strip()
            if FULL_DATE_ONLY.match(seg):
                try:
                    current_date = br_date_to_iso(seg)
                except DateOutOfRange:
                    self._skip("invalid_date", raw=seg)
                continue
            if not current_date or not seg:
                continue
            if "SALDO ANTERIOR" in seg:
                self._skip("balance_marker", raw=seg[:80])
                continue

            values = list(VALUE.finditer(seg))
            last_end = 0
            v = 0
            while v < len(values):
                value_match = values[v]
                if v > 0 and value_match.start() - values[v - 1].end() < 3:
                    # glued to the previous value: a balance, not a movement
                    v += 1
                    continue

                desc_text = seg[last_end:value_match.start()].strip()
                description = TRAILING_DOC.sub("", desc_text).strip()
                if not description or len(description) < 3 or description == "Total" or "Total " in description:
                    v += 1
                    continue

                doc = DOC.search(desc_text)
                balance_match = values[v + 1] if v + 1 < len(values) else value_match
                try:
                    amount = _signed(value_match.group(0))
                    balance = _signed(balance_match.group(0))
                except AmountUnparsable:
                    self._skip("unparsable_amount", raw=desc_text[:80])
                    v += 1
                    continue
                if amount == 0:
                    self._skip("zero_value", raw=desc_text[:80])
                    v += 1
                    continue

                entries.append(self._build(current_date, description, amount, amount < 0,
                                           balance=balance, document=doc.group(1) if doc else None))
                if v + 1 < len(values):
                    last_end = values[v + 1].end()
                    v += 2
                else:
                    last_end = value_match.end()
                    v += 1

        return entries
