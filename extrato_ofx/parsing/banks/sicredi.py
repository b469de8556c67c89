"""
Sicredi statement extractors.

- SicrediExtractor: descriptor layout (period header, table anchor, row balance)
- Sicredi2Extractor: Internet Banking export, full-date chunks whose last two
  amounts are value and balance
"""
import re
from typing import List, Optional

from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..classification import rule
from ..config.registry import LayoutRegistry, get_default_registry
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..extractors.generic import LayoutExtractor
from ..normalization import fold, normalize_text
from ..reconciliation import sort_chronologically
from ..values import br_date_to_iso


class SicrediExtractor(LayoutExtractor):
    """Sicredi account statement described by layouts/sicredi.json."""

    def __init__(self, registry: Optional[LayoutRegistry] = None):
        registry = registry or get_default_registry()
        super().__init__(registry.for_bank("sicredi"), bank_id="sicredi", bank_name="Sicredi")


SICREDI2_PERIOD = re.compile(r"per[ií]odo\s+\d{2}/\d{2}/\d{4}\s+a\s+\d{2}/\d{2}/\d{4}", re.IGNORECASE)
SICREDI2_START = re.compile(r"SALDO\s+[\d.,]+\s+")
FULL_DATE = re.compile(r"\d{2}/\d{2}/\d{4}")
SIGNED_AMOUNT = re.compile(r"-?\d{1,3}(?:\.\d{3})*,\d{2}")

# Document codes printed at the end of the description column
SICREDI2_DOCUMENTS = (
    re.compile(r"\s+(PIX_(?:CRED|DEB))\s*$"),
    re.compile(r"\s+(SICREDI_(?:CRED|DEB))\s*$"),
    re.compile(r"\s+(COB\d+)\s*$"),
    re.compile(r"\s+(\d{6,})\s*$"),
    re.compile(r"\s+([A-Z0-9]{4,}---\d+)\s*$"),
)


class Sicredi2Extractor(BaseExtractor):
    bank_id = "sicredi2"
    bank_name = "Sicredi 2"
    classification_rules = (
        rule("XFER", "PIX"),
        rule("XFER", "TED"),
        rule("PAYMENT", "BOLETO", "LIQUIDACAO"),
        rule("FEE", "TARIFA"),
        rule("DEP", "COBRANCA", "LIQ.COBRANCA"),
        rule("POS", "CREDITO", "SICREDI CREDITO"),
        rule("POS", "DEBITO", "SICREDI DEBITO"),
        rule("PAYMENT", "FOLHA", "PAGTO"),
        rule("ATM", "SAQUE"),
        rule("FEE", "IOF"),
    )

    def validate_format(self, text: str) -> bool:
        return ("Internet Banking Sicredi" in text
                and SICREDI2_PERIOD.search(text) is not None
                and ("Valor (R$)" in text or "Saldo (R$)" in text)
                and FULL_DATE.search(text) is not None)

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text)
        start = SICREDI2_START.search(text)
        body = text[start.end():] if start else text

        dates = list(FULL_DATE.finditer(body))
        transactions = []
        for i, date_match in enumerate(dates):
            end = dates[i + 1].start() if i + 1 < len(dates) else len(body)
            txn = self._parse_chunk(body[date_match.start():end].strip())
            if txn:
                transactions.append(txn)

        return sort_chronologically(transactions)

    def _parse_chunk(self, chunk: str) -> Optional[Transaction]:
        values = list(SIGNED_AMOUNT.finditer(chunk))
        if len(values) < 2:
            self._skip("no_amount", raw=chunk[:80])
            return None

        amount_match, balance_match = values[-2], values[-1]
        description = chunk[10:amount_match.start()].strip()

        document = None
        for pattern in SICREDI2_DOCUMENTS:
            doc = pattern.search(description)
            if doc:
                document = doc.group(1)
                description = pattern.sub("", description).strip()
                break

        description = re.sub(r"\s*\|\s*", " | ", " ".join(description.split()))
        folded = fold(description)
        if not description:
            self._skip("short_description", raw=chunk[:80])
            return None
        if "SALDO" in folded and "SICREDI" not in folded:
            self._skip("balance_marker", raw=chunk[:80])
            return None

        amount = amount_match.group(0)
        try:
            return self._build(
                br_date_to_iso(chunk[:10]), description, amount, amount.startswith("-"),
                balance=self._signed_balance(balance_match.group(0)),
                document=document, limit=150)
        except DateOutOfRange:
            self._skip("invalid_date", raw=chunk[:80])
        except AmountUnparsable:
            self._skip("unparsable_amount", raw=chunk[:80])
        return None
