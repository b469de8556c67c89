"""
Sicoob statement extractors.

- SicoobExtractor: SISBR layouts v1-v4, described by JSON descriptors
- Sicoob2Extractor: table export ("HISTÓRICO DE MOVIMENTAÇÃO" with R$ amounts)
- Sicoob3Extractor: full-date rows with "SALDO DO DIA =====> balance" lines
"""
import re
from typing import Dict, List, Optional

from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..classification import rule
from ..config.registry import LayoutRegistry, get_default_registry
from ..exceptions import AmountUnparsable, DateOutOfRange, SectionNotFound
from ..extractors.generic import LayoutExtractor
from ..normalization import count_markers, fold, isolate_section, normalize_text
from ..reconciliation import reconcile_balances
from ..values import AMOUNT_PATTERN, br_date_to_iso, day_month_to_iso, parse_br_date


class SicoobExtractor(LayoutExtractor):
    """Sicoob SISBR statements, versions picked by period header."""

    def __init__(self, registry: Optional[LayoutRegistry] = None):
        registry = registry or get_default_registry()
        super().__init__(registry.for_bank("sicoob"), bank_id="sicoob", bank_name="Sicoob")


# ----------------------------------------------------------------------
# Sicoob 2
# ----------------------------------------------------------------------

SICOOB2_PERIOD = re.compile(r"Per[ií]odo:?\s*(\d{2}/\d{2}/\d{4})\s*[-–]\s*(\d{2}/\d{2}/\d{4})", re.IGNORECASE)
SICOOB2_DAILY_BALANCE = re.compile(r"(\d{2}/\d{2})\s+SALDO\s+DO\s+DIA\s+R\$\s*([\d.,]+)\s*([DC])")
SICOOB2_ROW = re.compile(r"\b(\d{2}/\d{2})\s+([A-Za-z0-9\-.]+)\s+(.+?)\s+R\$\s*([\d.,]+)\s*([DC])")
SICOOB2_CHUNK = re.compile(r"(?=\b\d{2}/\d{2}\s)")


class Sicoob2Extractor(BaseExtractor):
    bank_id = "sicoob2"
    bank_name = "Sicoob 2"
    anchor = "HISTÓRICO DE MOVIMENTAÇÃO"
    classification_rules = (
        rule("XFER", "PIX", "TED", "TRANSF"),
        rule("SRVCHG", "TARIFA", "TAR."),
        rule("INT", "JUROS", "IOF"),
        rule("PAYMENT", "PAGAMENTO", "BOLETO", "DEB.CONV"),
        rule("CREDIT", "CRED"),
        rule("DEBIT", "DEB"),
    )

    def validate_format(self, text: str) -> bool:
        upper = text.upper()
        markers = [
            "SICOOB" in upper,
            "SISBR" in upper,
            "EXTRATO" in upper,
            "CONTA" in upper,
            "COOPERATIVA" in upper,
            re.search(r"per[ií]odo", text, re.IGNORECASE) is not None,
            count_markers(text, ["MOVIMENTAÇÃO"]) > 0,
        ]
        return sum(markers) >= 4

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text, keep_lines=True)
        match = SICOOB2_PERIOD.search(text)
        if not match:
            raise SectionNotFound("Período do extrato não encontrado", bank_id=self.bank_id,
                                  sample_text=text[:200])
        period = (parse_br_date(match.group(1)), parse_br_date(match.group(2)))

        section = isolate_section(text, self.anchor, bank_id=self.bank_id).text

        daily_balances: Dict[str, float] = {}
        for m in SICOOB2_DAILY_BALANCE.finditer(section):
            try:
                day = day_month_to_iso(m.group(1), period)
                daily_balances[day] = self._signed_balance(m.group(2), m.group(3))
            except (DateOutOfRange, AmountUnparsable):
                self._skip("balance_marker", raw=m.group(0))

        transactions = self._parse_matches(SICOOB2_ROW.finditer(section), period)
        if not transactions:
            # rows whose description wraps onto the next line
            chunks = [" ".join(c.split()) for c in SICOOB2_CHUNK.split(section)]
            transactions = self._parse_matches(
                filter(None, (SICOOB2_ROW.match(c) for c in chunks)), period)

        return reconcile_balances(transactions, daily_balances)

    def _parse_matches(self, matches, period) -> List[Transaction]:
        transactions = []
        for m in matches:
            date_str, document, description, amount, dc = m.groups()
            full = fold(f"{document} {description}")

            if full.startswith("SALDO ") or any(k in full for k in ("SALDO DO DIA", "SALDO ANTERIOR", "SALDO BLOQ")):
                self._skip("balance_marker", raw=m.group(0))
                continue
            if ("DATA" in full and "DOCUMENTO" in full) or ("HISTORICO" in full and "VALOR" in full):
                self._skip("header_row", raw=m.group(0))
                continue

            try:
                iso_date = day_month_to_iso(date_str, period)
                transactions.append(self._build(
                    iso_date, description, amount, dc == "D",
                    document=None if document == "Pix" else document, limit=100))
            except DateOutOfRange:
                self._skip("invalid_date", raw=m.group(0))
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=m.group(0))
        return transactions


# ----------------------------------------------------------------------
# Sicoob 3
# ----------------------------------------------------------------------

FULL_DATE = re.compile(r"\d{2}/\d{2}/\d{4}")
SICOOB3_BALANCE_SPLIT = re.compile(r"SALDO\s+DO\s+DIA", re.IGNORECASE)
SICOOB3_BALANCE_VALUE = re.compile(r"^\s*[=>\s]+\s*([\d.,]+)([DC*])", re.IGNORECASE)
SICOOB3_ROW = re.compile(
    rf"^(\d{{2}}/\d{{2}}/\d{{4}})\s+([A-Za-z0-9]+)\s+(.+?)\s+({AMOUNT_PATTERN})([DC*])(.*)$", re.DOTALL)
SICOOB3_ROW_NO_DOC = re.compile(
    rf"^(\d{{2}}/\d{{2}}/\d{{4}})\s+(.+?)\s+({AMOUNT_PATTERN})([DC*])(.*)$", re.DOTALL)
SICOOB3_FOOTER = re.compile(
    r"CHEQUE\s+ESPECIAL|LIMITES\s+DE\s+CR[ÉE]DITO|PREVIS[ÃA]O\s+CPMF|Acesse\s+o\s+menu", re.IGNORECASE)

SICOOB3_INFO_LINES = ("CHEQUE ESPECIAL", "PREVISAO", "LIMITES DE CREDITO", "ACESSE O MENU")


class Sicoob3Extractor(BaseExtractor):
    bank_id = "sicoob3"
    bank_name = "Sicoob 3"
    classification_rules = (
        rule("XFER", "RECEB", "CRED", requires=("PIX",)),
        rule("XFER", "EMIT", "ENVIADO", requires=("PIX",)),
        rule("XFER", "TED", "TRANSF"),
        rule("FEE", "TARIFA", "IOF"),
        rule("PAYMENT", "DEB"),
        rule("CREDIT", "CRED"),
    )

    def validate_format(self, text: str) -> bool:
        upper = text.upper()
        markers = [
            "SICOOB" in upper,
            "SISBR" in upper,
            "EXTRATO" in upper,
            "CONTA" in upper,
            "COOPERATIVA" in upper,
            re.search(r"per[ií]odo", text, re.IGNORECASE) is not None
            or re.search(r"\d{2}/\d{2}/\d{4}\s*(a|[-–])\s*\d{2}/\d{2}/\d{4}", text, re.IGNORECASE) is not None,
            count_markers(text, ["MOVIMENTAÇÃO", "LANÇAMENTO"]) > 0,
        ]
        return sum(markers) >= 3

    def extract(self, text: str) -> List[Transaction]:
        if len(FULL_DATE.findall(text)) < 2:
            return []

        daily_balances = self._daily_balances(text)
        flat = normalize_text(text)

        starts = [m.start() for m in FULL_DATE.finditer(flat)]
        transactions = []
        for i, start in enumerate(starts):
            end = starts[i + 1] if i + 1 < len(starts) else len(flat)
            txn = self._parse_chunk(flat[start:end].strip())
            if txn:
                transactions.append(txn)

        return reconcile_balances(transactions, daily_balances)

    def _daily_balances(self, text: str) -> Dict[str, float]:
        """Each SALDO DO DIA belongs to the last full date printed before it."""
        balances: Dict[str, float] = {}
        parts = SICOOB3_BALANCE_SPLIT.split(text)
        for chunk, next_chunk in zip(parts, parts[1:]):
            dates = FULL_DATE.findall(chunk)
            value = SICOOB3_BALANCE_VALUE.match(next_chunk)
            if not dates or not value:
                continue
            try:
                balances[br_date_to_iso(dates[-1])] = self._signed_balance(value.group(1), value.group(2))
            except (DateOutOfRange, AmountUnparsable):
                self._skip("balance_marker", raw=dates[-1])
        return balances

    def _parse_chunk(self, chunk: str) -> Optional[Transaction]:
        m = SICOOB3_ROW.match(chunk)
        if m:
            date_str, document, main, amount, dc, extra = m.groups()
        else:
            m = SICOOB3_ROW_NO_DOC.match(chunk)
            if not m:
                self._skip("no_amount", raw=chunk[:80])
                return None
            date_str, main, amount, dc, extra = m.groups()
            document = ""

        extra = SICOOB3_FOOTER.split(extra or "")[0].strip()
        main = main.strip()
        folded = fold(f"{document} {main}".strip())

        if "SALDO ANTERIOR" in folded or "SALDO BLOQUEADO" in folded or "SALDO DO DIA" in folded \
                or folded.startswith("SALDO "):
            self._skip("balance_marker", raw=chunk[:80])
            return None
        if "HISTÓRICO" in main or "DOCUMENTO" in main:
            self._skip("header_row", raw=chunk[:80])
            return None
        if any(k in folded for k in SICOOB3_INFO_LINES):
            self._skip("footer", raw=chunk[:80])
            return None

        try:
            iso_date = br_date_to_iso(date_str)
        except DateOutOfRange:
            self._skip("invalid_date", raw=chunk[:80])
            return None
        if iso_date < "2000-01-01":
            self._skip("invalid_date", raw=chunk[:80])
            return None

        if dc.upper() == "*":
            self._skip("blocked_indicator", raw=chunk[:80])
            return None

        description = main
        extra = SICOOB3_BALANCE_SPLIT.split(extra)[0].strip()
        if extra:
            description = f"{main} | {extra}"

        try:
            return self._build(iso_date, description, amount, dc.upper() == "D",
                               document=None if document == "Pix" else document, limit=200)
        except AmountUnparsable:
            self._skip("unparsable_amount", raw=chunk[:80])
            return None
