"""
Descriptor-driven Extractor

Parses every statement format that can be described by a LayoutDescriptor
(period header, movements anchor, row regex, D/C mapping, daily balance
rows). Banks with several layout versions pass all of them; the version is
picked per document by its period header.
"""
import re
from typing import Dict, List, Optional, Sequence

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction, DEBIT
from ..base import BaseExtractor, Period
from ..config.layout import LayoutDescriptor
from ..exceptions import AmountUnparsable, DateOutOfRange, SectionNotFound
from ..normalization import Section, count_markers, fold, isolate_section, normalize_text
from ..reconciliation import dedupe_transactions, reconcile_balances, sort_chronologically
from ..values import br_date_to_iso, day_month_to_iso, parse_br_date

logger = get_logger(__name__)

GENERIC_PERIOD = re.compile(r"(?P<start>\d{2}/\d{2}/\d{4})\s*[-–]\s*(?P<end>\d{2}/\d{2}/\d{4})")

# dd/mm [doc] name R$ amount[CD*] on a single line
RECOVERY_LINE = re.compile(
    r"(?P<date>\d{2}/\d{2})\s+(?:(?P<document>[^\s]+)\s+)?(?P<name>.+?)\s+R\$\s*"
    r"(?P<amount>\d{1,3}(?:\.\d{3})*,\d{2})(?P<dc>[CD*])"
)

DOC_REF = re.compile(r"DOC\.:\s*([^\s]+)", re.IGNORECASE)
DAY_MONTH = re.compile(r"\b\d{2}/\d{2}\b")
DETAIL_SPLIT = re.compile(r"\s{2,}|\n")

HEADER_MARKERS = (("DATA", "DOCUMENTO", "HISTORICO"), ("DOCUMENTO", "HISTORICO", "VALOR"))


class LayoutExtractor(BaseExtractor):
    """
    Extractor configured entirely by LayoutDescriptors.

    Args:
        layouts: Descriptors of one bank, tried in priority order
        bank_id: Overrides the bank id taken from the descriptors
        bank_name: Display name used in logs and errors
    """

    def __init__(self, layouts: Sequence[LayoutDescriptor], bank_id: Optional[str] = None,
                 bank_name: Optional[str] = None):
        if not layouts:
            raise ValueError("LayoutExtractor needs at least one layout descriptor")
        self.layouts = sorted(layouts, key=lambda l: l.priority)
        self.bank_id = bank_id or self.layouts[0].bank_id
        self.bank_name = bank_name or self.layouts[0].name
        for layout in self.layouts:
            if layout.classification:
                self.classification_rules = tuple(layout.rules())
                break
        self._row_patterns = {l.name: re.compile(l.row_pattern) for l in self.layouts}

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text)
        return any(self._layout_matches(layout, text) for layout in self.layouts)

    def _layout_matches(self, layout: LayoutDescriptor, text: str) -> bool:
        folded = fold(text)
        if any(fold(m) not in folded for m in layout.required_markers):
            return False
        if layout.validation_markers and count_markers(text, layout.validation_markers) < layout.min_markers:
            return False
        if layout.validation_requires_period and not re.search(layout.period_pattern, text):
            return False
        return True

    def select_layout(self, text: str) -> LayoutDescriptor:
        """First layout whose period header matches; the first layout otherwise."""
        for layout in self.layouts:
            if re.search(layout.period_pattern, text):
                logger.debug("Layout selected", bank=self.bank_id, layout=layout.name, version=layout.version)
                return layout
        logger.debug("No layout period matched; using default layout", bank=self.bank_id,
                     layout=self.layouts[0].name)
        return self.layouts[0]

    def find_period(self, text: str, layout: LayoutDescriptor) -> Period:
        """
        Statement period (start, end).

        Raises SectionNotFound when neither the layout's header nor a generic
        "dd/mm/yyyy - dd/mm/yyyy" range is present.
        """
        match = re.search(layout.period_pattern, text) or GENERIC_PERIOD.search(text)
        if not match:
            raise SectionNotFound("Período do extrato não encontrado", bank_id=self.bank_id,
                                  sample_text=text[:200])
        try:
            return parse_br_date(match.group('start')), parse_br_date(match.group('end'))
        except DateOutOfRange:
            raise SectionNotFound(f"Período do extrato inválido: {match.group(0)}",
                                  bank_id=self.bank_id, sample_text=text[:200])

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text, keep_lines=True)
        layout = self.select_layout(text)
        period = self.find_period(text, layout)

        if layout.anchor:
            section = isolate_section(text, layout.anchor, end_anchors=layout.end_anchors,
                                      required=layout.anchor_required, bank_id=self.bank_id)
        else:
            section = Section(text, "full")

        daily_balances = self._daily_balances(text, layout, period)
        opening_balance = self._opening_balance(text, layout)

        transactions = self._parse_rows(section.text, layout, period)
        transactions = dedupe_transactions(transactions)

        if 'balance' in self._row_patterns[layout.name].groupindex:
            return sort_chronologically(transactions)
        return reconcile_balances(transactions, daily_balances, opening_balance)

    def _row_date(self, raw: str, layout: LayoutDescriptor, period: Period) -> str:
        if layout.date_format == 'dd/mm':
            return day_month_to_iso(raw, period)
        return br_date_to_iso(raw)

    def _daily_balances(self, text: str, layout: LayoutDescriptor, period: Period) -> Dict[str, float]:
        """SALDO DO DIA rows -> {iso date: signed closing balance}."""
        balances: Dict[str, float] = {}
        if not layout.daily_balance_pattern:
            return balances
        for m in re.finditer(layout.daily_balance_pattern, text):
            try:
                day = self._row_date(m.group('date'), layout, period)
                balances[day] = self._signed_balance(m.group('amount'), m.groupdict().get('dc'))
            except (DateOutOfRange, AmountUnparsable):
                self._skip("balance_marker", raw=m.group(0)[:80])
        return balances

    def _opening_balance(self, text: str, layout: LayoutDescriptor) -> float:
        if not layout.opening_balance_pattern:
            return 0.0
        m = re.search(layout.opening_balance_pattern, text)
        if not m:
            return 0.0
        try:
            return self._signed_balance(m.group('amount'), m.groupdict().get('dc'))
        except AmountUnparsable:
            return 0.0

    def _parse_rows(self, text: str, layout: LayoutDescriptor, period: Period) -> List[Transaction]:
        pattern = self._row_patterns[layout.name]
        matches = list(self._scan(pattern, text))
        transactions: List[Transaction] = []

        for i, m in enumerate(matches):
            fields = m.groupdict()
            raw = m.group(0)

            try:
                iso_date = self._row_date(fields['date'], layout, period)
            except DateOutOfRange:
                recovered = self._recover_lines(raw, layout, period)
                if recovered:
                    self._recovered("invalid_date", raw=raw[:80], rows=len(recovered))
                    transactions.extend(recovered)
                else:
                    self._skip("invalid_date", raw=raw[:80])
                continue

            name = (fields.get('name') or '').strip()
            folded_raw = fold(raw)
            if any(all(k in folded_raw for k in markers) for markers in HEADER_MARKERS):
                self._skip("header_row", raw=raw[:80])
                continue

            prefix = (self._excluded_prefix(name, layout)
                      or self._excluded_prefix(f"{fields.get('document') or ''} {name}".strip(), layout))
            if prefix:
                reason = "balance_marker" if "SALDO" in fold(prefix) else "excluded_prefix"
                self._skip(reason, raw=raw[:80])
                continue

            if DAY_MONTH.search(name):
                self._skip("cross_line", raw=raw[:80])
                continue

            if 'dc' in pattern.groupindex:
                direction = layout.sign_by_dc.get((fields.get('dc') or '').upper())
                if direction is None:
                    self._skip("blocked_indicator", raw=raw[:80], indicator=fields.get('dc'))
                    continue
                is_debit = direction == DEBIT
            else:
                is_debit = '-' in fields['amount']

            next_start = matches[i + 1].start() if i + 1 < len(matches) else len(text)
            details = self._details(text[m.end():next_start])
            doc_ref = fields.get('document')
            if not doc_ref:
                ref = DOC_REF.search(raw) or DOC_REF.search(text[m.end():next_start])
                doc_ref = ref.group(1) if ref else None

            memo = name
            if details and details != name and details not in name:
                memo = f"{memo} | {details}"
            if doc_ref:
                memo = f"{memo} | DOC: {doc_ref}"

            balance = 0.0
            try:
                if fields.get('balance'):
                    balance = self._signed_balance(fields['balance'])
                transactions.append(self._build(iso_date, memo, fields['amount'], is_debit,
                                                balance=balance, document=doc_ref,
                                                limit=layout.description_limit))
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=raw[:80])

        return transactions

    def _scan(self, pattern, text: str):
        """
        Row matches in order. A match that starts on a line holding only a
        date and swallows the next row (its name carries a dd/mm) is dropped
        and scanning resumes on the following line.
        """
        pos = 0
        while pos <= len(text):
            m = pattern.search(text, pos)
            if not m:
                return
            if "\n" in m.group(0) and DAY_MONTH.search(m.groupdict().get('name') or ''):
                self._skip("cross_line", raw=m.group(0)[:80])
                pos = m.start() + m.group(0).index("\n") + 1
                continue
            yield m
            pos = max(m.end(), m.start() + 1)

    def _excluded_prefix(self, name: str, layout: LayoutDescriptor) -> Optional[str]:
        folded = fold(name)
        for prefix in layout.skip_prefixes:
            if folded.startswith(fold(prefix)):
                return prefix
        return None

    def _details(self, tail: str) -> str:
        """First free-text fragment after a row (payer / payee line)."""
        for part in DETAIL_SPLIT.split(tail):
            part = part.strip()
            if not part:
                continue
            if DAY_MONTH.match(part) or "SALDO" in fold(part):
                return ""
            return part
        return ""

    def _recover_lines(self, raw: str, layout: LayoutDescriptor, period: Period) -> List[Transaction]:
        """Re-scan a match with a bad date line by line for well-formed rows."""
        recovered = []
        for line in raw.split("\n"):
            m = RECOVERY_LINE.search(line)
            if not m:
                continue
            direction = layout.sign_by_dc.get(m.group('dc').upper())
            if direction is None:
                continue
            try:
                iso_date = day_month_to_iso(m.group('date'), period)
                recovered.append(self._build(iso_date, m.group('name'), m.group('amount'),
                                             direction == DEBIT, document=m.group('document'),
                                             limit=layout.description_limit))
            except (DateOutOfRange, AmountUnparsable):
                continue
        return recovered
