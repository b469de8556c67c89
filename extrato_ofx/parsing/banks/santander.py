"""
Santander statement extractors.

- SantanderExtractor: Internet Banking PJ export read line by line; a
  description line waits for the amount line that follows it
- Santander2Extractor: "Segunda, 30 de junho de 2025" day headers with
  "DESCRIPTION DEBITO|CREDITO R$value" rows
- Santander3Extractor: "dd/mm/yyyy description [-]R$value" rows with
  "Saldo do dia" closing balances
"""
import re
from datetime import date
from typing import Dict, List, Optional

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..classification import rule
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import contains_any, fold, normalize_text
from ..reconciliation import apply_running_balance, reconcile_balances, sort_chronologically
from ..values import MONTH_NAME_PATTERN, br_date_to_iso, month_from_name, parse_br_amount, to_iso_date

logger = get_logger(__name__)


# ======================================================================
# Santander
# ======================================================================

SANTANDER_SKIP = [
    "SALDO ANTERIOR", "SALDO TOTAL", "SALDO FINAL", "SALDO DISPONÍVEL", "SALDO EM", "SALDO BLOQUEIO",
    "CENTRAL DE ATENDIMENTO", "www.santander", "EXTRATO DE CONTA", "Data Histórico", "MOVIMENTAÇÃO",
    "Descrição", "Nº Documento", "Movimentos (R$)", "Saldo (R$)", "Pagina:", "BALP_", "Extrato_PJ",
]
SANTANDER_FOLDED_SKIP = tuple(fold(k) for k in SANTANDER_SKIP)
SAC = re.compile(r"\bSAC\b")
MONTH_YEAR = re.compile(rf"({MONTH_NAME_PATTERN})/(\d{{4}})", re.IGNORECASE)
LINE_DATE = re.compile(r"^(\d{2})/(\d{2})$")
LINE_DATE_PREFIX = re.compile(r"^(\d{2})/(\d{2})\s+(.+)$")
LINE_START_DATE = re.compile(r"^\d{2}/\d{2}\b", re.MULTILINE)
VALUE_LINE = re.compile(r"^(\d{1,3}(?:\.\d{3})*,\d{2})(-)?$")
DOC_LINE = re.compile(r"^\d{6}$|^\d{4}/\d+$|^\d{16}\s*/\s*\d+$|^\d+\s*/\s*\d+$")
ENDS_WITH_VALUE = re.compile(r"\d+,\d{2}-?$")
DESCRIPTION_AND_VALUE = re.compile(r"^(.+?)\s+(\d{1,3}(?:\.\d{3})*,\d{2})(-)?$")

# Words that always start a new description instead of continuing one
NEW_DESCRIPTION_WORDS = ("PIX", "PAGAMENTO", "TARIFA", "RESGATE", "CR COB")


class SantanderExtractor(BaseExtractor):
    bank_id = "santander"
    bank_name = "Santander"
    classification_rules = (
        rule("XFER", "PIX ENVIADO", "PIX TRANSF"),
        rule("DEP", "PIX RECEBIDO"),
        rule("XFER", "TED", "TRANSFERENCIA"),
        rule("PAYMENT", "PAGAMENTO", "PAG "),
        rule("FEE", "TARIFA", "TAR "),
        rule("XFER", "RESGATE", "CONTAMAX"),
        rule("DEP", "CR COB", "RECEBIMENTO"),
        rule("PAYMENT", "DARF", "IOF"),
        rule("XFER", "APLICACAO"),
        rule("PAYMENT", "BAIXA", "DUPL"),
        rule("FEE", "ENCARGOS"),
    )

    def validate_format(self, text: str) -> bool:
        return contains_any(text, ["SANTANDER"]) and LINE_START_DATE.search(text) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text, keep_lines=True)
        year_match = MONTH_YEAR.search(text)
        if year_match:
            year = int(year_match.group(2))
        else:
            year = date.today().year
            logger.warning("Statement month header not found; assuming current year", bank=self.bank_id, year=year)

        transactions: List[Transaction] = []
        current_date: Optional[str] = None
        pending: Optional[str] = None

        for line in (l.strip() for l in text.split("\n")):
            if not line:
                continue
            folded = fold(line)
            if any(k in folded for k in SANTANDER_FOLDED_SKIP) or SAC.search(folded) or MONTH_YEAR.search(line):
                self._skip("header_row", raw=line[:80])
                pending = None
                continue

            date_match = LINE_DATE.match(line) or LINE_DATE_PREFIX.match(line)
            if date_match:
                try:
                    current_date = to_iso_date(date_match.group(1), date_match.group(2), year)
                except DateOutOfRange:
                    self._skip("invalid_date", raw=line[:80])
                    continue
                pending = None
                if date_match.re is LINE_DATE:
                    continue
                line = date_match.group(3).strip()

            if not current_date:
                continue

            value_line = VALUE_LINE.match(line)
            if value_line:
                if pending:
                    self._append(transactions, current_date, pending, value_line.group(1), value_line.group(2))
                else:
                    self._skip("no_amount", raw=line)
                pending = None
                continue

            if DOC_LINE.match(line):
                if pending:
                    pending = f"{pending} {line}"
                continue
            if line == "-":
                continue

            if not ENDS_WITH_VALUE.search(line):
                if pending and len(line) < 40 and not any(w in line for w in NEW_DESCRIPTION_WORDS):
                    # continuation (e.g. counterparty name under "PIX ENVIADO")
                    pending = f"{pending} {line}"
                else:
                    pending = line
                continue

            m = DESCRIPTION_AND_VALUE.match(line)
            if m and len(m.group(1).strip()) > 2:
                self._append(transactions, current_date, m.group(1).strip(), m.group(2), m.group(3))
            else:
                self._skip("short_description", raw=line[:80])
            pending = None

        return apply_running_balance(sort_chronologically(transactions))

    def _append(self, transactions, iso_date, description, amount_str, minus) -> None:
        try:
            value = parse_br_amount(amount_str)
        except AmountUnparsable:
            self._skip("unparsable_amount", raw=amount_str)
            return
        if value <= 0:
            self._skip("zero_value", raw=description[:80])
            return
        transactions.append(self._build(iso_date, description, value, minus == "-"))


# ======================================================================
# Santander 2
# ======================================================================

DAY_HEADER = re.compile(
    r"(?:Segunda|Terça|Terca|Quarta|Quinta|Sexta|Sábado|Sabado|Domingo)[,\s]+(\d{1,2})\s+de\s+(\w+)\s+de\s+(\d{4})",
    re.IGNORECASE,
)
SANTANDER2_ROW = re.compile(
    r"([A-ZÁÉÍÓÚÀÃÕÇÊ][A-ZÁÉÍÓÚÀÃÕÇÊ\s./\-]+?)\s+(DEBITO|CREDITO)\s+R\$\s*([\d.,]+)", re.IGNORECASE)
SANTANDER2_FOOTER = ("ATENDIMENTO", "OUVIDORIA", "CENTRAL")


class Santander2Extractor(BaseExtractor):
    bank_id = "santander2"
    bank_name = "Santander 2"

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text)
        return DAY_HEADER.search(text) is not None and SANTANDER2_ROW.search(text) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text)
        headers = list(DAY_HEADER.finditer(text))
        transactions = []

        for i, header in enumerate(headers):
            day, month_name, year = header.groups()
            try:
                iso_date = to_iso_date(day, month_from_name(month_name) or 0, year)
            except DateOutOfRange:
                self._skip("invalid_date", raw=header.group(0))
                continue
            end = headers[i + 1].start() if i + 1 < len(headers) else len(text)

            for m in SANTANDER2_ROW.finditer(text, header.start(), end):
                description, direction, value_str = m.group(1).strip(), m.group(2).upper(), m.group(3)
                try:
                    value = parse_br_amount(value_str)
                except AmountUnparsable:
                    self._skip("unparsable_amount", raw=m.group(0)[:80])
                    continue
                if value == 0:
                    self._skip("zero_value", raw=m.group(0)[:80])
                    continue
                if len(description) < 3:
                    self._skip("short_description", raw=m.group(0)[:80])
                    continue
                folded = fold(description)
                if SAC.search(folded) or any(k in folded for k in SANTANDER2_FOOTER):
                    self._skip("footer", raw=m.group(0)[:80])
                    continue
                transactions.append(self._build(iso_date, description, value, direction == "DEBITO"))

        return apply_running_balance(sort_chronologically(transactions))


# ======================================================================
# Santander 3
# ======================================================================

SANTANDER3_ROW = re.compile(r"(\d{2}/\d{2}/\d{4})\s+(.+?)\s+(-?R\$\s*[\d.,]+)")


class Santander3Extractor(BaseExtractor):
    bank_id = "santander3"
    bank_name = "Santander 3"
    classification_rules = (
        rule("XFER", "PIX ENVIADO"),
        rule("DEP", "PIX RECEBIDO"),
        rule("XFER", "TED", "TRANSFERENCIA"),
        rule("PAYMENT", "PAGAMENTO", "DARF"),
        rule("FEE", "TARIFA"),
        rule("XFER", "RESGATE", "CONTAMAX"),
        rule("DEP", "DEPOSITO"),
        rule("ATM", "SAQUE"),
    )

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text, signed_currency=True)
        return contains_any(text, ["SANTANDER"]) and SANTANDER3_ROW.search(text) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text, signed_currency=True)
        transactions = []
        daily_balances: Dict[str, float] = {}

        for m in SANTANDER3_ROW.finditer(text):
            date_str, description, value_str = m.group(1), m.group(2).strip(), m.group(3)
            try:
                iso_date = br_date_to_iso(date_str)
                value = parse_br_amount(value_str)
            except DateOutOfRange:
                self._skip("invalid_date", raw=m.group(0)[:80])
                continue
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=m.group(0)[:80])
                continue

            if "SALDO DO DIA" in description.upper():
                daily_balances[iso_date] = -value if value_str.startswith("-") else value
                self._skip("balance_marker", raw=m.group(0)[:80])
                continue
            if value <= 0 or len(description) <= 2:
                self._skip("zero_value" if value <= 0 else "short_description", raw=m.group(0)[:80])
                continue
            transactions.append(self._build(iso_date, description, value, value_str.startswith("-")))

        return reconcile_balances(transactions, daily_balances)
