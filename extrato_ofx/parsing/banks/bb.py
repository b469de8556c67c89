"""
Banco do Brasil statement extractors.

Both layouts print "dd/mm/yyyy AG LOTE HISTORICO DOC VALOR C|D" rows:
- BBExtractor: the month period header is required; rows may carry the
  running balance ("... 3.817,97 D 3.604,11 C") which is used when present
- BB2Extractor: "Extrato de conta corrente" export, read line by line
  (pipe tables or plain rows) with a whole-text fallback
"""
import re
from typing import List, Optional

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..exceptions import AmountUnparsable, DateOutOfRange, SectionNotFound
from ..normalization import count_markers, fold, normalize_text
from ..values import br_date_to_iso, parse_br_amount

logger = get_logger(__name__)

OPENING_BALANCE = re.compile(r"Saldo\s+Anterior[\s|]*([\d.,]+)\s*([CD])\b", re.IGNORECASE)


def _opening_balance(text: str) -> float:
    match = OPENING_BALANCE.search(text)
    if not match:
        return 0.0
    value = parse_br_amount(match.group(1))
    return -value if match.group(2).upper() == "D" else value


# ======================================================================
# Banco do Brasil
# ======================================================================

BB_PERIOD = re.compile(r"Per[ií]odo\s+do\s+extrato[:\s]*(\d{2})/(\d{4})", re.IGNORECASE)
BB_ROW = re.compile(
    r"(\d{2}/\d{2}/\d{4})\s+(\d{4})\s+(\d{3,5})\s+(.+?)\s+(?:([\d.]+)\s+)?([\d.,]+)\s+([CD])\b"
    r"(?:\s+([\d.,]+)\s+([CD])\b)?",
    re.IGNORECASE,
)
BB_MARKERS = ["AGENCIA", "CONTA CORRENTE", "LANCAMENTOS", "PERIODO DO EXTRATO"]


class BBExtractor(BaseExtractor):
    bank_id = "bb"
    bank_name = "Banco do Brasil"

    def validate_format(self, text: str) -> bool:
        return count_markers(normalize_text(text), BB_MARKERS) >= 3

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text)
        period = BB_PERIOD.search(text)
        if not period:
            raise SectionNotFound("Período não encontrado no extrato", bank_id=self.bank_id, sample_text=text[:200])
        logger.debug("Banco do Brasil statement period", bank=self.bank_id,
                     month=period.group(1), year=period.group(2))

        balance = _opening_balance(text)
        transactions = []
        for m in BB_ROW.finditer(text):
            date_str, agency, _lot, history, document, value_str, dc, balance_str, balance_dc = m.groups()
            history = re.sub(r"[\d.]+$", "", history.strip()).strip()
            if "SALDO" in fold(history) or "S A L D O" in fold(history):
                self._skip("balance_marker", raw=m.group(0)[:80])
                continue

            description = history
            if document:
                description += f" - DOC {document}"
            description += f" - AG {agency}"

            try:
                txn = self._build(br_date_to_iso(date_str), description, value_str, dc.upper() == "D",
                                  document=document or None)
            except DateOutOfRange:
                self._skip("invalid_date", raw=m.group(0)[:80])
                continue
            except AmountUnparsable:
                self._skip("unparsable_amount", raw=m.group(0)[:80])
                continue

            if balance_str:
                balance = self._signed_balance(balance_str, balance_dc)
            else:
                balance += txn.signed_value
            txn.balance = round(balance, 2)
            transactions.append(txn)

        return transactions


# ======================================================================
# Banco do Brasil 2
# ======================================================================

BB2_TABLE_ROW = re.compile(
    r"\|\s*(\d{2}/\d{2}/\d{4})\s*\|[^|]*\|\s*\d{4}\s*\|\s*\d{3,5}\s*\|\s*([^|]+)\|\s*([^|]*)\|\s*([\d.,]+)\s*\|\s*([CD*])\s*\|?",
    re.IGNORECASE,
)
BB2_ROW = re.compile(r"(\d{2}/\d{2}/\d{4})\s+\d{4}\s+\d{3,5}\s+(.+?)\s+([\d.,]+)\s*([CD])\s*$", re.IGNORECASE)
BB2_RAW_ROW = re.compile(r"(\d{2}/\d{2}/\d{4})\s+\d{4}\s+\d{3,5}\s+(.+?)\s+([\d.,]+)\s+([CD])\b", re.IGNORECASE)
BB2_FINAL_BALANCE = re.compile(r"S\s*A\s*L\s*D\s*O\s+([\d.,]+)\s*([CD])", re.IGNORECASE)
BB2_TRAILING_DOC = re.compile(r"([\d.]+)\s*$")
BB2_HEADER_LINES = ("DT. BALANCETE", "DT. MOVIMENTO", "OBSERVACOES", "OUVIDORIA")
BB2_MARKERS = ["EXTRATO DE CONTA CORRENTE", "AGENCIA", "CONTA CORRENTE", "LANCAMENTOS"]


class BB2Extractor(BaseExtractor):
    bank_id = "bb2"
    bank_name = "Banco do Brasil 2"

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text)
        markers = count_markers(text, BB2_MARKERS)
        if count_markers(text, ["DT. BALANCETE", "DT BALANCETE"]):
            markers += 1
        return markers >= 4

    def extract(self, text: str) -> List[Transaction]:
        lines = normalize_text(text, keep_lines=True).split("\n")
        balance = _opening_balance(normalize_text(text))
        transactions: List[Transaction] = []

        for line in lines:
            if not line:
                continue
            folded = fold(line)
            if any(k in folded for k in BB2_HEADER_LINES) or re.search(r"\bSAC\b", folded):
                self._skip("header_row", raw=line[:80])
                continue
            if "SALDO" in folded or "S A L D O" in folded:
                final = BB2_FINAL_BALANCE.search(line)
                if final:
                    logger.debug("Final balance line", bank=self.bank_id, raw=line[:60])
                self._skip("balance_marker", raw=line[:80])
                continue

            table = BB2_TABLE_ROW.search(line)
            if table:
                date_str, history, document, value_str, dc = table.groups()
                history, document = history.strip(), document.strip()
                if dc == "*":
                    self._skip("blocked_indicator", raw=line[:80])
                    continue
                description = f"{history} - DOC {document}" if document else history
                txn = self._row(date_str, description, value_str, dc, document or None, line)
            else:
                direct = BB2_ROW.search(line)
                if not direct:
                    continue
                date_str, history, value_str, dc = direct.groups()
                txn = self._row(date_str, history.strip(), value_str, dc, None, line)

            if txn:
                balance += txn.signed_value
                txn.balance = round(balance, 2)
                transactions.append(txn)

        if not transactions:
            logger.info("No line-based rows found; trying whole-text parsing", bank=self.bank_id)
            return self._parse_raw(normalize_text(text))
        return transactions

    def _parse_raw(self, text: str) -> List[Transaction]:
        balance = _opening_balance(text)
        transactions = []
        for m in BB2_RAW_ROW.finditer(text):
            date_str, history, value_str, dc = m.groups()
            history = history.strip()
            if "SALDO ANTERIOR" in fold(history) or "S A L D O" in fold(history):
                self._skip("balance_marker", raw=m.group(0)[:80])
                continue

            document = None
            doc = BB2_TRAILING_DOC.search(history)
            if doc and "." in doc.group(1):
                document = doc.group(1)
                history = history[:doc.start()].strip()
            description = f"{history} - DOC {document}" if document else history

            txn = self._row(date_str, description, value_str, dc, document, m.group(0))
            if txn:
                balance += txn.signed_value
                txn.balance = round(balance, 2)
                transactions.append(txn)
        return transactions

    def _row(self, date_str: str, description: str, value_str: str, dc: str,
             document: Optional[str], raw: str) -> Optional[Transaction]:
        if "SALDO ANTERIOR" in fold(description):
            self._skip("balance_marker", raw=raw[:80])
            return None
        try:
            return self._build(br_date_to_iso(date_str), description, value_str, dc.upper() == "D",
                               document=document)
        except DateOutOfRange:
            self._skip("invalid_date", raw=raw[:80])
        except AmountUnparsable:
            self._skip("unparsable_amount", raw=raw[:80])
        return None
