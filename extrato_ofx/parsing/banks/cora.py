"""
Cora account statement extractor.

Movements are grouped in day blocks opened by "dd/mm/yyyy Saldo do dia
R$ X". Inside a block every movement prints its signed value first and
the description after it:

    01/03/2025 Saldo do dia R$ 1.250,00 + R$ 500,00 Pix recebido Fulano - R$ 20,00 Tarifa

Balances are rebuilt from the published day balances; the summary totals
("Total de entradas/saídas") are checked against the extracted movements.
"""
import re
from typing import Dict, List

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction
from ..base import BaseExtractor
from ..exceptions import AmountUnparsable, DateOutOfRange
from ..normalization import contains_any, normalize_text
from ..reconciliation import reconcile_balances
from ..values import br_date_to_iso, parse_br_amount

logger = get_logger(__name__)

DAY_BLOCK = re.compile(r"(\d{2}/\d{2}/\d{4})\s*Saldo do dia\s*(-)?\s*R\$\s*(-?[\d.,]+)")
SIGNED_VALUE = re.compile(r"([+-])\s*R\$\s*([\d.,]+)")
SUMMARY = {
    "opening": re.compile(r"Saldo inicial(?:\s+do per[ií]odo)?\s*R\$\s*([\d.,]+)", re.IGNORECASE),
    "credits": re.compile(r"Total de entradas\s*\+?\s*R\$\s*([\d.,]+)", re.IGNORECASE),
    "debits": re.compile(r"Total de sa[ií]das\s*-?\s*R\$\s*([\d.,]+)", re.IGNORECASE),
    "closing": re.compile(r"Saldo final(?:\s+do per[ií]odo)?\s*R\$\s*([\d.,]+)", re.IGNORECASE),
}
SUMMARY_ROW = re.compile(r"^(Total de|Saldo inicial|Saldo final)", re.IGNORECASE)

# Page header/footer fragments glued to descriptions
PAGE_NOISE = (
    re.compile(r"Cora SCFI.*?(?:Extrato do per[ií]odo|per[ií]odo)", re.IGNORECASE),
    re.compile(r"CNPJ\s+[\d./-]+.*?Conta:\s*[\d-]+", re.IGNORECASE),
    re.compile(r"\d{2}/\d{2}/\d{4}\s*a\s*\d{2}/\d{2}/\d{4}"),
    re.compile(r"Impresso em.*$", re.IGNORECASE),
)

# Tolerance for the summary totals check
TOTALS_TOLERANCE = 1.0


class CoraExtractor(BaseExtractor):
    bank_id = "cora"
    bank_name = "Cora"

    def validate_format(self, text: str) -> bool:
        text = normalize_text(text)
        return contains_any(text, ["CORA"]) and DAY_BLOCK.search(text) is not None

    def extract(self, text: str) -> List[Transaction]:
        text = normalize_text(text)
        summary = self._summary(text)

        blocks = list(DAY_BLOCK.finditer(text))
        transactions = []
        daily_balances: Dict[str, float] = {}
        for i, block in enumerate(blocks):
            try:
                iso_date = br_date_to_iso(block.group(1))
                day_balance = self._signed_balance(block.group(3), "D" if block.group(2) else None)
            except (DateOutOfRange, AmountUnparsable):
                self._skip("invalid_date", raw=block.group(0))
                continue
            daily_balances[iso_date] = day_balance
            end = blocks[i + 1].start() if i + 1 < len(blocks) else len(text)
            body = text[block.end():end]

            values = list(SIGNED_VALUE.finditer(body))
            for j, value in enumerate(values):
                desc_end = values[j + 1].start() if j + 1 < len(values) else len(body)
                description = self._clean(body[value.end():desc_end])
                if len(description) < 3:
                    self._skip("short_description", raw=value.group(0))
                    continue
                if SUMMARY_ROW.match(description):
                    self._skip("balance_marker", raw=description[:80])
                    continue
                try:
                    transactions.append(self._build(iso_date, description, value.group(2), value.group(1) == "-",
                                                    limit=200))
                except AmountUnparsable:
                    self._skip("unparsable_amount", raw=value.group(0))

        self._check_totals(transactions, summary)
        return reconcile_balances(transactions, daily_balances, summary.get("opening", 0.0))

    def _clean(self, description: str) -> str:
        for pattern in PAGE_NOISE:
            description = pattern.sub("", description)
        return " ".join(description.split())

    def _summary(self, text: str) -> Dict[str, float]:
        summary = {}
        for key, pattern in SUMMARY.items():
            match = pattern.search(text)
            if match:
                summary[key] = parse_br_amount(match.group(1))
        return summary

    def _check_totals(self, transactions: List[Transaction], summary: Dict[str, float]) -> None:
        credits = sum(t.value for t in transactions if t.is_credit)
        debits = sum(t.value for t in transactions if not t.is_credit)
        expected_credits = summary.get("credits", 0.0)
        expected_debits = summary.get("debits", 0.0)

        if abs(credits - expected_credits) < TOTALS_TOLERANCE and abs(debits - expected_debits) < TOTALS_TOLERANCE:
            logger.debug("Statement totals match", bank=self.bank_id,
                         credits=round(credits, 2), debits=round(debits, 2))
        else:
            logger.warning("Statement totals differ from extracted movements", bank=self.bank_id,
                           credits=round(credits, 2), expected_credits=expected_credits,
                           debits=round(debits, 2), expected_debits=expected_debits)
