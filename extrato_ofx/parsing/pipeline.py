"""
Statement Converter

Orchestrates one conversion: PDF text extraction, extractor dispatch by
bank id, format validation, extraction, and OFX serialization.
"""
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from extrato_ofx.common.banks import STATEMENT_LAYOUTS, get_layout_name
from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction
from extrato_ofx.common.settings import Settings, load_settings
from extrato_ofx.exporting.ofx import serialize
from .banks import EXTRACTORS
from .base import BaseExtractor
from .exceptions import FormatMismatch, NoTransactionsFound
from .extractors.demo import DemoExtractor
from .extractors.pdf_text import extract_text
from .reconciliation import sort_chronologically

logger = get_logger(__name__)


def build_download_filename(bank_id: str, now: Optional[datetime] = None) -> str:
    """extrato_<bankId>_<epochMillis>.ofx"""
    moment = now or datetime.now()
    return f"extrato_{bank_id}_{int(moment.timestamp() * 1000)}.ofx"


@dataclass
class ConversionResult:
    bank_id: str
    bank_name: str
    transactions: List[Transaction]
    ofx: str
    filename: str
    demo: bool = False
    warnings: List[str] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        """Preview table (date, description, value, type, balance, document)."""
        columns = ['date', 'description', 'value', 'type', 'balance', 'document']
        if not self.transactions:
            return pd.DataFrame(columns=columns)
        df = pd.DataFrame([t.to_dict() for t in self.transactions], columns=columns)
        df['signed_value'] = [t.signed_value for t in self.transactions]
        return df

    def summary(self) -> Dict[str, Any]:
        credits = sum(t.value for t in self.transactions if t.is_credit)
        debits = sum(t.value for t in self.transactions if not t.is_credit)
        return {
            'count': len(self.transactions),
            'credits': round(credits, 2),
            'debits': round(debits, 2),
            'net': round(credits - debits, 2),
            'start_date': self.transactions[0].date if self.transactions else None,
            'end_date': self.transactions[-1].date if self.transactions else None,
            'final_balance': self.transactions[-1].balance if self.transactions else 0.0,
        }


class StatementConverter:
    """
    Main orchestrator for statement conversion.

    Stateless between calls: every convert() builds a fresh extractor, so a
    single converter can serve concurrent requests.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()

    @staticmethod
    def supported_banks() -> Dict[str, str]:
        return {bank_id: name for bank_id, (name, _code) in STATEMENT_LAYOUTS.items()}

    def select_extractor(self, bank_id: str) -> BaseExtractor:
        extractor_cls = EXTRACTORS.get(bank_id)
        if extractor_cls is None:
            logger.warning("Unknown bank id; generating demonstration data",
                           bank=bank_id, demo=True)
            return DemoExtractor()
        return extractor_cls()

    def extract_transactions(self, text: str, bank_id: str) -> List[Transaction]:
        """
        Validate and extract. Raises FormatMismatch, SectionNotFound or
        NoTransactionsFound.
        """
        extractor = self.select_extractor(bank_id)
        return self._run(extractor, text, bank_id)

    def _run(self, extractor: BaseExtractor, text: str, bank_id: str) -> List[Transaction]:
        if not extractor.validate_format(text):
            raise FormatMismatch(
                f"O arquivo não parece ser um extrato {get_layout_name(bank_id)}. "
                f"Verifique se selecionou o banco correto.",
                bank_id=bank_id, sample_text=text[:500])

        start = time.time()
        transactions = extractor.extract(text)
        logger.info("Extraction finished", bank=bank_id, extractor=type(extractor).__name__,
                    transactions=len(transactions), elapsed_ms=round((time.time() - start) * 1000, 2))

        if not transactions:
            raise NoTransactionsFound(
                "Nenhuma transação encontrada no extrato", bank_id=bank_id, sample_text=text[:500])
        return sort_chronologically(transactions)

    def convert(self, file_bytes: bytes, bank_id: str, now: Optional[datetime] = None) -> ConversionResult:
        extractor = self.select_extractor(bank_id)
        demo = isinstance(extractor, DemoExtractor)

        # demonstration output never depends on the upload
        text = "" if demo else extract_text(file_bytes, self.settings.extraction)
        transactions = self._run(extractor, text, bank_id)

        ofx = serialize(transactions, bank_id, classify=extractor.classify,
                        account_id=self.settings.account_id, now=now)
        result = ConversionResult(
            bank_id=bank_id,
            bank_name=get_layout_name(bank_id) if not demo else "Demonstração",
            transactions=transactions,
            ofx=ofx,
            filename=build_download_filename(bank_id, now),
            demo=demo,
        )
        if demo:
            result.warnings.append("Banco não suportado: dados de demonstração gerados")
        return result
