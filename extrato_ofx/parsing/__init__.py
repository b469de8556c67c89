"""
Statement parsing package.

- banks: one extractor per supported statement layout (EXTRACTORS)
- extractors: PDF text extraction, descriptor-driven and demo extractors
- normalization / values / reconciliation / classification: shared helpers
- pipeline: StatementConverter orchestration (import it from
  extrato_ofx.parsing.pipeline; it depends on the settings module)
"""

from .base import BaseExtractor
from .exceptions import (
    ExtractionError,
    FormatMismatch,
    SectionNotFound,
    NoTransactionsFound,
    TextExtractionError,
    RowError,
    DateOutOfRange,
    AmountUnparsable,
)

__all__ = [
    'BaseExtractor',
    'ExtractionError',
    'FormatMismatch',
    'SectionNotFound',
    'NoTransactionsFound',
    'TextExtractionError',
    'RowError',
    'DateOutOfRange',
    'AmountUnparsable',
]
