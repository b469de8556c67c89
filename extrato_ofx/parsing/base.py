"""
Base Class for Statement Extractors

Every supported layout implements the same contract:
- validate_format(text) / detect(text): cheap content sniffing
- extract(text): text -> List[Transaction]
- classify(description): OFX TRNTYPE for the serializer
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Sequence, Tuple

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction, CREDIT, DEBIT
from .classification import ClassificationRule, classify_description
from .values import parse_br_amount

logger = get_logger(__name__)

Period = Tuple[date, date]


class BaseExtractor(ABC):
    """
    Abstract Base Class for all statement extractors.

    Subclasses set bank_id / bank_name and, when the bank has its own
    TRNTYPE vocabulary, classification_rules. Extractors keep no state
    between calls: extract() depends only on its input text.
    """
    bank_id: str = ""
    bank_name: str = ""
    classification_rules: Sequence[ClassificationRule] = ()

    @abstractmethod
    def validate_format(self, text: str) -> bool:
        """
        Returns True if the text looks like a statement of this layout.
        """
        pass

    def detect(self, text: str) -> bool:
        return self.validate_format(text)

    @abstractmethod
    def extract(self, text: str) -> List[Transaction]:
        """
        Parse the statement text.

        Returns the transactions (possibly empty); raises SectionNotFound
        when a required structural anchor is missing.
        """
        pass

    def classify(self, description: str) -> Optional[str]:
        """
        OFX TRNTYPE for a description, or None when this bank has no
        vocabulary of its own (the serializer then uses CREDIT/DEBIT).
        """
        if not self.classification_rules:
            return None
        return classify_description(description, self.classification_rules)

    # ------------------------------------------------------------------
    # Helpers shared by the bank modules
    # ------------------------------------------------------------------

    def _skip(self, reason: str, **context) -> None:
        """Trace a dropped row (one event per row, with its reason)."""
        logger.debug("Row skipped", bank=self.bank_id, reason=reason, **context)

    def _recovered(self, reason: str, **context) -> None:
        logger.debug("Row recovered", bank=self.bank_id, reason=reason, **context)

    def _build(self, iso_date: str, description: str, amount_raw, is_debit: bool,
               balance: float = 0.0, document: Optional[str] = None,
               limit: Optional[int] = None) -> Transaction:
        """Create a Transaction from raw tokens (value always non-negative)."""
        value = parse_br_amount(amount_raw)
        description = " ".join(description.split())
        if limit:
            description = description[:limit]
        return Transaction(
            date=iso_date,
            description=description,
            value=value,
            type=DEBIT if is_debit else CREDIT,
            balance=balance,
            document=document or None,
        )

    def _signed_balance(self, amount_raw, dc: Optional[str] = None) -> float:
        """Balance token -> signed float ('D' suffix or '-' sign means negative)."""
        val = parse_br_amount(amount_raw)
        txt = str(amount_raw).strip()
        if (dc or "").upper() == "D" or txt.upper().endswith("D") or txt.startswith("-") or txt.endswith("-"):
            return -val
        return val
