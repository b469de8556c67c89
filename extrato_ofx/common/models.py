from dataclasses import dataclass, asdict
from typing import Optional

CREDIT = "credit"
DEBIT = "debit"
DIRECTIONS = (CREDIT, DEBIT)

# OFX 1.02 <TRNTYPE> vocabulary
OFX_TRANSACTION_TYPES = frozenset({
    "CREDIT", "DEBIT", "INT", "DIV", "FEE", "SRVCHG", "DEP", "ATM", "POS",
    "XFER", "CHECK", "PAYMENT", "CASH", "DIRECTDEP", "DIRECTDEBIT",
    "REPEATPMT", "OTHER",
})


@dataclass
class Transaction:
    """
    Canonical statement movement produced by every extractor.

    The magnitude lives in ``value`` and the direction in ``type``; the
    signed amount is only ever derived from both (``signed_value``).
    ``balance`` is the account balance right after this movement and stays
    at 0 until reconciliation fills it in.
    """
    date: str  # ISO YYYY-MM-DD
    description: str
    value: float
    type: str  # 'credit' | 'debit'
    balance: float = 0.0
    document: Optional[str] = None

    def __post_init__(self):
        if self.type not in DIRECTIONS:
            raise ValueError(f"Invalid transaction type: {self.type!r}")
        if self.value < 0:
            raise ValueError(f"Transaction value must be non-negative, got {self.value}")

    @property
    def is_credit(self) -> bool:
        return self.type == CREDIT

    @property
    def signed_value(self) -> float:
        return self.value if self.is_credit else -self.value

    def to_dict(self):
        return asdict(self)
