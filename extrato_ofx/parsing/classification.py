"""
OFX transaction type classification.

Ordered keyword rules evaluated against the accent-folded, upper-cased
description. The first matching rule wins; no match yields OTHER.
"""
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from extrato_ofx.common.models import OFX_TRANSACTION_TYPES
from .normalization import fold


@dataclass(frozen=True)
class ClassificationRule:
    """
    Attributes:
        ofx_type: TRNTYPE emitted when the rule matches
        contains: any of these substrings matches
        startswith: any of these prefixes matches
        requires: all of these substrings must be present as well
    """
    ofx_type: str
    contains: Tuple[str, ...] = ()
    startswith: Tuple[str, ...] = ()
    requires: Tuple[str, ...] = ()

    def matches(self, folded_description: str) -> bool:
        if any(fold(k) not in folded_description for k in self.requires):
            return False
        if not self.contains and not self.startswith:
            return bool(self.requires)
        if any(fold(k) in folded_description for k in self.contains):
            return True
        return any(folded_description.startswith(fold(k)) for k in self.startswith)


def rule(ofx_type: str, *contains: str, startswith: Iterable[str] = (), requires: Iterable[str] = ()) -> ClassificationRule:
    """Shorthand used by the bank modules: rule("FEE", "TARIFA", "TAR ")."""
    return ClassificationRule(ofx_type, tuple(contains), tuple(startswith), tuple(requires))


def classify_description(description: str, rules: Sequence[ClassificationRule], default: str = "OTHER") -> str:
    folded = fold(description or "")
    for r in rules:
        if r.matches(folded):
            return r.ofx_type if r.ofx_type in OFX_TRANSACTION_TYPES else default
    return default
