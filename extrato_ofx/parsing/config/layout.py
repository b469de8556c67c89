"""
Layout Descriptor Configuration

Dataclasses describing one statement format declaratively, so a single
LayoutExtractor can parse several versions of the same bank's statement.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..classification import ClassificationRule


@dataclass
class ClassificationRuleDef:
    """
    One TRNTYPE rule as written in a layout JSON file.

    Attributes:
        ofx: TRNTYPE emitted on match
        contains: substrings, any of which matches
        startswith: prefixes, any of which matches
    """
    ofx: str
    contains: List[str] = field(default_factory=list)
    startswith: List[str] = field(default_factory=list)

    def to_rule(self) -> ClassificationRule:
        return ClassificationRule(self.ofx, tuple(self.contains), tuple(self.startswith))


@dataclass
class LayoutDescriptor:
    """
    Declarative description of a statement layout.

    Attributes:
        name: Human-readable layout name (e.g. "Sicoob - SISBR v4")
        bank_id: Bank id this layout belongs to (e.g. "sicoob")
        version: Layout version tag
        period_pattern: Regex with named groups 'start' and 'end' (dd/mm/yyyy)
        row_pattern: Regex with named groups date, name, amount and the
            optional document, dc and balance
        anchor: String marking where the movements table begins
        anchor_required: Missing anchor raises SectionNotFound instead of
            falling back to the whole text
        end_anchors: Strings where the movements table ends
        date_format: 'dd/mm' (year inferred from the period) or 'dd/mm/yyyy'
        sign_by_dc: D/C indicator -> 'credit' | 'debit'; other indicators
            mark the row as non-transactional
        skip_prefixes: Row names starting with any of these are skipped
        daily_balance_pattern: Regex with groups date, amount, dc for the
            end-of-day balance rows
        required_markers: Strings that must all be present for validate_format
        validation_markers: Strings sniffed by validate_format
        min_markers: How many validation markers must be present
        validation_requires_period: validate_format also demands the period header
        opening_balance_pattern: Regex with group amount (and optional dc)
            for the balance carried over from the previous statement
        description_limit: Maximum description length
        priority: Lower values are tried first when detecting the version
    """
    name: str
    bank_id: str
    version: str
    period_pattern: str
    row_pattern: str
    anchor: Optional[str] = None
    anchor_required: bool = False
    end_anchors: List[str] = field(default_factory=list)
    date_format: str = 'dd/mm'
    sign_by_dc: Dict[str, str] = field(default_factory=lambda: {'C': 'credit', 'D': 'debit'})
    skip_prefixes: List[str] = field(default_factory=list)
    daily_balance_pattern: Optional[str] = None
    required_markers: List[str] = field(default_factory=list)
    validation_markers: List[str] = field(default_factory=list)
    min_markers: int = 1
    validation_requires_period: bool = False
    opening_balance_pattern: Optional[str] = None
    description_limit: int = 100
    priority: int = 100
    classification: List[ClassificationRuleDef] = field(default_factory=list)

    def rules(self) -> List[ClassificationRule]:
        return [r.to_rule() for r in self.classification]
