"""
Layout Registry

Descriptor JSON files live in parsing/layouts/. Each file describes one
version of one bank's statement; the registry groups them per bank and
picks the version whose period header is present in the text.
"""
import json
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from extrato_ofx.common.logging_config import get_logger
from .layout import LayoutDescriptor, ClassificationRuleDef

logger = get_logger(__name__)

DEFAULT_LAYOUTS_DIR = Path(__file__).resolve().parent.parent / "layouts"


def descriptor_from_dict(data: dict) -> LayoutDescriptor:
    """Build a descriptor, compiling its patterns so a bad file fails at load time."""
    fields = dict(data)
    rules = [ClassificationRuleDef(**r) for r in fields.pop("classification", [])]
    layout = LayoutDescriptor(classification=rules, **fields)

    for pattern in (layout.period_pattern, layout.row_pattern,
                    layout.daily_balance_pattern, layout.opening_balance_pattern):
        if pattern:
            re.compile(pattern)
    return layout


class LayoutRegistry:
    """
    Read-only collection of layout descriptors, keyed by bank id.

    Descriptors are loaded once; conversions running in parallel may share
    one registry.
    """

    def __init__(self, layouts_dir: Union[str, Path] = DEFAULT_LAYOUTS_DIR):
        self.layouts_dir = Path(layouts_dir)
        self.layouts: List[LayoutDescriptor] = []
        self._by_bank: Dict[str, List[LayoutDescriptor]] = {}
        self._load()

    def _load(self) -> None:
        if not self.layouts_dir.is_dir():
            logger.warning("Layouts directory not found", path=str(self.layouts_dir))
            return

        for path in sorted(self.layouts_dir.glob("*.json")):
            try:
                layout = descriptor_from_dict(json.loads(path.read_text(encoding="utf-8")))
            except (OSError, ValueError, TypeError, re.error) as e:
                logger.error("Layout file rejected", file=path.name, error=str(e))
                continue
            self.layouts.append(layout)

        self.layouts.sort(key=lambda l: (l.bank_id, l.priority))
        for layout in self.layouts:
            self._by_bank.setdefault(layout.bank_id, []).append(layout)
        logger.debug("Layouts loaded", count=len(self.layouts), banks=sorted(self._by_bank))

    def for_bank(self, bank_id: str) -> List[LayoutDescriptor]:
        """Versions of a bank's statement, most specific first."""
        return list(self._by_bank.get(bank_id, []))

    def detect(self, text: str, bank_id: str) -> Optional[LayoutDescriptor]:
        """First version of bank_id whose period header occurs in text, or None."""
        for layout in self._by_bank.get(bank_id, []):
            if re.search(layout.period_pattern, text):
                return layout
        return None

    def get_by_name(self, name: str) -> Optional[LayoutDescriptor]:
        return next((l for l in self.layouts if l.name == name), None)

    def list_layouts(self) -> List[str]:
        return [l.name for l in self.layouts]


_default_registry: Optional[LayoutRegistry] = None


def get_default_registry() -> LayoutRegistry:
    """Registry over the packaged layouts, loaded on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = LayoutRegistry()
    return _default_registry
