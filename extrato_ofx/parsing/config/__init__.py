# Configuration submodule
from .layout import LayoutDescriptor, ClassificationRuleDef
from .registry import LayoutRegistry, get_default_registry
from .extraction import ExtractionConfig

__all__ = ['LayoutDescriptor', 'ClassificationRuleDef', 'LayoutRegistry', 'get_default_registry', 'ExtractionConfig']
