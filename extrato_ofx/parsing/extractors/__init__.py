# Extractors
from .generic import LayoutExtractor
from .demo import DemoExtractor
from .pdf_text import extract_text, looks_like_pdf

__all__ = ['LayoutExtractor', 'DemoExtractor', 'extract_text', 'looks_like_pdf']
