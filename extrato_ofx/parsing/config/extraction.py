"""
Text Extraction Configuration

Explicit settings for the pdfplumber boundary, passed into extract_text()
instead of being kept as process-wide mutable state.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Attributes:
        x_tolerance: Horizontal gap (pt) under which characters join a word
        y_tolerance: Vertical gap (pt) under which characters share a line
        layout: Preserve horizontal spacing (keeps multi-space column gaps)
        page_separator: String placed between the text of consecutive pages
        max_pages: Stop after this many pages (None reads the whole file)
        password: Password for encrypted statements
    """
    x_tolerance: float = 3
    y_tolerance: float = 3
    layout: bool = False
    page_separator: str = "\n"
    max_pages: Optional[int] = None
    password: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ExtractionConfig":
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
