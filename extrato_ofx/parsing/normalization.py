"""
Text Normalization & Section Isolation

PDF text extraction splits dates and currency amounts into loose fragments
("01 / 03", "R $ 1.234,56"). Every extractor regex assumes the canonical
spacing produced here.
"""
import re
import unicodedata
from typing import Iterable, NamedTuple

from extrato_ofx.common.logging_config import get_logger
from .exceptions import SectionNotFound

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")
_INLINE_WHITESPACE = re.compile(r"[^\S\n]+")
_SLASH = re.compile(r"\s*/\s*")
_INLINE_SLASH = re.compile(r"[^\S\n]*/[^\S\n]*")
_CURRENCY = re.compile(r"R\s*\$\s*")
_INLINE_CURRENCY = re.compile(r"R[^\S\n]*\$[^\S\n]*")
_COLON = re.compile(r"\s*:\s*")
_INLINE_COLON = re.compile(r"[^\S\n]*:[^\S\n]*")
_SIGNED_CURRENCY = re.compile(r"-\s*R\$")
_INLINE_SIGNED_CURRENCY = re.compile(r"-[^\S\n]*R\$")


def normalize_text(text: str, *, keep_lines: bool = False, colons: bool = False,
                   signed_currency: bool = False) -> str:
    """
    Canonicalize spacing of raw PDF text.

    - whitespace runs collapse to one space (with keep_lines, newlines survive)
    - " / " collapses to "/"
    - "R $ 1,00" / "R$  1,00" collapse to "R$1,00"
    - colons=True also removes spaces around ":"
    - signed_currency=True turns "- R$" into "-R$"

    Applying it twice gives the same result as applying it once.
    """
    if not text:
        return ""

    if keep_lines:
        text = _INLINE_WHITESPACE.sub(" ", text)
        text = _INLINE_SLASH.sub("/", text)
        text = _INLINE_CURRENCY.sub("R$", text)
        if colons:
            text = _INLINE_COLON.sub(":", text)
        if signed_currency:
            text = _INLINE_SIGNED_CURRENCY.sub("-R$", text)
        return "\n".join(line.strip() for line in text.split("\n")).strip()

    text = _WHITESPACE.sub(" ", text)
    text = _SLASH.sub("/", text)
    text = _CURRENCY.sub("R$", text)
    if colons:
        text = _COLON.sub(":", text)
    if signed_currency:
        text = _SIGNED_CURRENCY.sub("-R$", text)
    return text.strip()


def _fold_char(ch: str) -> str:
    base = unicodedata.normalize("NFKD", ch)[:1] or ch
    upper = base.upper()
    return upper if len(upper) == 1 else base


def fold(text: str) -> str:
    """
    Accent-stripped, upper-cased copy of text with the same length,
    so indexes found in the folded copy are valid in the original.
    """
    return "".join(_fold_char(ch) for ch in text)


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """Accent/case-insensitive substring test."""
    folded = fold(text)
    return any(fold(k) in folded for k in keywords)


def count_markers(text: str, markers: Iterable[str]) -> int:
    """How many of the markers occur in text (accent/case-insensitive)."""
    folded = fold(text)
    return sum(1 for m in markers if fold(m) in folded)


class Section(NamedTuple):
    text: str
    mode: str  # 'exact' | 'normalized' | 'full'

    @property
    def degraded(self) -> bool:
        return self.mode != "exact"


def _cut_at_end(text: str, end_anchors: Iterable[str]) -> str:
    folded = fold(text)
    cut = len(text)
    for end in end_anchors:
        idx = folded.find(fold(end))
        if idx != -1:
            cut = min(cut, idx)
    return text[:cut]


def isolate_section(text: str, anchor: str, *, end_anchors: Iterable[str] = (),
                    required: bool = False, bank_id: str = None) -> Section:
    """
    Restrict text to the movements table that follows anchor.

    Tries the anchor verbatim, then an accent/case-insensitive search. When
    both fail the whole text is returned in degraded mode (or SectionNotFound
    is raised when the anchor is required).
    """
    end_anchors = tuple(end_anchors)

    idx = text.find(anchor)
    if idx != -1:
        body = text[idx + len(anchor):]
        return Section(_cut_at_end(body, end_anchors), "exact")

    idx = fold(text).find(fold(anchor))
    if idx != -1:
        logger.info("Movements anchor matched only after accent/case folding",
                    anchor=anchor, bank=bank_id, degraded=True)
        body = text[idx + len(anchor):]
        return Section(_cut_at_end(body, end_anchors), "normalized")

    if required:
        raise SectionNotFound(
            f"Seção de movimentações não encontrada (marcador '{anchor}')",
            bank_id=bank_id,
            sample_text=text[:200],
        )

    logger.warning("Movements anchor not found; scanning the whole document",
                   anchor=anchor, bank=bank_id, degraded=True)
    return Section(text, "full")
