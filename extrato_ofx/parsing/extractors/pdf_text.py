"""
PDF Text Extraction

Turns uploaded statement bytes into the flat text every extractor parses.
"""
import io
from typing import Optional

import pdfplumber

from extrato_ofx.common.logging_config import get_logger
from ..config.extraction import ExtractionConfig
from ..exceptions import TextExtractionError

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"


def looks_like_pdf(file_bytes: bytes) -> bool:
    """Cheap signature check done before handing bytes to pdfplumber."""
    return bool(file_bytes) and PDF_MAGIC in file_bytes[:1024]


def extract_text(file_bytes: bytes, config: Optional[ExtractionConfig] = None) -> str:
    """
    Extract the text of every page, joined by config.page_separator.

    Args:
        file_bytes: Raw PDF content
        config: Extraction settings (defaults to ExtractionConfig())

    Returns:
        Text of the document (empty pages contribute an empty string)

    Raises:
        TextExtractionError: The bytes are not a readable PDF
    """
    config = config or ExtractionConfig()
    if not looks_like_pdf(file_bytes):
        raise TextExtractionError("O arquivo enviado não é um PDF válido")

    pages = []
    try:
        with pdfplumber.open(io.BytesIO(file_bytes), password=config.password) as pdf:
            page_list = pdf.pages
            if config.max_pages:
                page_list = page_list[:config.max_pages]
            for page in page_list:
                text = page.extract_text(
                    x_tolerance=config.x_tolerance,
                    y_tolerance=config.y_tolerance,
                    layout=config.layout,
                )
                pages.append(text or "")
    except Exception as e:
        logger.error("PDF text extraction failed", error=str(e), size=len(file_bytes))
        raise TextExtractionError(f"Não foi possível ler o PDF: {e}") from e

    logger.info("PDF text extracted", pages=len(pages), chars=sum(len(p) for p in pages))
    return config.page_separator.join(pages)
