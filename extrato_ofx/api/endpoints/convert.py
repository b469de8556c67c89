from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.parsing.exceptions import (
    FormatMismatch,
    NoTransactionsFound,
    SectionNotFound,
    TextExtractionError,
)
from extrato_ofx.parsing.extractors.pdf_text import looks_like_pdf
from extrato_ofx.parsing.pipeline import ConversionResult, StatementConverter

logger = get_logger(__name__)
router = APIRouter()

_converter: Optional[StatementConverter] = None


def get_converter() -> StatementConverter:
    global _converter
    if _converter is None:
        _converter = StatementConverter()
    return _converter


class BankOut(BaseModel):
    """Layout suportado"""
    id: str
    name: str


class TransactionOut(BaseModel):
    """Transação extraída do extrato"""
    date: str
    description: str
    value: float
    type: str
    balance: float
    document: Optional[str] = None


class PreviewResponse(BaseModel):
    """Prévia da conversão"""
    status: str
    bank_id: str
    bank_name: str
    demo: bool
    filename: str
    summary: Dict
    warnings: List[str] = []
    transactions: List[TransactionOut]


def _read_pdf(file: UploadFile, converter: StatementConverter) -> bytes:
    content = file.file.read()
    if not content or not looks_like_pdf(content):
        raise HTTPException(status_code=400, detail="Somente arquivos PDF são suportados no conversor.")
    max_bytes = converter.settings.max_upload_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(status_code=413,
                            detail=f"Arquivo maior que o limite de {converter.settings.max_upload_mb} MB.")
    return content


def _convert(file: UploadFile, bank_id: str, converter: StatementConverter):
    """
    Run the conversion, mapping statement-level errors to HTTP answers.
    Returns a ConversionResult or a warning JSONResponse.
    """
    content = _read_pdf(file, converter)
    try:
        return converter.convert(content, bank_id)
    except (FormatMismatch, SectionNotFound) as e:
        logger.warning("Statement rejected", bank=bank_id, error_type=type(e).__name__, filename=file.filename)
        raise HTTPException(status_code=422, detail=e.message)
    except TextExtractionError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NoTransactionsFound as e:
        logger.warning("No transactions found", bank=bank_id, filename=file.filename)
        return JSONResponse(status_code=200, content={
            "status": "warning",
            "bank_id": bank_id,
            "message": e.message,
            "transactions": [],
        })


@router.get("/banks", response_model=List[BankOut])
def list_banks(converter: StatementConverter = Depends(get_converter)):
    """Supported statement layouts."""
    return [BankOut(id=bank_id, name=name) for bank_id, name in converter.supported_banks().items()]


@router.post("/")
def convert_statement(file: UploadFile = File(...), bank_id: str = Form(...),
                      converter: StatementConverter = Depends(get_converter)):
    """
    Convert an uploaded PDF statement into an OFX download.
    """
    result = _convert(file, bank_id, converter)
    if not isinstance(result, ConversionResult):
        return result

    headers = {
        'Content-Disposition': f'attachment; filename="{result.filename}"'
    }
    if result.demo:
        headers['X-Demo-Data'] = 'true'
    return Response(content=result.ofx.encode('cp1252', errors='replace'),
                    media_type='application/x-ofx', headers=headers)


@router.post("/preview", response_model=PreviewResponse)
def preview_statement(file: UploadFile = File(...), bank_id: str = Form(...),
                      converter: StatementConverter = Depends(get_converter)):
    result = _convert(file, bank_id, converter)
    if not isinstance(result, ConversionResult):
        return result

    return PreviewResponse(
        status="success",
        bank_id=result.bank_id,
        bank_name=result.bank_name,
        demo=result.demo,
        filename=result.filename,
        summary=result.summary(),
        warnings=result.warnings,
        transactions=[TransactionOut(**t.to_dict()) for t in result.transactions],
    )
