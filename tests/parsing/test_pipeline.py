"""
StatementConverter tests. PDF reading is replaced by canned statement text.
"""
from datetime import datetime, timezone

import pytest

from extrato_ofx.common.settings import Settings
from extrato_ofx.parsing.exceptions import FormatMismatch, NoTransactionsFound, TextExtractionError
from extrato_ofx.parsing.extractors.demo import DemoExtractor
from extrato_ofx.parsing.extractors.pdf_text import extract_text, looks_like_pdf
from extrato_ofx.parsing.pipeline import StatementConverter, build_download_filename


SANTANDER3_TEXT = """Santander
02/03/2024 TARIFA MENSAL - R$ 10,00
02/03/2024 Saldo do dia R$ 1.140,00
01/03/2024 PIX RECEBIDO MARIA R$ 150,00
01/03/2024 Saldo do dia R$ 1.150,00"""

NOW = datetime(2024, 4, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def converter():
    return StatementConverter(Settings(log_file=None))


@pytest.fixture
def pdf_text(monkeypatch):
    """Makes every 'PDF' read as the given text."""
    def _use(text):
        monkeypatch.setattr("extrato_ofx.parsing.pipeline.extract_text", lambda content, config=None: text)
    return _use


class TestDownloadFilename:

    def test_epoch_millis(self):
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert build_download_filename("itau", moment) == "extrato_itau_1704067200000.ofx"


class TestStatementConverter:

    def test_supported_banks(self, converter):
        banks = converter.supported_banks()
        assert len(banks) == 22
        assert banks["sicoob"] == "Sicoob"
        assert banks["btg"] == "BTG Pactual"

    def test_select_extractor(self, converter):
        assert converter.select_extractor("santander3").bank_id == "santander3"
        assert isinstance(converter.select_extractor("banco_x"), DemoExtractor)

    def test_convert(self, converter, pdf_text):
        pdf_text(SANTANDER3_TEXT)
        result = converter.convert(b"%PDF-1.4", "santander3", now=NOW)

        assert result.bank_name == "Santander 3"
        assert result.demo is False
        assert [t.date for t in result.transactions] == ["2024-03-01", "2024-03-02"]
        assert "<BANKID>033</BANKID>" in result.ofx
        assert "<TRNTYPE>DEP</TRNTYPE>" in result.ofx
        assert "<TRNTYPE>FEE</TRNTYPE>" in result.ofx
        assert "<DTSTART>20240301</DTSTART>" in result.ofx
        assert "<DTEND>20240302</DTEND>" in result.ofx
        assert "<BALAMT>1140.00</BALAMT>" in result.ofx
        assert result.filename == build_download_filename("santander3", NOW)

    def test_summary_and_frame(self, converter, pdf_text):
        pdf_text(SANTANDER3_TEXT)
        result = converter.convert(b"%PDF-1.4", "santander3", now=NOW)

        assert result.summary() == {
            'count': 2,
            'credits': 150.0,
            'debits': 10.0,
            'net': 140.0,
            'start_date': "2024-03-01",
            'end_date': "2024-03-02",
            'final_balance': 1140.0,
        }
        df = result.to_frame()
        assert list(df['signed_value']) == [150.0, -10.0]
        assert list(df['balance']) == [1150.0, 1140.0]

    def test_format_mismatch(self, converter, pdf_text):
        pdf_text("Extrato Banco Qualquer\nsem movimentos")
        with pytest.raises(FormatMismatch) as exc:
            converter.convert(b"%PDF-1.4", "nubank")
        assert "Nubank" in exc.value.message

    def test_no_transactions(self, converter, pdf_text):
        pdf_text("Santander\n01/03/2024 Saldo do dia R$ 1.000,00")
        with pytest.raises(NoTransactionsFound):
            converter.convert(b"%PDF-1.4", "santander3")

    def test_unknown_bank_generates_demo(self, converter, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("demo conversion must not read the upload")
        monkeypatch.setattr("extrato_ofx.parsing.pipeline.extract_text", fail)

        result = converter.convert(b"not even a pdf", "banco_x", now=NOW)

        assert result.demo is True
        assert result.warnings
        assert len(result.transactions) == 60
        assert result.transactions[0].date == "2024-01-01"
        assert "<BANKID>756</BANKID>" in result.ofx

    def test_demo_is_reproducible(self, converter):
        first = converter.convert(b"", "banco_x", now=NOW)
        second = converter.convert(b"", "banco_x", now=NOW)
        assert first.ofx == second.ofx


class TestPdfText:

    def test_signature(self):
        assert looks_like_pdf(b"%PDF-1.7\n...") is True
        assert looks_like_pdf(b"PK\x03\x04") is False
        assert looks_like_pdf(b"") is False

    def test_rejects_non_pdf(self):
        with pytest.raises(TextExtractionError):
            extract_text(b"hello")
