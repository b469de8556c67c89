"""
Banco do Brasil statement extractors.
"""
import pytest

from extrato_ofx.parsing.banks.bb import BB2Extractor, BBExtractor
from extrato_ofx.parsing.exceptions import SectionNotFound


BB_TEXT = """Banco do Brasil
Agência 1234-5 Conta corrente 12345-6
Período do extrato: 03/2024
Lançamentos
29/02/2024 0000 000 Saldo Anterior 1.000,00 C
01/03/2024 1234 99020 Pix - Recebido 123456 150,00 C
02/03/2024 1234 13105 Tarifa Pacote 10,00 D 1.140,00 C"""

BB2_TEXT = """EXTRATO DE CONTA CORRENTE
Agência: 1234-5 Conta corrente: 12345-6
Lançamentos
Dt. balancete Dt. movimento Ag. origem Lote Histórico Documento Valor R$
29/02/2024 0000 000 Saldo Anterior 1.000,00 C
01/03/2024 1234 99020 Pix - Recebido 150,00 C
02/03/2024 1234 13105 Tarifa Pacote 10,00 D
S A L D O 1.140,00 C"""

BB2_TABLE_TEXT = """| 01/03/2024 | 01/03/2024 | 1234 | 99020 | Pix - Recebido | 123.456 | 150,00 | C |
| 02/03/2024 | 02/03/2024 | 1234 | 13105 | Cheque bloqueado | | 80,00 | * |"""

BB2_WRAPPED_TEXT = """01/03/2024 1234 99020 Pix - Recebido 12.345
150,00 C"""


class TestBB:

    def test_validate(self):
        assert BBExtractor().validate_format(BB_TEXT) is True
        assert BBExtractor().validate_format("Banco do Brasil") is False

    def test_extract(self, skip_reasons):
        txns = BBExtractor().extract(BB_TEXT)

        assert [(t.date, t.description, t.type, t.value) for t in txns] == [
            ("2024-03-01", "Pix - Recebido - DOC 123456 - AG 1234", "credit", 150.0),
            ("2024-03-02", "Tarifa Pacote - AG 1234", "debit", 10.0),
        ]
        assert txns[0].document == "123456"
        assert txns[1].document is None
        assert skip_reasons() == ["balance_marker"]

    def test_balance_from_opening_then_row(self):
        txns = BBExtractor().extract(BB_TEXT)
        assert [t.balance for t in txns] == [1150.0, 1140.0]

    def test_period_is_required(self):
        with pytest.raises(SectionNotFound):
            BBExtractor().extract(BB_TEXT.replace("Período do extrato: 03/2024", ""))


class TestBB2:

    def test_validate(self):
        assert BB2Extractor().validate_format(BB2_TEXT) is True
        assert BB2Extractor().validate_format(BB_TEXT) is False

    def test_line_rows(self, skip_reasons):
        txns = BB2Extractor().extract(BB2_TEXT)

        assert [(t.date, t.description, t.signed_value, t.balance) for t in txns] == [
            ("2024-03-01", "Pix - Recebido", 150.0, 1150.0),
            ("2024-03-02", "Tarifa Pacote", -10.0, 1140.0),
        ]
        reasons = skip_reasons()
        assert "header_row" in reasons
        assert reasons.count("balance_marker") == 2

    def test_pipe_table_rows(self, skip_reasons):
        txns = BB2Extractor().extract(BB2_TABLE_TEXT)

        assert len(txns) == 1
        assert txns[0].description == "Pix - Recebido - DOC 123.456"
        assert txns[0].document == "123.456"
        assert "blocked_indicator" in skip_reasons()

    def test_whole_text_fallback(self):
        txns = BB2Extractor().extract(BB2_WRAPPED_TEXT)

        assert len(txns) == 1
        assert txns[0].description == "Pix - Recebido - DOC 12.345"
        assert txns[0].value == 150.0
