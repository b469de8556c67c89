"""
Sicredi statement extractors.
"""
import pytest

from extrato_ofx.parsing.banks.sicredi import Sicredi2Extractor, SicrediExtractor
from extrato_ofx.parsing.exceptions import SectionNotFound


SICREDI_TEXT = """Sicredi
Cooperativa: 0101 Conta: 12345-6
Extrato de conta corrente
Período: 01/03/2024 a 31/03/2024
Data Descrição Documento Valor (R$) Saldo (R$)
01/03/2024 SALDO ANTERIOR 1.000,00
01/03/2024 PIX RECEBIDO MARIA PIX_CRED 150,00 1.150,00
02/03/2024 TARIFA CESTA 123456 -10,00 1.140,00
Saldo em conta corrente 1.140,00
05/03/2024 AGENDAMENTO FUTURO 999999 -1,00 1.139,00"""

SICREDI2_TEXT = """Internet Banking Sicredi
Extrato de conta - período 01/03/2024 a 31/03/2024
Data Descrição Documento Valor (R$) Saldo (R$)
SALDO 1.000,00
01/03/2024 PIX RECEBIDO MARIA PIX_CRED 150,00 1.150,00
02/03/2024 PAGAMENTO BOLETO COB000123 -50,00 1.100,00
03/03/2024 SALDO DO DIA 1.100,00 1.100,00"""


class TestSicredi:

    def test_validate(self):
        assert SicrediExtractor().validate_format(SICREDI_TEXT) is True
        assert SicrediExtractor().validate_format("Sicredi sem período") is False

    def test_row_balances_are_kept(self):
        txns = SicrediExtractor().extract(SICREDI_TEXT)

        assert [(t.date, t.description, t.signed_value, t.balance) for t in txns] == [
            ("2024-03-01", "PIX RECEBIDO MARIA | DOC: PIX_CRED", 150.0, 1150.0),
            ("2024-03-02", "TARIFA CESTA | DOC: 123456", -10.0, 1140.0),
        ]
        assert txns[1].document == "123456"

    def test_anchor_is_required(self):
        with pytest.raises(SectionNotFound):
            SicrediExtractor().extract("Sicredi\nPeríodo: 01/03/2024 a 31/03/2024\n01/03/2024 X 1 1,00 1,00")

    def test_classification(self):
        assert SicrediExtractor().classify("TARIFA CESTA") == "FEE"


class TestSicredi2:

    def test_validate(self):
        assert Sicredi2Extractor().validate_format(SICREDI2_TEXT) is True
        assert Sicredi2Extractor().validate_format("Internet Banking Sicredi") is False

    def test_extract(self, skip_reasons):
        txns = Sicredi2Extractor().extract(SICREDI2_TEXT)

        assert [(t.date, t.description, t.signed_value, t.balance, t.document) for t in txns] == [
            ("2024-03-01", "PIX RECEBIDO MARIA", 150.0, 1150.0, "PIX_CRED"),
            ("2024-03-02", "PAGAMENTO BOLETO", -50.0, 1100.0, "COB000123"),
        ]
        assert "balance_marker" in skip_reasons()

    def test_classification(self):
        assert Sicredi2Extractor().classify("PIX RECEBIDO MARIA") == "XFER"
        assert Sicredi2Extractor().classify("PAGAMENTO BOLETO") == "PAYMENT"
