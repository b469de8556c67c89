"""
Bradesco and Safra statement extractors.
"""
import pytest

from extrato_ofx.parsing.banks.bradesco import BradescoExtractor
from extrato_ofx.parsing.banks.safra import Safra2Extractor, SafraExtractor
from extrato_ofx.parsing.exceptions import SectionNotFound


BRADESCO_TEXT = """Bradesco
Ag: 1234 | CC: 56789-0
Entre 01/03/2024 e 31/03/2024
Data Lançamento Dcto. Crédito (R$) Débito (R$) Saldo (R$)
29/02/2024 SALDO ANTERIOR 1.000,00
01/03/2024 PIX RECEBIDO MARIA 1234567 150,00 1.150,00
TARIFA BANCARIA 7654321 -10,00 1.140,00
Os dados acima têm como base as informações disponíveis"""

SAFRA_TEXT = """BANCO SAFRA
Extrato de conta
Período de 01/03/2024 a 31/03/2024
LANÇAMENTOS
Data Lançamento Valor (R$)
01/03 PIX RECEBIDO MARIA 150,00
02/03 TARIFA MENSAL -10,00
03/03 SALDO TOTAL 140,00"""

SAFRA2_TEXT = """BANCO SAFRA S.A.
Período de 01/03/2024 a 31/03/2024
LANÇAMENTOS REALIZADOS
Data Descrição Valor
01/03 PIX RECEBIDO MARIA R$ 150,00
02/03 TARIFA MENSAL -R$ 10,00
03/03 SALDO CONTA R$ 140,00"""


# =============================================================================
# TEST: Bradesco
# =============================================================================

class TestBradesco:

    def test_validate(self):
        assert BradescoExtractor().validate_format(BRADESCO_TEXT) is True
        assert BradescoExtractor().validate_format("Extrato Santander") is False

    def test_dates_carry_forward(self):
        txns = BradescoExtractor().extract(BRADESCO_TEXT)

        assert [(t.date, t.description, t.type, t.value, t.balance) for t in txns] == [
            ("2024-03-01", "PIX RECEBIDO MARIA", "credit", 150.0, 1150.0),
            ("2024-03-01", "TARIFA BANCARIA", "debit", 10.0, 1140.0),
        ]
        assert [t.document for t in txns] == ["1234567", "7654321"]

    def test_balance_rows_skipped(self, skip_reasons):
        BradescoExtractor().extract(BRADESCO_TEXT)
        reasons = skip_reasons()
        assert "balance_marker" in reasons
        assert "header_row" in reasons


# =============================================================================
# TEST: Safra
# =============================================================================

class TestSafra:

    def test_validate(self):
        assert SafraExtractor().validate_format(SAFRA_TEXT) is True
        assert SafraExtractor().validate_format("BANCO SAFRA") is False

    def test_extract(self, skip_reasons):
        txns = SafraExtractor().extract(SAFRA_TEXT)

        assert [(t.date, t.description, t.signed_value) for t in txns] == [
            ("2024-03-01", "PIX RECEBIDO MARIA", 150.0),
            ("2024-03-02", "TARIFA MENSAL", -10.0),
        ]
        assert [t.balance for t in txns] == [150.0, 140.0]
        assert "balance_marker" in skip_reasons()

    def test_missing_section(self):
        with pytest.raises(SectionNotFound):
            SafraExtractor().extract("BANCO SAFRA Período de 01/03/2024 a 31/03/2024")

    def test_classification(self):
        assert SafraExtractor().classify("PIX RECEBIDO MARIA") == "DEP"
        assert SafraExtractor().classify("PIX ENVIADO JOSE") == "XFER"


class TestSafra2:

    def test_extract(self, skip_reasons):
        txns = Safra2Extractor().extract(SAFRA2_TEXT)

        assert [(t.date, t.description, t.signed_value) for t in txns] == [
            ("2024-03-01", "PIX RECEBIDO MARIA", 150.0),
            ("2024-03-02", "TARIFA MENSAL", -10.0),
        ]
        assert "footer" in skip_reasons()

    def test_missing_period(self):
        with pytest.raises(SectionNotFound):
            Safra2Extractor().extract("BANCO SAFRA LANÇAMENTOS 01/03 PIX R$ 1,00")
