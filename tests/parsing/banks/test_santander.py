"""
Santander statement extractors.
"""
from extrato_ofx.parsing.banks.santander import (
    Santander2Extractor,
    Santander3Extractor,
    SantanderExtractor,
)


SANTANDER_TEXT = """Santander
EXTRATO DE CONTA CORRENTE
março/2024
01/03
PIX RECEBIDO
MARIA SILVA
150,00
02/03 TARIFA MENSALIDADE 10,00-
03/03
PAGAMENTO BOLETO
123456
50,00-"""

SANTANDER_NEWEST_FIRST_TEXT = """Santander
março/2024
03/03 PAGAMENTO BOLETO 50,00-
01/03 PIX RECEBIDO MARIA 150,00"""

SANTANDER2_TEXT = """Santander
Segunda, 04 de março de 2024
PIX RECEBIDO MARIA CREDITO R$150,00
TARIFA MENSAL DEBITO R$10,00
Terça, 05 de março de 2024
PAGAMENTO BOLETO DEBITO R$50,00
OUVIDORIA SANTANDER CREDITO R$1,00"""

SANTANDER3_TEXT = """Santander
01/03/2024 PIX RECEBIDO MARIA R$ 150,00
01/03/2024 Saldo do dia R$ 1.150,00
02/03/2024 TARIFA MENSAL - R$ 10,00
02/03/2024 Saldo do dia R$ 1.140,00"""


class TestSantander:

    def test_validate(self):
        assert SantanderExtractor().validate_format(SANTANDER_TEXT) is True
        assert SantanderExtractor().validate_format("Santander sem datas") is False

    def test_description_lines_wait_for_amount(self):
        txns = SantanderExtractor().extract(SANTANDER_TEXT)

        assert [(t.date, t.description, t.type, t.value) for t in txns] == [
            ("2024-03-01", "PIX RECEBIDO MARIA SILVA", "credit", 150.0),
            ("2024-03-02", "TARIFA MENSALIDADE", "debit", 10.0),
            ("2024-03-03", "PAGAMENTO BOLETO 123456", "debit", 50.0),
        ]
        assert [t.balance for t in txns] == [150.0, 140.0, 90.0]

    def test_newest_first_statement_balances_by_date(self):
        txns = SantanderExtractor().extract(SANTANDER_NEWEST_FIRST_TEXT)

        assert [(t.date, t.balance) for t in txns] == [("2024-03-01", 150.0), ("2024-03-03", 100.0)]

    def test_header_lines_are_skipped(self, skip_reasons):
        SantanderExtractor().extract(SANTANDER_TEXT)
        assert skip_reasons().count("header_row") == 2

    def test_classification(self):
        extractor = SantanderExtractor()
        assert extractor.classify("PIX RECEBIDO MARIA SILVA") == "DEP"
        assert extractor.classify("TARIFA MENSALIDADE") == "FEE"


class TestSantander2:

    def test_validate(self):
        assert Santander2Extractor().validate_format(SANTANDER2_TEXT) is True
        assert Santander2Extractor().validate_format(SANTANDER_TEXT) is False

    def test_rows_take_the_day_header_date(self, skip_reasons):
        txns = Santander2Extractor().extract(SANTANDER2_TEXT)

        assert [(t.date, t.description, t.signed_value) for t in txns] == [
            ("2024-03-04", "PIX RECEBIDO MARIA", 150.0),
            ("2024-03-04", "TARIFA MENSAL", -10.0),
            ("2024-03-05", "PAGAMENTO BOLETO", -50.0),
        ]
        assert [t.balance for t in txns] == [150.0, 140.0, 90.0]
        assert skip_reasons() == ["footer"]


class TestSantander3:

    def test_validate(self):
        assert Santander3Extractor().validate_format(SANTANDER3_TEXT) is True

    def test_daily_balances_drive_row_balances(self, skip_reasons):
        txns = Santander3Extractor().extract(SANTANDER3_TEXT)

        assert [(t.date, t.description, t.signed_value) for t in txns] == [
            ("2024-03-01", "PIX RECEBIDO MARIA", 150.0),
            ("2024-03-02", "TARIFA MENSAL", -10.0),
        ]
        assert [t.balance for t in txns] == [1150.0, 1140.0]
        assert skip_reasons() == ["balance_marker", "balance_marker"]

    def test_classification(self):
        assert Santander3Extractor().classify("TARIFA MENSAL") == "FEE"
