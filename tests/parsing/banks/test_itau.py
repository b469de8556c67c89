"""
Itaú statement extractors.
"""
from extrato_ofx.parsing.banks.itau import Itau2Extractor, ItauExtractor


ITAU_TEXT = """Itaú Unibanco
Agência 1234 Conta 56789-0
Lançamentos do período: 01/03/2024 até 31/03/2024
SALDO ANTERIOR 1.000,00
01/03/2024 PIX RECEBIDO MARIA 123.456.789-01 150,00
02/03/2024 PIX ENVIADO JOSE 12.345.678/0001-90 -40,00
Lançamentos futuros
05/03/2024 AGENDADO FULANO 123.456.789-01 99,00"""

ITAU_OUT_OF_ORDER_TEXT = """Itaú Unibanco
Lançamentos do período: 01/03/2024 até 31/03/2024
SALDO ANTERIOR 100,00
05/03/2024 PIX RECEBIDO MARIA 123.456.789-01 100,00
02/03/2024 TARIFA PACOTE -10,00"""

ITAU2_TEXT = """Itaú
extrato de lançamentos
março 2024
01/mar SALDO ANTERIOR 1.000,00
01/mar PIX RECEBIDO MARIA 150,00
02/mar TARIFA PACOTE -10,00
02/mar SALDO DO DIA 1.140,00"""

ITAU2_MONTH_HEADER_TEXT = """Itaú lançamentos
abril 2025 PIX TRANSF SOUZA 25.000,00 01/abr
02/abr TARIFA -5,00"""


class TestItau:

    def test_validate(self):
        assert ItauExtractor().validate_format(ITAU_TEXT) is True
        assert ItauExtractor().validate_format("Nubank") is False

    def test_rows_with_cpf_cnpj(self):
        txns = ItauExtractor().extract(ITAU_TEXT)

        assert [(t.date, t.description, t.type, t.value) for t in txns] == [
            ("2024-03-01", "PIX RECEBIDO MARIA (123.456.789-01)", "credit", 150.0),
            ("2024-03-02", "PIX ENVIADO JOSE (12.345.678/0001-90)", "debit", 40.0),
        ]
        assert [t.balance for t in txns] == [1150.0, 1110.0]

    def test_segment_pass_does_not_duplicate_rows(self, skip_reasons):
        txns = ItauExtractor().extract(ITAU_TEXT)

        assert len(txns) == 2
        assert skip_reasons().count("duplicate") == 2

    def test_future_entries_are_ignored(self):
        txns = ItauExtractor().extract(ITAU_TEXT)
        assert all("AGENDADO" not in t.description for t in txns)

    def test_running_balance_follows_dates(self):
        # segment-pass rows are appended after the CPF/CNPJ rows
        txns = ItauExtractor().extract(ITAU_OUT_OF_ORDER_TEXT)

        assert [(t.date, t.signed_value, t.balance) for t in txns] == [
            ("2024-03-02", -10.0, 90.0),
            ("2024-03-05", 100.0, 190.0),
        ]

    def test_classify_is_left_to_direction(self):
        assert ItauExtractor().classify("PIX RECEBIDO") is None


class TestItau2:

    def test_validate(self):
        assert Itau2Extractor().validate_format(ITAU2_TEXT) is True
        assert Itau2Extractor().validate_format("Itaú sem datas") is False

    def test_extract_with_daily_balance(self, skip_reasons):
        txns = Itau2Extractor().extract(ITAU2_TEXT)

        assert [(t.date, t.description, t.type, t.value) for t in txns] == [
            ("2024-03-01", "PIX RECEBIDO MARIA", "credit", 150.0),
            ("2024-03-02", "TARIFA PACOTE", "debit", 10.0),
        ]
        assert [t.balance for t in txns] == [1150.0, 1140.0]
        assert skip_reasons().count("balance_marker") == 2

    def test_row_printed_after_month_header(self):
        txns = Itau2Extractor().extract(ITAU2_MONTH_HEADER_TEXT)

        assert [(t.date, t.description, t.signed_value) for t in txns] == [
            ("2025-04-01", "PIX TRANSF SOUZA", 25000.0),
            ("2025-04-02", "TARIFA", -5.0),
        ]
