"""
Unit tests for LayoutExtractor and LayoutRegistry

Tests cover:
- Format validation from descriptor markers
- Row parsing with D/C indicators and skip prefixes
- Daily / opening balances feeding reconciliation
- Period header detection
- Loading descriptors from JSON files
"""
import json

import pytest

from extrato_ofx.parsing.config.layout import ClassificationRuleDef, LayoutDescriptor
from extrato_ofx.parsing.config.registry import LayoutRegistry, get_default_registry
from extrato_ofx.parsing.exceptions import SectionNotFound
from extrato_ofx.parsing.extractors.generic import LayoutExtractor


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def test_layout():
    """Single-line rows: full date, name, amount with D/C suffix."""
    return LayoutDescriptor(
        name="Banco Teste - v1",
        bank_id="teste",
        version="v1",
        period_pattern=r"Per[ií]odo:\s*(?P<start>\d{2}/\d{2}/\d{4})\s*-\s*(?P<end>\d{2}/\d{2}/\d{4})",
        row_pattern=r"(?P<date>\d{2}/\d{2}/\d{4})\s+(?P<name>.+?)\s+(?P<amount>\d{1,3}(?:\.\d{3})*,\d{2})(?P<dc>[CD*])",
        date_format="dd/mm/yyyy",
        daily_balance_pattern=r"(?P<date>\d{2}/\d{2}/\d{4})\s+SALDO DO DIA\s+(?P<amount>[\d.,]+)(?P<dc>[DC])",
        opening_balance_pattern=r"SALDO ANTERIOR\s+(?P<amount>[\d.,]+)(?P<dc>[DC])",
        validation_markers=["BANCO TESTE"],
        skip_prefixes=["SALDO"],
        classification=[
            ClassificationRuleDef(ofx="XFER", contains=["PIX"]),
            ClassificationRuleDef(ofx="FEE", contains=["TARIFA"]),
        ],
    )


@pytest.fixture
def extractor(test_layout):
    return LayoutExtractor([test_layout])


STATEMENT = """BANCO TESTE
Período: 01/03/2024 - 31/03/2024
01/03/2024 PIX RECEBIDO JOAO 150,00C
02/03/2024 TARIFA MENSAL 10,00D"""


# =============================================================================
# TEST: validate_format
# =============================================================================

class TestValidateFormat:

    def test_positive(self, extractor):
        assert extractor.validate_format(STATEMENT) is True

    def test_negative(self, extractor):
        assert extractor.validate_format("Extrato de outro banco") is False

    def test_empty(self, extractor):
        assert extractor.validate_format("") is False

    def test_requires_descriptors(self):
        with pytest.raises(ValueError):
            LayoutExtractor([])


# =============================================================================
# TEST: extract
# =============================================================================

class TestExtract:

    def test_credit_and_debit_rows(self, extractor):
        txns = extractor.extract(STATEMENT)

        assert len(txns) == 2
        assert txns[0].date == "2024-03-01"
        assert txns[0].description == "PIX RECEBIDO JOAO"
        assert txns[0].value == 150.0
        assert txns[0].type == "credit"
        assert txns[1].date == "2024-03-02"
        assert txns[1].description == "TARIFA MENSAL"
        assert txns[1].type == "debit"
        assert [t.balance for t in txns] == [150.0, 140.0]

    def test_period_line_does_not_swallow_first_row(self, extractor, skip_reasons):
        txns = extractor.extract(STATEMENT)
        assert txns[0].description == "PIX RECEBIDO JOAO"
        assert "cross_line" in skip_reasons()

    def test_balances_follow_published_daily_balance(self, extractor, skip_reasons):
        text = STATEMENT.replace("BANCO TESTE\n", "BANCO TESTE\nSALDO ANTERIOR 1.000,00C\n") \
            + "\n02/03/2024 SALDO DO DIA 1.140,00C"
        txns = extractor.extract(text)

        assert len(txns) == 2
        assert [t.balance for t in txns] == [1150.0, 1140.0]
        assert "balance_marker" in skip_reasons()

    def test_blocked_indicator_and_invalid_date(self, extractor, skip_reasons):
        text = STATEMENT + "\n03/03/2024 CHEQUE BLOQUEADO 50,00*\n32/03/2024 LINHA INVALIDA 5,00D"
        txns = extractor.extract(text)

        assert len(txns) == 2
        reasons = skip_reasons()
        assert "blocked_indicator" in reasons
        assert "invalid_date" in reasons

    def test_duplicate_rows_are_dropped(self, extractor):
        text = STATEMENT + "\n02/03/2024 TARIFA MENSAL 10,00D"
        assert len(extractor.extract(text)) == 2

    def test_missing_period_raises(self, extractor):
        with pytest.raises(SectionNotFound):
            extractor.extract("BANCO TESTE\n01/03/2024 PIX 1,00C")

    def test_classification_from_descriptor(self, extractor):
        assert extractor.classify("TARIFA MENSAL") == "FEE"
        assert extractor.classify("PIX RECEBIDO") == "XFER"
        assert extractor.classify("COMPRA") == "OTHER"


# =============================================================================
# TEST: LayoutRegistry
# =============================================================================

class TestLayoutRegistry:

    def test_default_registry_loads_packaged_layouts(self):
        registry = get_default_registry()
        assert [l.version for l in registry.for_bank("sicoob")] == ["v4", "v3", "v2", "v1"]
        assert len(registry.for_bank("sicredi")) == 1

    def test_detect_by_period_header(self):
        registry = get_default_registry()
        layout = registry.detect("Período de 01/03/2024 até 31/03/2024", "sicoob")
        assert layout.version == "v1"
        assert registry.detect("sem período", "sicoob") is None

    def test_loads_directory_and_skips_broken_files(self, tmp_path):
        good = {
            "name": "Banco X",
            "bank_id": "x",
            "version": "v1",
            "period_pattern": r"(?P<start>\d{2}/\d{2}/\d{4}) a (?P<end>\d{2}/\d{2}/\d{4})",
            "row_pattern": r"(?P<date>\d{2}/\d{2}) (?P<name>.+?) (?P<amount>[\d.]+,\d{2})",
            "classification": [{"ofx": "FEE", "contains": ["TARIFA"]}],
        }
        (tmp_path / "x.json").write_text(json.dumps(good), encoding="utf-8")
        (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

        registry = LayoutRegistry(str(tmp_path))

        assert registry.list_layouts() == ["Banco X"]
        layout = registry.get_by_name("Banco X")
        assert layout.rules()[0].ofx_type == "FEE"

    def test_missing_directory(self, tmp_path):
        registry = LayoutRegistry(str(tmp_path / "missing"))
        assert registry.layouts == []
