"""
Unit tests for text normalization and section isolation.
"""
import pytest

from extrato_ofx.parsing.exceptions import SectionNotFound
from extrato_ofx.parsing.normalization import (
    contains_any,
    count_markers,
    fold,
    isolate_section,
    normalize_text,
)


# =============================================================================
# TEST: normalize_text
# =============================================================================

class TestNormalizeText:
    """Canonical spacing of raw PDF text."""

    def test_collapses_dates_and_currency(self):
        raw = "01 / 03 / 2024   PIX   R $ 1.234,56"
        assert normalize_text(raw) == "01/03/2024 PIX R$1.234,56"

    def test_is_idempotent(self):
        raw = "  Saldo  do dia\n 10 / 05   R  $ 3,00 D "
        once = normalize_text(raw)
        assert normalize_text(once) == once

    def test_keep_lines_preserves_newlines(self):
        raw = "a  b\n 01 / 02  x \n\n"
        assert normalize_text(raw, keep_lines=True) == "a b\n01/02 x"

    def test_colons(self):
        assert normalize_text("Saldo : 10,00", colons=True) == "Saldo:10,00"
        assert normalize_text("Saldo : 10,00") == "Saldo : 10,00"

    def test_signed_currency(self):
        assert normalize_text("- R $ 5,00", signed_currency=True) == "-R$5,00"

    def test_empty_text(self):
        assert normalize_text("") == ""
        assert normalize_text(None) == ""


# =============================================================================
# TEST: fold / markers
# =============================================================================

class TestFold:

    def test_strips_accents_and_uppercases(self):
        assert fold("Histórico de Movimentação") == "HISTORICO DE MOVIMENTACAO"

    def test_preserves_length(self):
        text = "Lançamentos à crédito"
        assert len(fold(text)) == len(text)

    def test_contains_any_ignores_case_and_accents(self):
        assert contains_any("Extrato de conta - Período", ["PERIODO"]) is True
        assert contains_any("Extrato de conta", ["NUBANK", "CORA"]) is False

    def test_count_markers(self):
        text = "AGÊNCIA 1234 CONTA CORRENTE lançamentos"
        assert count_markers(text, ["AGENCIA", "CONTA CORRENTE", "LANCAMENTOS", "PERIODO"]) == 3


# =============================================================================
# TEST: isolate_section
# =============================================================================

STATEMENT = "Cabeçalho\nHISTÓRICO DE MOVIMENTAÇÃO\nlinha 1\nRESUMO\nrodapé"


class TestIsolateSection:

    def test_exact_anchor(self):
        section = isolate_section(STATEMENT, "HISTÓRICO DE MOVIMENTAÇÃO", end_anchors=["RESUMO"])
        assert section.mode == "exact"
        assert section.text == "\nlinha 1\n"
        assert section.degraded is False

    def test_anchor_found_after_folding(self):
        section = isolate_section(STATEMENT, "historico de movimentacao")
        assert section.mode == "normalized"
        assert section.degraded is True
        assert "linha 1" in section.text
        assert "Cabeçalho" not in section.text

    def test_end_anchor_is_case_insensitive(self):
        section = isolate_section(STATEMENT, "HISTÓRICO DE MOVIMENTAÇÃO", end_anchors=["resumo"])
        assert "rodapé" not in section.text

    def test_missing_anchor_falls_back_to_full_text(self):
        section = isolate_section(STATEMENT, "LANÇAMENTOS FUTUROS")
        assert section.mode == "full"
        assert section.text == STATEMENT

    def test_missing_required_anchor_raises(self):
        with pytest.raises(SectionNotFound) as exc:
            isolate_section(STATEMENT, "LANÇAMENTOS FUTUROS", required=True, bank_id="sicoob")
        assert exc.value.bank_id == "sicoob"
