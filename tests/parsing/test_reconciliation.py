"""
Unit tests for ordering, de-duplication and balance reconciliation.
"""
import pytest

from extrato_ofx.common.models import CREDIT, DEBIT
from extrato_ofx.parsing.reconciliation import (
    apply_running_balance,
    daily_net,
    dedupe_transactions,
    is_duplicate,
    reconcile_balances,
    sort_chronologically,
    unreconciled_dates,
)


class TestOrdering:

    def test_sort_is_stable_within_a_day(self, txn):
        rows = [
            txn("2024-03-02", "B", 1.0),
            txn("2024-03-01", "A1", 1.0),
            txn("2024-03-01", "A2", 1.0),
        ]
        assert [t.description for t in sort_chronologically(rows)] == ["A1", "A2", "B"]


class TestDedupe:

    def test_drops_repeated_rows(self, txn, skip_reasons):
        rows = [
            txn("2024-03-01", "PIX RECEBIDO", 10.0),
            txn("2024-03-01", "PIX RECEBIDO", 10.004),
            txn("2024-03-01", "PIX RECEBIDO", 20.0),
        ]
        kept = dedupe_transactions(rows)
        assert [t.value for t in kept] == [10.0, 20.0]
        assert skip_reasons() == ["duplicate"]

    def test_is_duplicate(self, txn):
        rows = [txn("2024-03-01", "TARIFA", 5.0, DEBIT)]
        assert is_duplicate(rows, "2024-03-01", "TARIFA", 5.0) is True
        assert is_duplicate(rows, "2024-03-02", "TARIFA", 5.0) is False


class TestBalances:

    def test_running_balance_from_opening(self, txn):
        rows = [txn("2024-03-01", "A", 50.0), txn("2024-03-02", "B", 30.0, DEBIT)]
        apply_running_balance(rows, 100.0)
        assert [t.balance for t in rows] == [150.0, 120.0]

    def test_daily_net(self, txn):
        rows = [
            txn("2024-03-01", "A", 100.0),
            txn("2024-03-01", "B", 20.0, DEBIT),
            txn("2024-03-02", "C", 10.0, DEBIT),
        ]
        net = daily_net(rows)
        assert net["2024-03-01"] == pytest.approx(80.0)
        assert net["2024-03-02"] == pytest.approx(-10.0)

    def test_days_end_on_published_balance(self, txn):
        rows = [
            txn("2024-03-02", "C", 10.0, DEBIT),
            txn("2024-03-01", "A", 100.0, CREDIT),
            txn("2024-03-01", "B", 20.0, DEBIT),
        ]
        result = reconcile_balances(rows, {"2024-03-01": 1080.0})

        assert [t.description for t in result] == ["A", "B", "C"]
        assert [t.balance for t in result] == [1100.0, 1080.0, 1070.0]
        assert unreconciled_dates(result, {"2024-03-01": 1080.0}) == []

    def test_without_published_balances_is_running_balance(self, txn):
        rows = [txn("2024-03-02", "B", 5.0, DEBIT), txn("2024-03-01", "A", 10.0)]
        result = reconcile_balances(rows, opening_balance=1.0)
        assert [t.balance for t in result] == [11.0, 6.0]

    def test_unreconciled_dates(self, txn):
        rows = [txn("2024-03-01", "A", 10.0, balance=10.0)]
        assert unreconciled_dates(rows, {"2024-03-01": 12.0}) == ["2024-03-01"]
