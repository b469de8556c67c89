"""
Balance Reconciliation

Per-row balances recovered from text position are unreliable; the daily
"SALDO DO DIA" figures are not. Transactions are re-chained so that every
date with a published closing balance ends exactly on that balance.
"""
from typing import Dict, List, Optional

import pandas as pd

from extrato_ofx.common.logging_config import get_logger
from extrato_ofx.common.models import Transaction

logger = get_logger(__name__)

BALANCE_EPSILON = 0.01


def sort_chronologically(transactions: List[Transaction]) -> List[Transaction]:
    """Oldest first; same-day rows keep their extracted order."""
    return sorted(transactions, key=lambda t: t.date)


def dedupe_transactions(transactions: List[Transaction], tolerance: float = 0.01) -> List[Transaction]:
    """
    Drop repeated (date, description, value) rows, values compared within
    tolerance. The first occurrence wins.
    """
    kept: List[Transaction] = []
    seen: Dict[tuple, List[float]] = {}

    for txn in transactions:
        key = (txn.date, txn.description)
        values = seen.setdefault(key, [])
        if any(abs(v - txn.value) <= tolerance for v in values):
            logger.debug("Row skipped", reason="duplicate", date=txn.date,
                         description=txn.description[:60], value=txn.value)
            continue
        values.append(txn.value)
        kept.append(txn)

    return kept


def is_duplicate(transactions: List[Transaction], date: str, description: str, value: float,
                 tolerance: float = 0.01) -> bool:
    return any(
        t.date == date and t.description == description and abs(t.value - value) <= tolerance
        for t in transactions
    )


def daily_net(transactions: List[Transaction]) -> pd.Series:
    """Signed sum of movements per date, indexed by ISO date."""
    if not transactions:
        return pd.Series(dtype=float)
    frame = pd.DataFrame({
        'date': [t.date for t in transactions],
        'signed': [t.signed_value for t in transactions],
    })
    return frame.groupby('date', sort=True)['signed'].sum()


def apply_running_balance(transactions: List[Transaction], opening_balance: float = 0.0) -> List[Transaction]:
    """Single running balance seeded at opening_balance, in list order."""
    running = opening_balance
    for txn in transactions:
        running += txn.signed_value
        txn.balance = round(running, 2)
    return transactions


def reconcile_balances(transactions: List[Transaction],
                       daily_balances: Optional[Dict[str, float]] = None,
                       opening_balance: float = 0.0) -> List[Transaction]:
    """
    Recompute balances against published end-of-day balances.

    For a date with a published balance B the day starts at B minus the
    day's net movement; other dates continue from the previous close
    (initially opening_balance). Without any published balance this is a
    plain running balance.

    Returns the transactions sorted oldest-first.
    """
    ordered = sort_chronologically(transactions)
    if not daily_balances:
        return apply_running_balance(ordered, opening_balance)

    net = daily_net(ordered)
    close = opening_balance
    by_date: Dict[str, List[Transaction]] = {}
    for txn in ordered:
        by_date.setdefault(txn.date, []).append(txn)

    for day in net.index:
        published = daily_balances.get(day)
        if published is not None:
            running = published - float(net[day])
        else:
            logger.debug("No published balance for date; carrying previous close", date=day)
            running = close

        for txn in by_date[day]:
            running += txn.signed_value
            txn.balance = round(running, 2)
        close = running

    return ordered


def unreconciled_dates(transactions: List[Transaction], daily_balances: Dict[str, float]) -> List[str]:
    """Dates whose last transaction does not end on the published balance."""
    last_balance: Dict[str, float] = {}
    for txn in transactions:
        last_balance[txn.date] = txn.balance
    return [
        day for day, bal in last_balance.items()
        if day in daily_balances and abs(bal - daily_balances[day]) > BALANCE_EPSILON
    ]
