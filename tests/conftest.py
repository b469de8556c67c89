import logging
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from extrato_ofx.common.models import Transaction, CREDIT, DEBIT


def make_txn(date, description, value, direction=CREDIT, balance=0.0, document=None):
    return Transaction(date=date, description=description, value=value, type=direction,
                       balance=balance, document=document)


@pytest.fixture
def txn():
    """Factory for Transaction objects."""
    return make_txn


@pytest.fixture
def debug_log(caplog):
    """caplog capturing DEBUG row events."""
    caplog.set_level(logging.DEBUG)
    return caplog


@pytest.fixture
def skip_reasons(debug_log):
    """Reasons of every 'Row skipped' event emitted so far."""
    def _reasons(message="Row skipped"):
        return [
            r.extra_fields["reason"] for r in debug_log.records
            if r.getMessage() == message and "reason" in getattr(r, "extra_fields", {})
        ]
    return _reasons
