"""Shared pytest fixtures."""

import pytest

from tests.test_utils import make_store, make_transaction, sample_rows
from walmart_core.store import TransactionStore


@pytest.fixture
def sample_store() -> TransactionStore:
    """Store over the six-row sample described in tests.test_utils.sample_rows."""
    return make_store(*sample_rows())


@pytest.fixture
def three_row_store() -> TransactionStore:
    """Three rows: A/X (2 x 10 @ 0.1), A/Y (1 x 20 @ 0.2), B/X (5 x 5 @ 0.05)."""
    return make_store(
        make_transaction(invoice_id=1, branch="A", category="X", quantity=2, unit_price=10.0, profit_margin=0.1),
        make_transaction(invoice_id=2, branch="A", category="Y", quantity=1, unit_price=20.0, profit_margin=0.2),
        make_transaction(invoice_id=3, branch="B", category="X", quantity=5, unit_price=5.0, profit_margin=0.05),
    )
