"""Tabular store for the walmart transactions table.

- **loader**: flat source (CSV or DataFrame) -> typed, immutable Dataset
- **table**: TransactionStore with group_by / filter / aggregate primitives

Example:
    >>> from walmart_core.store import TransactionStore
    >>> store = TransactionStore.from_source("data/a_raw/walmart.csv")
    >>> len(store)
    10051
"""

from walmart_core.store.loader import Dataset, load
from walmart_core.store.schema import Transaction
from walmart_core.store.table import FilteredView, TransactionStore

__all__ = ["Dataset", "FilteredView", "Transaction", "TransactionStore", "load"]
