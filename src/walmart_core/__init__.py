"""walmart-core - analytical computations over the walmart transactions table.

This package answers a fixed catalog of business questions (revenue by
payment method, busiest day per branch, most profitable categories, ...)
over a single denormalized retail transactions dataset held in memory.

Module Structure:
    walmart_core.store: Dataset loader and in-memory TransactionStore
    walmart_core.analytics: Primitive computations, question catalog, engine
    walmart_core.export: Console and CSV exporters
    walmart_core.timeutils: Date/time parsing and hour bucket schemes
    walmart_core.config: DataPaths configuration

Quick Start:
    >>> from walmart_core import TransactionStore, run, run_catalog
    >>>
    >>> store = TransactionStore.from_source("data/a_raw/walmart.csv")
    >>>
    >>> # One question
    >>> result = run(store, "profit_by_category")
    >>> print(result.rows.head())
    >>>
    >>> # A primitive computation with explicit parameters
    >>> result = run(store, "top-n-by-metric", {"by": "city", "field": "quantity", "top_n": 3})
    >>>
    >>> # The whole catalog; failures are reported per computation
    >>> results = run_catalog(store)
"""

__version__ = "0.1.0"

from walmart_core.analytics import ComputationResult, execute, run, run_catalog
from walmart_core.config import DataPaths
from walmart_core.exceptions import (
    ComputationError,
    ConfigError,
    DataFormatError,
    ParameterError,
    WalmartCoreError,
)
from walmart_core.store import Transaction, TransactionStore, load

__all__ = [
    "ComputationError",
    "ComputationResult",
    "ConfigError",
    "DataFormatError",
    "DataPaths",
    "ParameterError",
    "Transaction",
    "TransactionStore",
    "WalmartCoreError",
    "__version__",
    "execute",
    "load",
    "run",
    "run_catalog",
]
