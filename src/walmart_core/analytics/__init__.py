"""Aggregation engine for the walmart transactions table.

- **computations**: the primitive computations (group-count-sum,
  group-max-by-group, year-over-year-ratio, ...), keyed by name
- **catalog**: business questions bound to a computation and its parameters
- **engine**: ``run`` / ``execute`` / ``run_catalog``

Example:
    >>> from walmart_core.analytics import run, run_catalog
    >>> result = run(store, "profit_by_category")
    >>> results = run_catalog(store)
"""

from walmart_core.analytics.catalog import CATALOG, Question, list_questions
from walmart_core.analytics.computations import COMPUTATIONS
from walmart_core.analytics.engine import (
    ComputationResult,
    available_names,
    execute,
    run,
    run_catalog,
)

__all__ = [
    "CATALOG",
    "COMPUTATIONS",
    "ComputationResult",
    "Question",
    "available_names",
    "execute",
    "list_questions",
    "run",
    "run_catalog",
]
