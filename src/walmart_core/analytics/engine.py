"""Public API for running computations against a TransactionStore.

This module:
- does NOT read or write any files,
- does NOT print (logging only),
- never mutates the store, so calls may run concurrently over one store.

Names resolve first against the question catalog (``profit_by_category``),
then against the primitive computations (``weighted-sum-group-order``).
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import pandas as pd

from walmart_core.analytics.catalog import CATALOG
from walmart_core.analytics.computations import COMPUTATIONS
from walmart_core.exceptions import ComputationError, ParameterError
from walmart_core.store.table import TransactionStore

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_FAILED = "failed"


@dataclass
class ComputationResult:
    """Outcome of one computation.

    Attributes:
        name: Name the computation was requested under.
        status: "ok" or "failed".
        rows: Output rows (ordered, named columns), or None when failed.
        error: Failure message, or None when ok.
    """

    name: str
    status: str
    rows: pd.DataFrame | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def records(self) -> list[dict[str, Any]]:
        """Output rows as a list of dicts (empty when failed)."""
        if self.rows is None:
            return []
        return self.rows.to_dict("records")


def available_names() -> list[str]:
    """Catalog question names followed by primitive computation names."""
    return [*CATALOG, *COMPUTATIONS]


def resolve(
    name: str,
    parameters: dict[str, Any] | None = None,
) -> tuple[Callable[..., pd.DataFrame], dict[str, Any]]:
    """Resolve a name to its computation function and effective parameters.

    Caller parameters override a catalog question's defaults.

    Raises:
        ParameterError: If the name is unknown or the parameters do not fit
            the computation's signature.

    """
    parameters = dict(parameters or {})
    if name in CATALOG:
        question = CATALOG[name]
        fn = COMPUTATIONS[question.computation]
        parameters = {**question.parameters, **parameters}
    elif name in COMPUTATIONS:
        fn = COMPUTATIONS[name]
    else:
        raise ParameterError(f"Unknown computation '{name}'. Available: {available_names()}")

    try:
        inspect.signature(fn).bind(None, **parameters)
    except TypeError as e:
        raise ParameterError(f"Invalid parameters for '{name}': {e}") from e
    return fn, parameters


def execute(
    store: TransactionStore,
    name: str,
    parameters: dict[str, Any] | None = None,
) -> pd.DataFrame:
    """Run a computation and return its output rows.

    Raises:
        ParameterError: Unknown name or invalid parameter.
        ComputationError: The computation cannot produce a result.

    """
    fn, effective = resolve(name, parameters)
    logger.debug("Running %s with %s", name, effective)
    return fn(store, **effective)


def run(
    store: TransactionStore,
    name: str,
    parameters: dict[str, Any] | None = None,
) -> ComputationResult:
    """Run a computation, returning failures as a typed result.

    ComputationError is captured in the result; ParameterError propagates.

    Examples:
        >>> result = run(store, "profit_by_category")
        >>> result.ok
        True
        >>> result.rows.columns.tolist()
        ['category', 'total_profit']

    """
    try:
        rows = execute(store, name, parameters)
    except ComputationError as e:
        logger.info("Computation %s failed: %s", name, e)
        return ComputationResult(name=name, status=STATUS_FAILED, error=str(e))
    logger.info("Computation %s produced %d row(s)", name, len(rows))
    return ComputationResult(name=name, status=STATUS_OK, rows=rows)


def run_catalog(
    store: TransactionStore,
    names: Iterable[str] | None = None,
) -> list[ComputationResult]:
    """Run every catalog question (or the given names) in order.

    A failing computation does not stop the batch; its status is recorded
    and the next one runs.

    Raises:
        ParameterError: If any name does not resolve with its default
            parameters. Checked before anything runs.
    """
    names = list(CATALOG) if names is None else list(names)
    for name in names:
        resolve(name)
    logger.info("Running %d computation(s) over %d transactions", len(names), len(store))

    results = []
    for name in names:
        result = run(store, name)
        if not result.ok:
            logger.error("  %s: FAILED (%s)", name, result.error)
        else:
            logger.info("  %s: ok", name)
        results.append(result)

    failed = sum(1 for r in results if not r.ok)
    logger.info("Catalog run finished: %d ok, %d failed", len(results) - failed, failed)
    return results
