"""Primitive computations of the aggregation engine.

Each computation is a pure function ``(store, **parameters) -> DataFrame``.
It reads the store's frame, never mutates it, and returns a new DataFrame
with named columns and a 0..n-1 index.

Ordering rules shared by every computation:

- Groups come out in order of first occurrence unless a sort is requested.
- All sorts are stable (mergesort), so ties keep first-occurrence order and
  two runs over an unchanged store give identical output.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Union

import numpy as np
import pandas as pd

from walmart_core.analytics.config import (
    CURRENT_YEAR,
    DEFAULT_TOP_N,
    METRIC_AGGREGATIONS,
    PRIOR_YEAR,
)
from walmart_core.exceptions import ComputationError, ParameterError
from walmart_core.store.schema import NUMERIC_FIELDS
from walmart_core.store.table import TransactionStore
from walmart_core.timeutils import get_scheme

logger = logging.getLogger(__name__)

Keys = Union[str, list[str], tuple[str, ...]]

PROFIT_INPUTS = ["unit_price", "quantity", "profit_margin"]


# ============================================================================
# Parameter helpers
# ============================================================================


def _as_keys(by: Keys | None) -> list[str]:
    if by is None:
        return []
    keys = [by] if isinstance(by, str) else list(by)
    duplicates = sorted({k for k in keys if keys.count(k) > 1})
    if duplicates:
        raise ParameterError(f"Grouping field(s) {duplicates} repeated in {keys}")
    return keys


def _check_top_n(top_n: object) -> int:
    if isinstance(top_n, bool) or not isinstance(top_n, (int, np.integer)):
        raise ParameterError(f"top_n must be an integer, got {top_n!r}")
    if top_n < 0:
        raise ParameterError(f"top_n must be >= 0, got {top_n}")
    return int(top_n)


def _check_agg(agg: str) -> str:
    if agg not in METRIC_AGGREGATIONS:
        raise ParameterError(
            f"Unknown aggregation '{agg}'. Must be one of {sorted(METRIC_AGGREGATIONS)}."
        )
    return agg


def _check_numeric(field: str, agg: str = "sum") -> None:
    if agg != "count" and field not in NUMERIC_FIELDS:
        raise ParameterError(f"Field '{field}' is not numeric and cannot be aggregated with '{agg}'")


def metric_column(field: str, agg: str) -> str:
    """Name of the output column for ``agg`` over ``field``.

    Examples:
        >>> metric_column("rating", "mean")
        'avg_rating'
        >>> metric_column("invoice_id", "count")
        'count'

    """
    if agg == "count":
        return "count"
    return f"{METRIC_AGGREGATIONS[agg]}_{field}"


def _frame(store: TransactionStore, fields: list[str]) -> pd.DataFrame:
    """Return the store frame after checking that ``fields`` exist and are non-null."""
    store.check_fields(fields)
    df = store.frame
    for field in fields:
        nulls = int(df[field].isna().sum())
        if nulls:
            raise ComputationError(f"Field '{field}' has {nulls} null value(s)")
    return df


def _sort(df: pd.DataFrame, column: str, ascending: bool = False) -> pd.DataFrame:
    return df.sort_values(column, ascending=ascending, kind="mergesort").reset_index(drop=True)


def _metric_per_group(
    store: TransactionStore,
    keys: list[str],
    field: str,
    agg: str,
) -> tuple[pd.DataFrame, str]:
    _check_agg(agg)
    _check_numeric(field, agg)
    column = metric_column(field, agg)
    df = _frame(store, [*keys, field])
    return store.aggregate(keys, frame=df, **{column: (field, agg)}), column


# ============================================================================
# Computations
# ============================================================================


def group_count_sum(
    store: TransactionStore,
    by: Keys,
    field: str = "quantity",
    sort_by: str | None = None,
) -> pd.DataFrame:
    """Count rows and sum ``field`` per group.

    Args:
        store: Transactions store.
        by: Grouping field(s).
        field: Numeric field to sum.
        sort_by: None keeps first-occurrence order; "count" or "total" sorts
            descending by that column.

    Returns:
        Columns: ``by...``, ``count``, ``total_<field>``.

    """
    keys = _as_keys(by)
    _check_numeric(field)
    if sort_by not in (None, "count", "total"):
        raise ParameterError(f"sort_by must be None, 'count' or 'total', got {sort_by!r}")

    df = _frame(store, [*keys, field])
    total = metric_column(field, "sum")
    result = store.aggregate(keys, frame=df, count=(field, "count"), **{total: (field, "sum")})
    if sort_by == "count":
        result = _sort(result, "count")
    elif sort_by == "total":
        result = _sort(result, total)
    return result


def group_max_by_group(
    store: TransactionStore,
    outer: Keys,
    inner: Keys,
    field: str = "invoice_id",
    agg: str = "count",
) -> pd.DataFrame:
    """For each outer key, keep the inner key(s) with the maximum metric.

    The metric is computed per (outer, inner) pair, the maximum is computed
    per outer key, and every pair whose metric equals that maximum is kept.
    Ties therefore produce several rows for the same outer key.

    Returns:
        Columns: ``outer...``, ``inner...``, metric column. Ordered by outer
        key first occurrence, then inner key first occurrence.

    """
    outer_keys = _as_keys(outer)
    inner_keys = _as_keys(inner)
    if not outer_keys or not inner_keys:
        raise ParameterError("group-max-by-group needs both outer and inner keys")
    overlap = [k for k in inner_keys if k in outer_keys]
    if overlap:
        raise ParameterError(f"Inner keys {overlap} are already outer keys")

    metrics, column = _metric_per_group(store, [*outer_keys, *inner_keys], field, agg)
    if metrics.empty:
        return metrics

    grouped = metrics.groupby(outer_keys, sort=False)
    best = grouped[column].transform("max")
    metrics = metrics.assign(_outer_rank=grouped.ngroup())
    winners = metrics[metrics[column] == best]
    winners = winners.sort_values("_outer_rank", kind="mergesort").drop(columns="_outer_rank")
    logger.debug("group-max-by-group kept %d of %d pairs", len(winners), len(metrics))
    return winners.reset_index(drop=True)


def group_min_max_avg(store: TransactionStore, by: Keys, field: str = "rating") -> pd.DataFrame:
    """Minimum, maximum and average of ``field`` per group."""
    keys = _as_keys(by)
    _check_numeric(field)
    df = _frame(store, [*keys, field])
    return store.aggregate(
        keys,
        frame=df,
        **{
            metric_column(field, "min"): (field, "min"),
            metric_column(field, "max"): (field, "max"),
            metric_column(field, "mean"): (field, "mean"),
        },
    )


def weighted_sum_group_order(
    store: TransactionStore,
    by: Keys,
    top_n: int | None = None,
) -> pd.DataFrame:
    """Total profit (unit_price * quantity * profit_margin) per group, descending.

    Args:
        store: Transactions store.
        by: Grouping field(s).
        top_n: Optional truncation after sorting.

    """
    keys = _as_keys(by)
    _frame(store, [*keys, *PROFIT_INPUTS])
    result, _ = _metric_per_group(store, keys, "profit", "sum")
    result = _sort(result, "total_profit")
    if top_n is not None:
        result = result.head(_check_top_n(top_n)).reset_index(drop=True)
    return result


def time_bucket_classify(
    store: TransactionStore,
    scheme: str = "shift",
    by: Keys | None = None,
) -> pd.DataFrame:
    """Classify each transaction's hour into a bucket and count per bucket.

    Args:
        store: Transactions store.
        scheme: Bucket scheme name ("shift" or "day_part").
        by: Optional extra grouping field(s), e.g. "branch".

    Returns:
        Columns: ``by...``, ``<scheme>``, ``count``. Ordered by the extra
        keys ascending, then count descending.

    """
    bucket_scheme = get_scheme(scheme)
    keys = _as_keys(by)
    df = _frame(store, [*keys, "hour"])
    if df.empty:
        return pd.DataFrame(columns=[*keys, bucket_scheme.name, "count"])

    df[bucket_scheme.name] = [bucket_scheme.classify(int(h)) for h in df["hour"]]
    # Counts rows, so a null in any other field does not drop a transaction
    result = (
        df.groupby([*keys, bucket_scheme.name], sort=False)
        .size()
        .reset_index(name="count")
    )
    result = _sort(result, "count")
    if keys:
        rank = result.groupby(keys, sort=True).ngroup()
        result = (
            result.assign(_key_rank=rank)
            .sort_values("_key_rank", kind="mergesort")
            .drop(columns="_key_rank")
            .reset_index(drop=True)
        )
    return result


def year_over_year_ratio(
    store: TransactionStore,
    by: Keys = "branch",
    field: str = "revenue",
    prior_year: int = PRIOR_YEAR,
    current_year: int = CURRENT_YEAR,
    top_n: int = DEFAULT_TOP_N,
) -> pd.DataFrame:
    """Decrease ratio of ``field`` between two years, per group.

    ``decrease_ratio = (prior - current) / prior``, sorted descending and
    truncated to ``top_n``. Groups missing either year are excluded rather
    than treated as zero.

    Raises:
        ComputationError: If either year has no rows, no group has both
            years, or a group's prior-year sum is zero.

    """
    keys = _as_keys(by)
    _check_numeric(field)
    top_n = _check_top_n(top_n)
    if prior_year == current_year:
        raise ParameterError("prior_year and current_year must differ")

    df = _frame(store, [*keys, field, "year"])
    prior_col = f"prior_{field}"
    current_col = f"current_{field}"

    sums = {}
    for year, column in ((prior_year, prior_col), (current_year, current_col)):
        year_rows = df[df["year"] == year]
        if year_rows.empty:
            raise ComputationError(f"No transactions found for year {year}")
        sums[column] = store.aggregate(keys, frame=year_rows, **{column: (field, "sum")})

    merged = sums[prior_col].merge(sums[current_col], on=keys, how="inner")
    excluded = len(sums[prior_col]) + len(sums[current_col]) - 2 * len(merged)
    if excluded:
        logger.warning(
            "Excluded %d group(s) without data for both %d and %d", excluded, prior_year, current_year
        )
    if merged.empty:
        raise ComputationError(
            f"No group has transactions in both {prior_year} and {current_year}"
        )

    zero_prior = merged[merged[prior_col] == 0]
    if not zero_prior.empty:
        groups = zero_prior[keys].to_dict("records")
        raise ComputationError(f"Prior-year ({prior_year}) {field} is zero for {groups}")

    merged["decrease_ratio"] = (merged[prior_col] - merged[current_col]) / merged[prior_col]
    return _sort(merged, "decrease_ratio").head(top_n).reset_index(drop=True)


def top_n_by_metric(
    store: TransactionStore,
    by: Keys,
    field: str = "revenue",
    agg: str = "sum",
    top_n: int = DEFAULT_TOP_N,
) -> pd.DataFrame:
    """Groups sorted descending by a metric, truncated to ``top_n``.

    ``top_n`` >= number of groups returns every group; 0 returns an empty
    frame.
    """
    top_n = _check_top_n(top_n)
    result, column = _metric_per_group(store, _as_keys(by), field, agg)
    return _sort(result, column).head(top_n).reset_index(drop=True)


def single_winner(
    store: TransactionStore,
    by: Keys,
    field: str = "revenue",
    agg: str = "sum",
    ascending: bool = False,
) -> pd.DataFrame:
    """Exactly one group: the best (or worst, with ``ascending``) by a metric.

    Raises:
        ParameterError: If ``ascending`` is not a bool.
        ComputationError: If there are no groups to pick from.

    """
    if not isinstance(ascending, bool):
        raise ParameterError(f"ascending must be true or false, got {ascending!r}")
    result, column = _metric_per_group(store, _as_keys(by), field, agg)
    if result.empty:
        raise ComputationError("No groups available to select a single winner")
    return _sort(result, column, ascending=ascending).head(1).reset_index(drop=True)


def two_level_aggregate(
    store: TransactionStore,
    inner: Keys = ("invoice_id", "branch"),
    outer: Keys = "branch",
    field: str = "quantity",
    inner_agg: str = "sum",
    outer_agg: str = "mean",
    output: str | None = None,
) -> pd.DataFrame:
    """Aggregate at a fine grain, then aggregate the intermediate at a coarse grain.

    With the defaults this is the average basket size per branch: total
    quantity per invoice, averaged per branch.

    Args:
        store: Transactions store.
        inner: Fine-grain keys; must include every outer key.
        outer: Coarse-grain keys.
        field: Numeric field aggregated at the inner grain.
        inner_agg: Aggregation at the inner grain.
        outer_agg: Aggregation of the intermediate at the outer grain.
        output: Output column name; defaults to e.g. ``avg_total_quantity``.

    Returns:
        Columns: ``outer...``, output column. Sorted descending.

    """
    inner_keys = _as_keys(inner)
    outer_keys = _as_keys(outer)
    missing = [k for k in outer_keys if k not in inner_keys]
    if missing:
        raise ParameterError(f"Outer keys {missing} must also be inner keys")
    _check_agg(outer_agg)
    if outer_agg == "count":
        raise ParameterError("outer_agg 'count' is not supported; use group-count-sum")

    intermediate, column = _metric_per_group(store, inner_keys, field, inner_agg)
    output = output or f"{METRIC_AGGREGATIONS[outer_agg]}_{column}"
    if intermediate.empty:
        return pd.DataFrame(columns=[*outer_keys, output])

    result = (
        intermediate.groupby(outer_keys, sort=False)
        .agg(**{output: (column, outer_agg)})
        .reset_index()
    )
    return _sort(result, output)


def correlation_report(
    store: TransactionStore,
    by: Keys = "category",
    avg_field: str = "rating",
    sum_field: str = "revenue",
) -> pd.DataFrame:
    """Per-group average of one field beside the sum of another.

    No coefficient is computed; the side-by-side columns are meant for
    inspecting the relationship. Sorted descending by the sum.
    """
    keys = _as_keys(by)
    _check_numeric(avg_field)
    _check_numeric(sum_field)
    df = _frame(store, [*keys, avg_field, sum_field])
    avg_col = metric_column(avg_field, "mean")
    sum_col = metric_column(sum_field, "sum")
    result = store.aggregate(
        keys,
        frame=df,
        **{avg_col: (avg_field, "mean"), sum_col: (sum_field, "sum")},
    )
    return _sort(result, sum_col)


COMPUTATIONS: dict[str, Callable[..., pd.DataFrame]] = {
    "group-count-sum": group_count_sum,
    "group-max-by-group": group_max_by_group,
    "group-min-max-avg": group_min_max_avg,
    "weighted-sum-group-order": weighted_sum_group_order,
    "time-bucket-classify": time_bucket_classify,
    "year-over-year-ratio": year_over_year_ratio,
    "top-n-by-metric": top_n_by_metric,
    "single-winner": single_winner,
    "two-level-aggregate": two_level_aggregate,
    "correlation-report": correlation_report,
}
