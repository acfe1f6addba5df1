"""In-memory tabular store for the transactions dataset.

The store owns one immutable Dataset snapshot for the lifetime of an analysis
run and exposes grouping primitives over it:

- Row-level: ``group_by`` and ``filter`` over Transaction objects
- Frame-level: ``frame`` and ``aggregate`` over a pandas view with the
  derived fields (revenue, profit, year, month, day_name, hour)

Nothing in the store mutates the snapshot, so several computations may run
over the same store concurrently without locking.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Iterator
from pathlib import Path
from typing import Any, Union

import pandas as pd

from walmart_core.exceptions import ParameterError
from walmart_core.store.loader import Dataset, load
from walmart_core.store.schema import COLUMNS, DERIVED_COLUMNS, Transaction

logger = logging.getLogger(__name__)

KeySpec = Union[str, Iterable[str], Callable[[Transaction], Hashable]]


class FilteredView:
    """Lazy, restartable view of the rows matching a predicate.

    Each iteration re-scans the snapshot, so the view can be consumed any
    number of times and always yields the same rows in source order.
    """

    def __init__(self, rows: Dataset, predicate: Callable[[Transaction], bool]) -> None:
        self._rows = rows
        self._predicate = predicate

    def __iter__(self) -> Iterator[Transaction]:
        return (row for row in self._rows if self._predicate(row))

    def count(self) -> int:
        return sum(1 for _ in self)


def _build_frame(rows: Dataset) -> pd.DataFrame:
    df = pd.DataFrame([[getattr(r, c) for c in COLUMNS] for r in rows], columns=COLUMNS)
    if df.empty:
        return pd.DataFrame(columns=COLUMNS + DERIVED_COLUMNS)

    df["revenue"] = df["unit_price"] * df["quantity"]
    df["profit"] = df["unit_price"] * df["quantity"] * df["profit_margin"]
    dates = pd.to_datetime(df["date"])
    df["year"] = dates.dt.year
    df["month"] = dates.dt.month
    df["day_name"] = dates.dt.day_name()
    df["hour"] = [t.hour if t is not None else None for t in df["time"]]
    return df


class TransactionStore:
    """Holds the Dataset in memory and exposes grouping/aggregation primitives.

    Example:
        >>> store = TransactionStore.from_source("data/a_raw/walmart.csv")
        >>> groups = store.group_by("branch")
        >>> cash = store.filter(lambda r: r.payment_method == "Cash")
        >>> store.aggregate(["branch"], count=("invoice_id", "count"))

    """

    def __init__(self, rows: Iterable[Transaction] = ()) -> None:
        self._rows: Dataset = tuple(rows)
        self._frame = _build_frame(self._rows)

    @classmethod
    def load(cls, rows: Iterable[Transaction]) -> TransactionStore:
        """Ingest an already-typed snapshot of rows."""
        store = cls(rows)
        logger.debug("Store holds %d rows", len(store))
        return store

    @classmethod
    def from_source(cls, source: str | Path | pd.DataFrame) -> TransactionStore:
        """Load a transactions source through the dataset loader.

        Raises:
            DataFormatError: If the source cannot be typed.

        """
        return cls.load(load(source))

    @property
    def rows(self) -> Dataset:
        return self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._rows)

    @property
    def fields(self) -> list[str]:
        """Field names computations may reference (source + derived)."""
        return COLUMNS + DERIVED_COLUMNS

    @property
    def frame(self) -> pd.DataFrame:
        """A copy of the tabular view with derived fields.

        A fresh copy is returned on every access so callers cannot mutate
        the snapshot.
        """
        return self._frame.copy()

    def check_fields(self, fields: Iterable[str]) -> None:
        """Raise ParameterError if any field is not a store field."""
        unknown = [f for f in fields if f not in self.fields]
        if unknown:
            raise ParameterError(f"Unknown field(s) {unknown}. Available: {self.fields}")

    def _key_function(self, key: KeySpec) -> Callable[[Transaction], Hashable]:
        if callable(key):
            return key
        if isinstance(key, str):
            self.check_fields([key])
            return lambda row: getattr(row, key)
        names = tuple(key)
        self.check_fields(names)
        return lambda row: tuple(getattr(row, name) for name in names)

    def group_by(self, key: KeySpec) -> dict[Hashable, list[Transaction]]:
        """Partition rows by a computed key.

        Args:
            key: A callable over a Transaction, a field name, or a sequence of
                field names (grouped by equality of the full tuple).

        Returns:
            Mapping from key to member rows. Groups appear in order of first
            occurrence; members keep source order.

        """
        key_fn = self._key_function(key)
        groups: dict[Hashable, list[Transaction]] = {}
        for row in self._rows:
            groups.setdefault(key_fn(row), []).append(row)
        return groups

    def filter(self, predicate: Callable[[Transaction], bool]) -> FilteredView:
        """Return a lazy, restartable view of rows satisfying ``predicate``."""
        return FilteredView(self._rows, predicate)

    def aggregate(
        self,
        keys: list[str],
        frame: pd.DataFrame | None = None,
        **named_aggs: Any,
    ) -> pd.DataFrame:
        """Group the frame by ``keys`` and apply pandas named aggregations.

        Groups come out in order of first occurrence (``sort=False``).

        Args:
            keys: Grouping field names.
            frame: Optional pre-filtered frame; defaults to the full view.
            **named_aggs: ``output=(field, aggfunc)`` pairs.

        Returns:
            DataFrame with the key columns followed by the aggregates.

        """
        if not keys:
            raise ParameterError("At least one grouping field is required")
        if len(set(keys)) != len(keys):
            raise ParameterError(f"Grouping fields repeated in {keys}")
        df = self._frame if frame is None else frame
        referenced = [*keys, *(field for field, _ in named_aggs.values())]
        unknown = [f for f in referenced if f not in df.columns]
        if unknown:
            raise ParameterError(f"Unknown field(s) {unknown}. Available: {list(df.columns)}")
        if df.empty:
            return pd.DataFrame(columns=[*keys, *named_aggs])
        return df.groupby(keys, sort=False).agg(**named_aggs).reset_index()
