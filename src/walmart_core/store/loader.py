"""Dataset loader: flat transactions source -> typed rows.

The source is the denormalized ``walmart`` table, either as a CSV file or as
an already-read DataFrame. Loading is all-or-nothing: the first value that
cannot be typed raises DataFormatError with its row index and column, and no
partial dataset is returned.

Input contract
--------------
Columns (case-insensitive, spaces allowed, extra columns ignored):

    invoice_id, branch, city, category, unit_price, quantity,
    date, time, payment_method, rating, profit_margin

- ``unit_price`` is a non-negative amount with an optional leading currency
  symbol and thousands separators (``"$74.69"``, ``"$1,204.50"``).
  Anything else (``"1e3"``, ``"7x4"``, ``"-5"``) is rejected.
- ``date`` is day/month/year (``"05/01/19"`` or ``"05/01/2019"``).
- ``time`` is 24h ``HH:MM`` or ``HH:MM:SS``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from walmart_core.exceptions import ConfigError, DataFormatError
from walmart_core.store.schema import (
    COLUMNS,
    PROFIT_MARGIN_RANGE,
    RATING_RANGE,
    TEXT_COLUMNS,
    Transaction,
)
from walmart_core.timeutils import parse_clock_time, parse_day_month_year

logger = logging.getLogger(__name__)

Dataset = tuple[Transaction, ...]

# Optional leading currency symbol, digits with optional thousands separators
_PRICE_RE = re.compile(r"\s*[$€£]?\s*((?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|\.\d+)\s*")


def normalize_column_name(name: Any) -> str:
    """Normalize a source header: ``" Unit Price"`` -> ``"unit_price"``."""
    return re.sub(r"\s+", "_", str(name).strip()).lower()


def _is_null(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _to_float(value: Any) -> float:
    if isinstance(value, str):
        value = value.strip()
    result = float(value)
    if not np.isfinite(result):
        raise ValueError(f"not a finite number: {value!r}")
    return result


def _to_price(value: Any) -> float:
    if isinstance(value, str):
        match = _PRICE_RE.fullmatch(value)
        if match is None:
            raise ValueError(f"not a price: {value!r}")
        value = match.group(1).replace(",", "")
    price = _to_float(value)
    if price < 0:
        raise ValueError(f"negative price: {price}")
    return price


def _to_int(value: Any) -> int:
    number = _to_float(value)
    if not number.is_integer():
        raise ValueError(f"not an integer: {value!r}")
    return int(number)


def _to_text(value: Any) -> str:
    return str(value).strip()


def _to_quantity(value: Any) -> int:
    quantity = _to_int(value)
    if quantity < 0:
        raise ValueError(f"negative quantity: {quantity}")
    return quantity


def _bounded(low: float, high: float) -> Callable[[Any], float]:
    def convert(value: Any) -> float:
        number = _to_float(value)
        if not low <= number <= high:
            raise ValueError(f"{number} outside {low}-{high}")
        return number

    return convert


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_day_month_year(str(value))


def _to_time(value: Any) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    return parse_clock_time(str(value))


CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "invoice_id": _to_int,
    "unit_price": _to_price,
    "quantity": _to_quantity,
    "date": _to_date,
    "time": _to_time,
    "rating": _bounded(*RATING_RANGE),
    "profit_margin": _bounded(*PROFIT_MARGIN_RANGE),
    **{col: _to_text for col in TEXT_COLUMNS},
}


def read_source(source: str | Path | pd.DataFrame) -> pd.DataFrame:
    """Read the raw source into a DataFrame with normalized headers.

    Raises:
        ConfigError: If the source file does not exist.
        DataFormatError: If a required column is missing.

    """
    if isinstance(source, pd.DataFrame):
        raw = source.copy()
    else:
        path = Path(source)
        if not path.exists():
            raise ConfigError(f"Transactions source not found: {path}")
        logger.info("Reading transactions from %s", path)
        raw = pd.read_csv(path, dtype=str, encoding="utf-8-sig")

    raw.columns = [normalize_column_name(c) for c in raw.columns]

    missing = [col for col in COLUMNS if col not in raw.columns]
    if missing:
        raise DataFormatError(
            f"Missing required columns: {missing}. Required: {COLUMNS}",
            column=missing[0],
        )
    return raw[COLUMNS].reset_index(drop=True)


def _convert_column(raw: pd.DataFrame, column: str) -> list[Any]:
    convert = CONVERTERS[column]
    values = []
    for row_index, value in enumerate(raw[column].tolist()):
        if _is_null(value):
            raise DataFormatError("Missing value", row=row_index, column=column)
        try:
            values.append(convert(value))
        except (TypeError, ValueError) as e:
            raise DataFormatError(f"Invalid value {value!r}: {e}", row=row_index, column=column) from e
    return values


def load(source: str | Path | pd.DataFrame) -> Dataset:
    """Load and type every row of a transactions source.

    Args:
        source: Path to a CSV file, or a DataFrame with the source columns.

    Returns:
        Ordered, immutable tuple of Transaction rows (source order).

    Raises:
        DataFormatError: On a missing column, a null cell or an untypable
            value. Carries the 0-based row index and the column name.

    Examples:
        >>> rows = load("data/a_raw/walmart.csv")
        >>> rows[0].branch
        'WALM003'

    """
    raw = read_source(source)
    typed = {column: _convert_column(raw, column) for column in COLUMNS}
    rows = tuple(
        Transaction(**dict(zip(COLUMNS, values)))
        for values in zip(*(typed[column] for column in COLUMNS))
    )
    logger.info("Loaded %d transactions", len(rows))
    return rows
