"""Row schema for the walmart transactions table.

One Transaction is one invoice line of the denormalized source table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time

# Source columns, in the order they are exposed in frames.
COLUMNS = [
    "invoice_id",
    "branch",
    "city",
    "category",
    "unit_price",
    "quantity",
    "date",
    "time",
    "payment_method",
    "rating",
    "profit_margin",
]

TEXT_COLUMNS = ["branch", "city", "category", "payment_method"]

# Fields computed by the store from the source columns.
DERIVED_COLUMNS = ["revenue", "profit", "year", "month", "day_name", "hour"]

NUMERIC_FIELDS = {
    "invoice_id",
    "unit_price",
    "quantity",
    "rating",
    "profit_margin",
    "revenue",
    "profit",
    "year",
    "month",
    "hour",
}

RATING_RANGE = (0.0, 10.0)
PROFIT_MARGIN_RANGE = (0.0, 1.0)


@dataclass(frozen=True)
class Transaction:
    """A single typed transaction record.

    Attributes:
        invoice_id: Invoice identifier. Several rows may share one invoice.
        branch: Store location identifier.
        city: City of the branch.
        category: Product category.
        unit_price: Price of one unit.
        quantity: Units sold (>= 0).
        date: Calendar date of the sale.
        time: Time of day of the sale.
        payment_method: Payment method label (e.g. "Cash", "Ewallet").
        rating: Customer rating, 0-10.
        profit_margin: Fraction of revenue kept as profit, 0-1.

    """

    invoice_id: int
    branch: str
    city: str
    category: str
    unit_price: float
    quantity: int
    date: date
    time: time
    payment_method: str
    rating: float
    profit_margin: float

    @property
    def revenue(self) -> float:
        return self.unit_price * self.quantity

    @property
    def profit(self) -> float:
        return self.unit_price * self.quantity * self.profit_margin
