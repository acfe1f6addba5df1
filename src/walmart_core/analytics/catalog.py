"""Catalog of business questions answered over the walmart transactions table.

Each question binds a primitive computation to fixed default parameters.
The catalog keeps declaration order, which is also the order
``run_catalog`` executes questions in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from walmart_core.analytics.config import CURRENT_YEAR, DEFAULT_TOP_N, PRIOR_YEAR


@dataclass(frozen=True)
class Question:
    """A named business question.

    Attributes:
        name: Catalog identifier, e.g. "profit_by_category".
        computation: Primitive computation name, e.g. "weighted-sum-group-order".
        parameters: Default parameters passed to the computation.
        description: The question in plain words.
    """

    name: str
    computation: str
    parameters: dict[str, Any] = field(default_factory=dict)
    description: str = ""


_QUESTIONS = [
    Question(
        "payment_method_summary",
        "group-count-sum",
        {"by": "payment_method", "field": "quantity"},
        "Number of transactions and quantity sold per payment method",
    ),
    Question(
        "top_rated_category_per_branch",
        "group-max-by-group",
        {"outer": "branch", "inner": "category", "field": "rating", "agg": "mean"},
        "Highest average-rated category in each branch",
    ),
    Question(
        "busiest_day_per_branch",
        "group-max-by-group",
        {"outer": "branch", "inner": "day_name", "field": "invoice_id", "agg": "count"},
        "Weekday with the most transactions in each branch",
    ),
    Question(
        "quantity_by_payment_method",
        "group-count-sum",
        {"by": "payment_method", "field": "quantity", "sort_by": "total"},
        "Total quantity sold per payment method",
    ),
    Question(
        "city_category_rating_stats",
        "group-min-max-avg",
        {"by": ["city", "category"], "field": "rating"},
        "Minimum, maximum and average rating per city and category",
    ),
    Question(
        "profit_by_category",
        "weighted-sum-group-order",
        {"by": "category"},
        "Total profit per category, highest first",
    ),
    Question(
        "preferred_payment_per_branch",
        "group-max-by-group",
        {"outer": "branch", "inner": "payment_method", "field": "invoice_id", "agg": "count"},
        "Most common payment method in each branch",
    ),
    Question(
        "invoices_by_shift",
        "time-bucket-classify",
        {"scheme": "shift", "by": "branch"},
        "Invoices per shift (Morning/Afternoon/Evening) in each branch",
    ),
    Question(
        "revenue_decrease_ratio",
        "year-over-year-ratio",
        {
            "by": "branch",
            "field": "revenue",
            "prior_year": PRIOR_YEAR,
            "current_year": CURRENT_YEAR,
            "top_n": DEFAULT_TOP_N,
        },
        f"Branches with the largest revenue decrease from {PRIOR_YEAR} to {CURRENT_YEAR}",
    ),
    Question(
        "top_branches_by_profit",
        "weighted-sum-group-order",
        {"by": "branch", "top_n": DEFAULT_TOP_N},
        "Most profitable branches",
    ),
    Question(
        "transactions_by_day_part",
        "time-bucket-classify",
        {"scheme": "day_part"},
        "Transactions per part of the day (Morning/Afternoon/Evening/Night)",
    ),
    Question(
        "highest_revenue_city",
        "single-winner",
        {"by": "city", "field": "revenue", "agg": "sum", "ascending": False},
        "City with the highest revenue",
    ),
    Question(
        "lowest_rated_category",
        "single-winner",
        {"by": "category", "field": "rating", "agg": "mean", "ascending": True},
        "Category with the lowest average rating",
    ),
    Question(
        "top_category_by_revenue",
        "single-winner",
        {"by": "category", "field": "revenue", "agg": "sum", "ascending": False},
        "Category with the highest revenue",
    ),
    Question(
        "top_cities_by_quantity",
        "top-n-by-metric",
        {"by": "city", "field": "quantity", "agg": "sum", "top_n": DEFAULT_TOP_N},
        "Cities selling the most units",
    ),
    Question(
        "avg_basket_size_per_branch",
        "two-level-aggregate",
        {
            "inner": ["invoice_id", "branch"],
            "outer": "branch",
            "field": "quantity",
            "inner_agg": "sum",
            "outer_agg": "mean",
            "output": "avg_basket_size",
        },
        "Average number of items per invoice in each branch",
    ),
    Question(
        "rating_vs_revenue_by_category",
        "correlation-report",
        {"by": "category", "avg_field": "rating", "sum_field": "revenue"},
        "Average rating beside total revenue per category",
    ),
    Question(
        "top_payment_methods_by_revenue",
        "top-n-by-metric",
        {"by": "payment_method", "field": "revenue", "agg": "sum", "top_n": 3},
        "Payment methods bringing in the most revenue",
    ),
]

CATALOG: dict[str, Question] = {q.name: q for q in _QUESTIONS}


def list_questions() -> list[Question]:
    """All catalog questions in declaration order."""
    return list(CATALOG.values())
