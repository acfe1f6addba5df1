"""Tests for the primitive computations.

Expected values are worked out by hand from the six-row sample in
tests.test_utils.sample_rows.
"""

from datetime import date

import pandas as pd
import pytest

from tests.test_utils import make_store, make_transaction
from walmart_core.analytics.computations import (
    COMPUTATIONS,
    correlation_report,
    group_count_sum,
    group_max_by_group,
    group_min_max_avg,
    metric_column,
    single_winner,
    time_bucket_classify,
    top_n_by_metric,
    two_level_aggregate,
    weighted_sum_group_order,
    year_over_year_ratio,
)
from walmart_core.exceptions import ComputationError, ParameterError
from walmart_core.store import TransactionStore


def test_dispatch_table_names() -> None:
    """Test that every computation is reachable by its hyphenated name."""
    assert set(COMPUTATIONS) == {
        "group-count-sum",
        "group-max-by-group",
        "group-min-max-avg",
        "weighted-sum-group-order",
        "time-bucket-classify",
        "year-over-year-ratio",
        "top-n-by-metric",
        "single-winner",
        "two-level-aggregate",
        "correlation-report",
    }


def test_metric_column_names() -> None:
    """Test output column naming."""
    assert metric_column("rating", "mean") == "avg_rating"
    assert metric_column("revenue", "sum") == "total_revenue"
    assert metric_column("invoice_id", "count") == "count"


class TestGroupCountSum:
    """group-count-sum: count rows and sum a field per group."""

    def test_counts_and_sums(self, sample_store: TransactionStore) -> None:
        """Test per-payment-method counts and quantities."""
        result = group_count_sum(sample_store, by="payment_method", field="quantity")

        assert result.columns.tolist() == ["payment_method", "count", "total_quantity"]
        assert result["payment_method"].tolist() == ["Cash", "Ewallet", "Credit card"]
        assert result["count"].tolist() == [2, 3, 1]
        assert result["total_quantity"].tolist() == [7, 4, 3]

    def test_counts_sum_to_row_count(self, sample_store: TransactionStore) -> None:
        """Test that group counts add up to the number of rows."""
        for key in ["branch", "city", "category", "payment_method", ["branch", "category"]]:
            result = group_count_sum(sample_store, by=key)
            assert result["count"].sum() == len(sample_store)

    def test_counts_sum_to_filtered_row_count(self, sample_store: TransactionStore) -> None:
        """Test the count invariant on an upstream-filtered dataset."""
        filtered = make_store(*sample_store.filter(lambda r: r.date.year == 2023))

        result = group_count_sum(filtered, by="branch")

        assert result["count"].sum() == len(filtered) == 3

    def test_sort_by_total(self, sample_store: TransactionStore) -> None:
        """Test descending sort on the summed field."""
        result = group_count_sum(sample_store, by="payment_method", sort_by="total")
        assert result["total_quantity"].tolist() == [7, 4, 3]

        result = group_count_sum(sample_store, by="payment_method", sort_by="count")
        assert result["payment_method"].tolist() == ["Ewallet", "Cash", "Credit card"]

    def test_invalid_sort(self, sample_store: TransactionStore) -> None:
        """Test that an unknown sort column is a parameter error."""
        with pytest.raises(ParameterError):
            group_count_sum(sample_store, by="branch", sort_by="rating")

    def test_non_numeric_field(self, sample_store: TransactionStore) -> None:
        """Test that summing a text field is a parameter error."""
        with pytest.raises(ParameterError):
            group_count_sum(sample_store, by="branch", field="city")


class TestGroupMaxByGroup:
    """group-max-by-group: include all tied winners."""

    def test_single_winner_per_outer_key(self, sample_store: TransactionStore) -> None:
        """Test highest-rated category per branch."""
        result = group_max_by_group(
            sample_store, outer="branch", inner="category", field="rating", agg="mean"
        )

        assert result.columns.tolist() == ["branch", "category", "avg_rating"]
        assert result["branch"].tolist() == ["A", "B"]
        assert result["category"].tolist() == ["X", "X"]
        assert result["avg_rating"].tolist() == pytest.approx([7.5, 9.0])

    def test_ties_are_all_included(self, sample_store: TransactionStore) -> None:
        """Test that a three-way tie yields three rows for the same outer key."""
        result = group_max_by_group(sample_store, outer="branch", inner="payment_method")

        assert list(zip(result["branch"], result["payment_method"])) == [
            ("A", "Cash"),
            ("A", "Ewallet"),
            ("A", "Credit card"),
            ("B", "Ewallet"),
        ]
        assert result["count"].tolist() == [1, 1, 1, 2]

    def test_every_row_is_the_outer_maximum(self, sample_store: TransactionStore) -> None:
        """Test that each returned metric equals the max for its outer key."""
        result = group_max_by_group(sample_store, outer="branch", inner="day_name")
        df = sample_store.frame
        per_pair = df.groupby(["branch", "day_name"]).size()

        assert set(result["branch"]) == set(df["branch"])
        for _, row in result.iterrows():
            assert row["count"] == per_pair[row["branch"]].max()

    def test_exact_tie_with_synthetic_rows(self) -> None:
        """Test an exact two-way tie on a summed metric."""
        store = make_store(
            make_transaction(branch="A", category="X", unit_price=10.0, quantity=1),
            make_transaction(branch="A", category="Y", unit_price=5.0, quantity=2),
            make_transaction(branch="A", category="Z", unit_price=1.0, quantity=1),
        )

        result = group_max_by_group(store, outer="branch", inner="category", field="revenue", agg="sum")

        assert result["category"].tolist() == ["X", "Y"]
        assert result["total_revenue"].tolist() == [10.0, 10.0]

    def test_outer_keys_grouped_together(self) -> None:
        """Test that winners of one outer key are contiguous even if rows interleave."""
        store = make_store(
            make_transaction(branch="A", payment_method="Cash"),
            make_transaction(branch="B", payment_method="Cash"),
            make_transaction(branch="A", payment_method="Ewallet"),
        )

        result = group_max_by_group(store, outer="branch", inner="payment_method")

        assert result["branch"].tolist() == ["A", "A", "B"]

    def test_requires_both_keys(self, sample_store: TransactionStore) -> None:
        """Test that outer and inner keys are mandatory."""
        with pytest.raises(ParameterError):
            group_max_by_group(sample_store, outer="branch", inner=[])

    def test_empty_store(self) -> None:
        """Test that an empty store yields no rows."""
        assert group_max_by_group(TransactionStore(), outer="branch", inner="category").empty


def test_group_min_max_avg(sample_store: TransactionStore) -> None:
    """Test rating stats per city and category."""
    result = group_min_max_avg(sample_store, by=["city", "category"], field="rating")

    assert result.columns.tolist() == ["city", "category", "min_rating", "max_rating", "avg_rating"]
    assert list(zip(result["city"], result["category"])) == [
        ("Dallas", "X"),
        ("Dallas", "Y"),
        ("Houston", "X"),
        ("Houston", "Y"),
    ]
    assert result["min_rating"].tolist() == [7.0, 6.0, 9.0, 5.0]
    assert result["max_rating"].tolist() == [8.0, 6.0, 9.0, 5.0]
    assert result["avg_rating"].tolist() == pytest.approx([7.5, 6.0, 9.0, 5.0])


class TestWeightedSumGroupOrder:
    """weighted-sum-group-order: profit per group, descending."""

    def test_three_row_scenario(self, three_row_store: TransactionStore) -> None:
        """Test the three-row end-to-end scenario: Y (4.0) before X (3.25)."""
        result = weighted_sum_group_order(three_row_store, by="category")

        assert result["category"].tolist() == ["Y", "X"]
        assert result["total_profit"].tolist() == pytest.approx([4.0, 3.25])

    def test_profit_by_branch_with_top_n(self, sample_store: TransactionStore) -> None:
        """Test truncation after sorting."""
        result = weighted_sum_group_order(sample_store, by="branch", top_n=1)

        assert result["branch"].tolist() == ["B"]
        assert result["total_profit"].tolist() == pytest.approx([9.5])

    def test_missing_margin_fails(self) -> None:
        """Test that a null profit margin is a computation error."""
        store = make_store(make_transaction(), make_transaction(profit_margin=None))

        with pytest.raises(ComputationError):
            weighted_sum_group_order(store, by="category")


class TestTimeBucketClassify:
    """time-bucket-classify: the two schemes stay separate computations."""

    def test_shift_by_branch(self, sample_store: TransactionStore) -> None:
        """Test invoices per shift, ordered by branch then count descending."""
        result = time_bucket_classify(sample_store, scheme="shift", by="branch")

        assert result.columns.tolist() == ["branch", "shift", "count"]
        assert list(zip(result["branch"], result["shift"], result["count"])) == [
            ("A", "Afternoon", 2),
            ("A", "Morning", 1),
            ("B", "Evening", 3),
        ]

    def test_day_part(self, sample_store: TransactionStore) -> None:
        """Test the 4-bucket scheme, ties keeping first-occurrence order."""
        result = time_bucket_classify(sample_store, scheme="day_part")

        assert result["day_part"].tolist() == ["Afternoon", "Night", "Morning", "Evening"]
        assert result["count"].tolist() == [2, 2, 1, 1]

    def test_unknown_scheme(self, sample_store: TransactionStore) -> None:
        """Test that an unknown scheme is a parameter error."""
        with pytest.raises(ParameterError):
            time_bucket_classify(sample_store, scheme="hourly")

    def test_empty_store(self) -> None:
        """Test that an empty store yields no rows."""
        result = time_bucket_classify(TransactionStore(), scheme="shift", by="branch")
        assert result.empty
        assert result.columns.tolist() == ["branch", "shift", "count"]


class TestYearOverYearRatio:
    """year-over-year-ratio: (prior - current) / prior per group."""

    def test_decrease_ratio(self, sample_store: TransactionStore) -> None:
        """Test revenue decrease per branch from 2022 to 2023."""
        result = year_over_year_ratio(sample_store, by="branch", field="revenue")

        assert result.columns.tolist() == ["branch", "prior_revenue", "current_revenue", "decrease_ratio"]
        assert result["branch"].tolist() == ["A", "B"]
        assert result["prior_revenue"].tolist() == pytest.approx([40.0, 25.0])
        assert result["current_revenue"].tolist() == pytest.approx([30.0, 45.0])
        assert result["decrease_ratio"].tolist() == pytest.approx([0.25, -0.8])

    def test_top_n(self, sample_store: TransactionStore) -> None:
        """Test truncation to the largest decrease."""
        result = year_over_year_ratio(sample_store, top_n=1)
        assert result["branch"].tolist() == ["A"]

    def test_group_missing_a_year_is_excluded(self, sample_store: TransactionStore) -> None:
        """Test that a branch without prior-year data is excluded, not zeroed."""
        rows = [*sample_store.rows, make_transaction(branch="C", date=date(2023, 5, 1))]

        result = year_over_year_ratio(make_store(*rows))

        assert "C" not in result["branch"].tolist()
        assert len(result) == 2

    def test_zero_prior_sum_fails(self) -> None:
        """Test that a zero prior-year sum is an error, not infinity."""
        store = make_store(
            make_transaction(branch="A", quantity=0, date=date(2022, 1, 1)),
            make_transaction(branch="A", quantity=3, date=date(2023, 1, 1)),
        )

        with pytest.raises(ComputationError, match="zero"):
            year_over_year_ratio(store)

    def test_year_without_rows_fails(self, sample_store: TransactionStore) -> None:
        """Test that a year with no transactions fails."""
        with pytest.raises(ComputationError):
            year_over_year_ratio(sample_store, prior_year=2021, current_year=2023)

    def test_no_group_with_both_years_fails(self) -> None:
        """Test that disjoint branches across years fail."""
        store = make_store(
            make_transaction(branch="A", date=date(2022, 1, 1)),
            make_transaction(branch="B", date=date(2023, 1, 1)),
        )

        with pytest.raises(ComputationError):
            year_over_year_ratio(store)

    def test_same_years_rejected(self, sample_store: TransactionStore) -> None:
        """Test that comparing a year with itself is a parameter error."""
        with pytest.raises(ParameterError):
            year_over_year_ratio(sample_store, prior_year=2023, current_year=2023)


class TestTopNByMetric:
    """top-n-by-metric: sort descending and truncate."""

    def test_top_n(self, sample_store: TransactionStore) -> None:
        """Test payment methods by revenue."""
        result = top_n_by_metric(sample_store, by="payment_method", field="revenue", top_n=2)

        assert result["payment_method"].tolist() == ["Ewallet", "Cash"]
        assert result["total_revenue"].tolist() == pytest.approx([65.0, 45.0])

    def test_n_larger_than_groups_returns_all(self, sample_store: TransactionStore) -> None:
        """Test that N >= group count returns every group, sorted."""
        result = top_n_by_metric(sample_store, by="payment_method", field="revenue", top_n=10)

        assert result["payment_method"].tolist() == ["Ewallet", "Cash", "Credit card"]

    def test_n_zero_returns_empty(self, sample_store: TransactionStore) -> None:
        """Test that N = 0 returns an empty sequence."""
        result = top_n_by_metric(sample_store, by="city", field="quantity", top_n=0)

        assert result.empty
        assert result.columns.tolist() == ["city", "total_quantity"]

    @pytest.mark.parametrize("top_n", [-1, 2.5, "3", True])
    def test_invalid_n(self, sample_store: TransactionStore, top_n: object) -> None:
        """Test that non-integer or negative N is a parameter error."""
        with pytest.raises(ParameterError):
            top_n_by_metric(sample_store, by="city", top_n=top_n)

    def test_unknown_agg(self, sample_store: TransactionStore) -> None:
        """Test that an unknown aggregation is a parameter error."""
        with pytest.raises(ParameterError):
            top_n_by_metric(sample_store, by="city", agg="median")


class TestSingleWinner:
    """single-winner: exactly one row."""

    def test_lowest_rated_category(self, sample_store: TransactionStore) -> None:
        """Test ascending selection."""
        result = single_winner(sample_store, by="category", field="rating", agg="mean", ascending=True)

        assert len(result) == 1
        assert result.loc[0, "category"] == "Y"
        assert result.loc[0, "avg_rating"] == pytest.approx(5.5)

    def test_tie_keeps_first_occurrence(self, sample_store: TransactionStore) -> None:
        """Test that Dallas and Houston tie on revenue and Dallas (first seen) wins."""
        result = single_winner(sample_store, by="city", field="revenue")

        assert result["city"].tolist() == ["Dallas"]
        assert result["total_revenue"].tolist() == pytest.approx([70.0])

    def test_empty_store_fails(self) -> None:
        """Test that there is no winner without groups."""
        with pytest.raises(ComputationError):
            single_winner(TransactionStore(), by="city")


class TestTwoLevelAggregate:
    """two-level-aggregate: per-invoice basket, then per-branch average."""

    def test_basket_size(self, sample_store: TransactionStore) -> None:
        """Test average items per invoice in each branch."""
        result = two_level_aggregate(sample_store, output="avg_basket_size")

        assert result.columns.tolist() == ["branch", "avg_basket_size"]
        assert result["branch"].tolist() == ["B", "A"]
        assert result["avg_basket_size"].tolist() == pytest.approx([4.0, 2.0])

    def test_default_output_name(self, sample_store: TransactionStore) -> None:
        """Test the generated output column name."""
        result = two_level_aggregate(sample_store)
        assert result.columns.tolist() == ["branch", "avg_total_quantity"]

    def test_outer_must_be_within_inner(self, sample_store: TransactionStore) -> None:
        """Test that the coarse grain must be part of the fine grain."""
        with pytest.raises(ParameterError):
            two_level_aggregate(sample_store, inner=["invoice_id"], outer="city")


def test_correlation_report(sample_store: TransactionStore) -> None:
    """Test average rating beside total revenue, no coefficient."""
    result = correlation_report(sample_store, by="category")

    assert result.columns.tolist() == ["category", "avg_rating", "total_revenue"]
    assert result["category"].tolist() == ["X", "Y"]
    assert result["avg_rating"].tolist() == pytest.approx([8.25, 5.5])
    assert result["total_revenue"].tolist() == pytest.approx([80.0, 60.0])


def test_null_field_fails() -> None:
    """Test that a null referenced field is a computation error."""
    store = make_store(make_transaction(), make_transaction(rating=None))

    with pytest.raises(ComputationError, match="rating"):
        group_min_max_avg(store, by="branch", field="rating")


def test_unknown_field_fails(sample_store: TransactionStore) -> None:
    """Test that an unknown field is a parameter error."""
    with pytest.raises(ParameterError):
        top_n_by_metric(sample_store, by="region")


@pytest.mark.parametrize(
    ("name", "params"),
    [
        ("group-count-sum", {"by": "payment_method"}),
        ("group-max-by-group", {"outer": "branch", "inner": "payment_method"}),
        ("time-bucket-classify", {"scheme": "day_part", "by": "city"}),
        ("year-over-year-ratio", {}),
        ("two-level-aggregate", {}),
    ],
)
def test_idempotent_output(sample_store: TransactionStore, name: str, params: dict) -> None:
    """Test that two runs over an unchanged store give byte-identical output."""
    first = COMPUTATIONS[name](sample_store, **params)
    second = COMPUTATIONS[name](sample_store, **params)

    assert first.to_csv(index=False) == second.to_csv(index=False)
    pd.testing.assert_frame_equal(first, second)


def test_time_buckets_count_rows_with_null_invoice() -> None:
    """Test that bucket counts are row counts, unaffected by nulls in unrelated fields."""
    store = make_store(make_transaction(), make_transaction(invoice_id=None))

    result = time_bucket_classify(store, scheme="shift")

    assert result.to_dict("records") == [{"shift": "Afternoon", "count": 2}]


def test_repeated_grouping_keys_rejected(sample_store: TransactionStore) -> None:
    """Test that a field repeated in the grouping keys is a parameter error."""
    with pytest.raises(ParameterError, match="repeated"):
        group_count_sum(sample_store, by=["branch", "branch"])
    with pytest.raises(ParameterError, match="repeated"):
        sample_store.aggregate(["city", "city"], total=("quantity", "sum"))


def test_outer_and_inner_keys_must_not_overlap(sample_store: TransactionStore) -> None:
    """Test that group-max-by-group rejects an inner key that is also an outer key."""
    with pytest.raises(ParameterError):
        group_max_by_group(sample_store, outer="branch", inner="branch")
    with pytest.raises(ParameterError):
        group_max_by_group(sample_store, outer=["branch", "city"], inner=["city", "category"])


@pytest.mark.parametrize("ascending", ["false", 0, None])
def test_single_winner_requires_bool_direction(sample_store: TransactionStore, ascending: object) -> None:
    """Test that the sort direction must be a real bool."""
    with pytest.raises(ParameterError):
        single_winner(sample_store, by="category", ascending=ascending)
