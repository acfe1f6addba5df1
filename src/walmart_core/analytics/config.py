"""Configuration constants for the aggregation engine."""

# Years compared by the revenue decrease ratio question
PRIOR_YEAR = 2022
CURRENT_YEAR = 2023

# Default number of groups kept by top-N computations
DEFAULT_TOP_N = 5

# Aggregations a metric may use, mapped to the output column prefix
METRIC_AGGREGATIONS = {
    "count": "count",
    "sum": "total",
    "mean": "avg",
    "min": "min",
    "max": "max",
}
