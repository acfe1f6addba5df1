"""Example: Call primitive computations with your own parameters.

The catalog questions are thin bindings over a handful of primitive
computations. This example calls those primitives directly.

Prerequisites:
- Place walmart.csv under data/a_raw/ (or set WALMART_DATA_ROOT)
"""

from walmart_core import DataPaths, TransactionStore, run

paths = DataPaths.from_env()
store = TransactionStore.from_source(paths.raw_dataset)

# Example 1: Top 3 cities by units sold
print("=" * 80)
print("Example 1: Top 3 cities by quantity")
print("=" * 80)
result = run(store, "top-n-by-metric", {"by": "city", "field": "quantity", "top_n": 3})
print(result.rows)

# Example 2: Override a catalog question's defaults
print("\n" + "=" * 80)
print("Example 2: Revenue decrease ratio, top 10 branches")
print("=" * 80)
result = run(store, "revenue_decrease_ratio", {"top_n": 10})
if result.ok:
    print(result.rows)
else:
    print(f"No result: {result.error}")

# Example 3: Both hour bucket schemes side by side
print("\n" + "=" * 80)
print("Example 3: Shift (3 buckets) vs day part (4 buckets)")
print("=" * 80)
for scheme in ("shift", "day_part"):
    result = run(store, "time-bucket-classify", {"scheme": scheme})
    print(f"\n{scheme}:")
    print(result.rows)

# Example 4: Row-level access without pandas
print("\n" + "=" * 80)
print("Example 4: Cash transactions per branch")
print("=" * 80)
cash = store.filter(lambda row: row.payment_method == "Cash")
print(f"Cash transactions: {cash.count()}")
by_branch = store.group_by("branch")
for branch, rows in list(by_branch.items())[:5]:
    print(f"  {branch}: {len(rows)} transaction(s)")
