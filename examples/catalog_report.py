"""Example: Run the full question catalog and export the results.

This example loads the walmart transactions table, answers every catalog
question, prints a summary and writes one CSV per question.

Prerequisites:
- Place walmart.csv under data/a_raw/ (or set WALMART_DATA_ROOT)
"""

from pathlib import Path

from walmart_core import DataPaths, TransactionStore, run_catalog
from walmart_core.export import export_results, format_catalog_for_console

# Set up configuration
data_root = Path("data")
paths = DataPaths.from_root(data_root)

print(f"Loading transactions from {paths.raw_dataset}...")
store = TransactionStore.from_source(paths.raw_dataset)
print(f"Loaded {len(store)} transactions")

# Run every question; a failing one does not stop the batch
results = run_catalog(store)
print(format_catalog_for_console(results))

written = export_results(paths, results)
print(f"\nExported {len(written)} report(s) to {paths.reports}")
