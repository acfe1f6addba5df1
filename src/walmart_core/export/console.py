"""Console output formatting for computation results."""

from __future__ import annotations

import pandas as pd

from walmart_core.analytics.catalog import CATALOG
from walmart_core.analytics.engine import ComputationResult

RULE_WIDTH = 60


def _title(result: ComputationResult) -> str:
    question = CATALOG.get(result.name)
    if question and question.description:
        return f"{result.name}: {question.description}"
    return result.name


def _format_value(value: object) -> str:
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def format_rows(rows: pd.DataFrame) -> str:
    """Render output rows as a plain-text table."""
    if rows.empty:
        return "(no rows)"
    formatters = {
        col: _format_value for col in rows.columns if pd.api.types.is_float_dtype(rows[col])
    }
    return rows.to_string(index=False, formatters=formatters)


def format_result_for_console(result: ComputationResult) -> str:
    """Build a human-readable text block for one computation result.

    Args:
        result: ComputationResult from the engine.

    Returns:
        Title, rule and table, or "No result." with the error for a failed
        computation.
    """
    lines = [_title(result), "-" * RULE_WIDTH]
    if not result.ok or result.rows is None:
        lines.append("No result.")
        lines.append(f"Error: {result.error}")
    else:
        lines.append(format_rows(result.rows))
    return "\n".join(lines)


def format_catalog_for_console(results: list[ComputationResult]) -> str:
    """Render every result followed by a status summary."""
    lines = []
    for result in results:
        lines.append(format_result_for_console(result))
        lines.append("")

    failed = [r.name for r in results if not r.ok]
    lines.append("=" * RULE_WIDTH)
    lines.append(f"Computations: {len(results)}  ok: {len(results) - len(failed)}  failed: {len(failed)}")
    for name in failed:
        lines.append(f"  [FAILED] {name}")
    return "\n".join(lines)
