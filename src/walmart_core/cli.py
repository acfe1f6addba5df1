"""CLI wrapper for the walmart-core aggregation engine.

This module selects a computation name and parameters and hands them to
walmart_core.analytics. All computation logic lives there.

Command-line examples
---------------------
List the catalog:
    walmart-report list

Run one question:
    walmart-report run profit_by_category --file ./walmart.csv

Override parameters (values are parsed as int, float, bool or
comma-separated lists):
    walmart-report run top-n-by-metric --param by=city --param field=quantity --param top_n=3

Run the whole catalog and export CSVs under $WALMART_DATA_ROOT:
    walmart-report run-all --export
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from walmart_core.analytics import COMPUTATIONS, list_questions, run, run_catalog
from walmart_core.config import DataPaths
from walmart_core.exceptions import ConfigError, DataFormatError, ParameterError
from walmart_core.export import (
    export_result,
    export_results,
    format_catalog_for_console,
    format_result_for_console,
)
from walmart_core.store import TransactionStore

logger = logging.getLogger(__name__)


def parse_value(text: str) -> Any:
    """Parse a --param value: bool, int, float, comma list, or plain string.

    Examples:
        >>> parse_value("5")
        5
        >>> parse_value("city,category")
        ['city', 'category']

    """
    if "," in text:
        return [parse_value(part) for part in text.split(",") if part]
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return text


def parse_params(pairs: list[str] | None) -> dict[str, Any]:
    """Turn ``key=value`` strings into a parameters dict."""
    params: dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ParameterError(f"Invalid --param '{pair}'. Expected key=value.")
        params[key.strip()] = parse_value(value.strip())
    return params


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="walmart-report",
        description="Run analytical computations over the walmart transactions table.",
    )
    p.add_argument("--quiet", action="store_true", help="Less logging")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List catalog questions and primitive computations")

    for name, help_text in (
        ("run", "Run one question or computation"),
        ("run-all", "Run every catalog question"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        if name == "run":
            cmd.add_argument("name", help="Catalog question or computation name")
            cmd.add_argument(
                "--param",
                action="append",
                metavar="KEY=VALUE",
                help="Computation parameter (repeatable)",
            )
        cmd.add_argument(
            "--file",
            type=Path,
            help="Transactions CSV. Defaults to <WALMART_DATA_ROOT>/a_raw/walmart.csv",
        )
        cmd.add_argument(
            "--export",
            action="store_true",
            help="Write results as CSV under <WALMART_DATA_ROOT>/c_processed/reports",
        )
    return p


def _list_names() -> str:
    lines = ["Catalog questions:"]
    for question in list_questions():
        lines.append(f"  {question.name:<34} {question.description}")
    lines.append("")
    lines.append("Computations:")
    for name in COMPUTATIONS:
        lines.append(f"  {name}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Process exit code: 0 when every computation succeeded, 1 otherwise.
    """
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if args.command == "list":
        print(_list_names())
        return 0

    paths = DataPaths.from_env()
    source = args.file or paths.raw_dataset

    try:
        store = TransactionStore.from_source(source)
    except (ConfigError, DataFormatError) as e:
        logger.error("Could not load %s: %s", source, e)
        return 1

    try:
        if args.command == "run":
            result = run(store, args.name, parse_params(args.param))
            print(format_result_for_console(result))
            if args.export:
                export_result(paths, result)
            return 0 if result.ok else 1

        results = run_catalog(store)
        print(format_catalog_for_console(results))
        if args.export:
            written = export_results(paths, results)
            print(f"\nExported {len(written)} report(s) to {paths.reports}")
        return 0 if all(r.ok for r in results) else 1
    except ParameterError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
