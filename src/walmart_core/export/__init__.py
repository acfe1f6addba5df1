"""Result exporters: console text and CSV files."""

from walmart_core.export.console import format_catalog_for_console, format_result_for_console
from walmart_core.export.files import (
    ReportMetadata,
    export_result,
    export_results,
    read_metadata,
)

__all__ = [
    "ReportMetadata",
    "export_result",
    "export_results",
    "format_catalog_for_console",
    "format_result_for_console",
    "read_metadata",
]
