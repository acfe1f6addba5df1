"""File export of computation results.

Each result is written to ``<reports>/<name>.csv`` (UTF-8 with BOM so Excel
on Windows shows accents correctly) and recorded in
``<reports>/_meta/<name>.json``. Failed computations get a metadata record
with their error and no CSV.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from walmart_core.analytics.engine import ComputationResult
from walmart_core.config import DataPaths

logger = logging.getLogger(__name__)


@dataclass
class ReportMetadata:
    """Metadata for an exported computation.

    Attributes:
        name: Computation name.
        status: "ok" or "failed".
        rows: Number of output rows (0 when failed).
        last_run: ISO timestamp of the export.
        error: Failure message, if any.
    """

    name: str
    status: str
    rows: int
    last_run: str
    error: Optional[str] = None


def _meta_path(reports_dir: Path, name: str) -> Path:
    """Get path to the metadata file for a computation."""
    return reports_dir / "_meta" / f"{name}.json"


def report_path(paths: DataPaths, name: str) -> Path:
    """Path of the CSV export for a computation."""
    return paths.reports / f"{name}.csv"


def write_metadata(paths: DataPaths, metadata: ReportMetadata) -> None:
    """Write the metadata record for an export."""
    path = _meta_path(paths.reports, metadata.name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(metadata), indent=2))
    logger.debug("Wrote metadata: %s", path)


def read_metadata(paths: DataPaths, name: str) -> Optional[ReportMetadata]:
    """Read the metadata record for a computation, if it exists."""
    path = _meta_path(paths.reports, name)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
        return ReportMetadata(**data)
    except (ValueError, TypeError) as e:
        logger.warning("Error reading metadata %s: %s", path, e)
        return None


def export_result(paths: DataPaths, result: ComputationResult) -> Optional[Path]:
    """Export one result and record its metadata.

    Args:
        paths: DataPaths configuration.
        result: ComputationResult from the engine.

    Returns:
        Path of the written CSV, or None for a failed computation.

    """
    paths.ensure_dirs()
    output_path = None

    if result.ok and result.rows is not None:
        output_path = report_path(paths, result.name)
        result.rows.to_csv(output_path, index=False, encoding="utf-8-sig")
        logger.info("Saved %s (%d rows)", output_path, len(result.rows))
    else:
        logger.warning("Not exporting %s: %s", result.name, result.error)

    write_metadata(
        paths,
        ReportMetadata(
            name=result.name,
            status=result.status,
            rows=0 if result.rows is None else len(result.rows),
            last_run=datetime.now().isoformat(),
            error=result.error,
        ),
    )
    return output_path


def export_results(paths: DataPaths, results: list[ComputationResult]) -> list[Path]:
    """Export every successful result; returns the written CSV paths."""
    written = []
    for result in results:
        output_path = export_result(paths, result)
        if output_path is not None:
            written.append(output_path)
    return written
