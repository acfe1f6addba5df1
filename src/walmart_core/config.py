"""Filesystem configuration for walmart-core.

This module provides a single, simple configuration class used by the
loader, the exporter and the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATA_ROOT_ENV = "WALMART_DATA_ROOT"
DEFAULT_DATA_ROOT = "data"
DATASET_FILENAME = "walmart.csv"


@dataclass
class DataPaths:
    """All filesystem paths used by walmart-core.

    Attributes:
        data_root: Root directory for the dataset and the exported reports.

    Directory Structure:
        data_root/
        ├── a_raw/
        │   └── walmart.csv      # the transactions table
        └── c_processed/
            └── reports/         # one CSV per computation
                └── _meta/       # one JSON run record per computation

    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> DataPaths:
        """Create DataPaths from a root directory.

        Args:
            data_root: Root directory for walmart-core data.

        Returns:
            DataPaths instance.

        Examples:
            >>> paths = DataPaths.from_root("data")
            >>> paths.raw_dataset
            PosixPath('data/a_raw/walmart.csv')

        """
        if isinstance(data_root, str):
            data_root = Path(data_root)
        return cls(data_root=data_root)

    @classmethod
    def from_env(cls) -> DataPaths:
        """Create DataPaths from the WALMART_DATA_ROOT environment variable."""
        return cls.from_root(os.environ.get(DATA_ROOT_ENV, DEFAULT_DATA_ROOT))

    @property
    def raw_dataset(self) -> Path:
        """The flat transactions CSV."""
        return self.data_root / "a_raw" / DATASET_FILENAME

    @property
    def reports(self) -> Path:
        """Exported computation results."""
        return self.data_root / "c_processed" / "reports"

    def ensure_dirs(self) -> None:
        """Create all directories in the data structure."""
        for path in [self.raw_dataset.parent, self.reports]:
            path.mkdir(parents=True, exist_ok=True)
