"""CSV export of stored locations and clusters."""

import csv
import logging
from collections.abc import Sequence
from pathlib import Path

from .types import ClusterAggregate, LocationRecord
from .utils import PathNormalizer


class CSVExporter:
    """Handles CSV export functionality."""

    LOCATION_FIELDS = ["id", "latitude", "longitude", "capture_date", "country", "city", "source_file_name"]
    CLUSTER_FIELDS = ["id", "detail_level", "latitude", "longitude", "country", "city", "count", "capture_date"]

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.path_normalizer = PathNormalizer()

    def export_locations(self, locations: Sequence[LocationRecord], csv_path: str) -> bool:
        """Export stored locations to a CSV file."""
        rows = [location.to_dict() for location in locations]
        return self._write(rows, self.LOCATION_FIELDS, csv_path, "locations")

    def export_clusters(self, clusters: Sequence[ClusterAggregate], csv_path: str) -> bool:
        """Export cluster aggregates to a CSV file; visit dates are left out."""
        rows = [cluster.to_dict() for cluster in clusters]
        return self._write(rows, self.CLUSTER_FIELDS, csv_path, "clusters")

    def _write(self, rows: list[dict], fieldnames: list[str], csv_path: str, label: str) -> bool:
        if not rows:
            self.logger.info(f"No {label} to export.")
            return False

        path = Path(self.path_normalizer.normalize_path(csv_path))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", newline="", encoding="utf-8") as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=fieldnames, extrasaction="ignore")
                writer.writeheader()
                writer.writerows(rows)

            self.logger.info(f"Exported {len(rows)} {label} to {path}")
            return True
        except (OSError, IOError) as e:
            self.logger.error(f"Error writing CSV file: {e}")
            return False
