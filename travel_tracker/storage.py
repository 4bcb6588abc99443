"""JSON-file persistence of location records."""

import json
import logging
from datetime import datetime
from pathlib import Path

from .exceptions import FileOperationError
from .types import LocationRecord


class LocationRepository:
    """
    Stores location records in memory and persists them to a JSON file.

    The file holds the records, the next id to hand out and the time of the
    last save. Without a database path the repository is purely in-memory,
    which is what tests and one-off resolutions use.

    Attributes:
        logger (logging.Logger): Logger instance for recording events and errors.
        database_path (Path | None): JSON file backing the repository.

    Methods:
        load() -> int:
            Replaces the in-memory records with the file contents.
        save() -> None:
            Writes all records to the database file.
        all() -> list[LocationRecord]:
            Every stored record in insertion order.
        add(record: LocationRecord) -> LocationRecord:
            Stores a new record, assigning its id.
        update(record: LocationRecord) -> None:
            Marks an existing record as changed.
        clear_all() -> int:
            Deletes every record.
    """

    def __init__(self, logger: logging.Logger, database_path: str | Path | None = None):
        self.logger = logger
        self.database_path = Path(database_path) if database_path else None
        self._records: list[LocationRecord] = []
        self._next_id = 1

        if self.database_path and self.database_path.exists():
            self.load()

    def load(self) -> int:
        """
        Load records from the database file.

        Returns:
            Number of records loaded.

        Raises:
            FileOperationError: If the file cannot be read or is not a valid database.
        """
        if not self.database_path:
            return 0

        try:
            with open(self.database_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            records = [LocationRecord.from_dict(item) for item in data.get("locations", [])]
        except (OSError, IOError) as e:
            raise FileOperationError(f"Could not read database {self.database_path}: {e}") from e
        except (json.JSONDecodeError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise FileOperationError(f"Corrupted database {self.database_path}: {e}") from e

        self._records = records
        highest_id = max((record.id or 0 for record in records), default=0)
        self._next_id = max(int(data.get("next_id", 1)), highest_id + 1)
        self.logger.debug(f"Loaded {len(records)} locations from {self.database_path}")
        return len(records)

    def save(self) -> None:
        """
        Write every record to the database file.

        Raises:
            FileOperationError: If the file cannot be written.
        """
        if not self.database_path:
            return

        data = {
            "next_id": self._next_id,
            "timestamp": datetime.now().isoformat(),
            "locations": [record.to_dict() for record in self._records],
        }
        try:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.database_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except (OSError, IOError) as e:
            raise FileOperationError(f"Could not write database {self.database_path}: {e}") from e
        self.logger.debug(f"Saved {len(self._records)} locations to {self.database_path}")

    def all(self) -> list[LocationRecord]:
        return list(self._records)

    def by_year(self, year: int | None) -> list[LocationRecord]:
        """Records captured in a given year, or all records when year is None."""
        if year is None:
            return self.all()
        return [record for record in self._records if record.capture_date.year == year]

    def add(self, record: LocationRecord) -> LocationRecord:
        """Store a new record and assign it the next id."""
        record.id = self._next_id
        self._next_id += 1
        self._records.append(record)
        return record

    def update(self, record: LocationRecord) -> None:
        """
        Register a change to a stored record.

        Records are held by reference, so the change is already visible; this
        only checks the record belongs to the repository.
        """
        if not any(stored is record for stored in self._records):
            raise FileOperationError(f"Location {record.id} is not stored in this repository")
        self.logger.debug(f"Updated location {record.id}: {record.city}, {record.country}")

    def clear_all(self) -> int:
        """Delete every record and persist the empty database."""
        count = len(self._records)
        self._records.clear()
        self.save()
        self.logger.info(f"Cleared {count} locations")
        return count

    def __len__(self) -> int:
        return len(self._records)
