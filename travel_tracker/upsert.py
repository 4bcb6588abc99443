"""Reconciles photo locations with previously stored records."""

import logging

from .constants import Constants
from .storage import LocationRepository
from .types import (
    LocationRecord,
    PhotoLocation,
    UpsertResult,
    UpsertStatus,
    is_known_place,
)


class LocationUpserter:
    """
    Inserts a photo location or updates the record stored for the same photo.

    A stored record matches an incoming photo when the file name is equal,
    both coordinates differ by less than ``epsilon`` degrees and the capture
    timestamps fall on the same calendar date. A matched record only ever
    gains information: a city or country moves from Unknown to a known value,
    never from one known value to another.
    """

    def __init__(
        self,
        repository: LocationRepository,
        logger: logging.Logger,
        epsilon: float = Constants.MATCH_COORDINATE_EPSILON,
    ):
        self.repository = repository
        self.logger = logger
        self.epsilon = epsilon

    def find_match(self, photo: PhotoLocation) -> LocationRecord | None:
        """Return the stored record for the same photo, if any."""
        for record in self.repository.all():
            if self._matches(record, photo):
                return record
        return None

    def _matches(self, record: LocationRecord, photo: PhotoLocation) -> bool:
        return (
            record.source_file_name == photo.file_name
            and abs(record.latitude - photo.coordinate.latitude) < self.epsilon
            and abs(record.longitude - photo.coordinate.longitude) < self.epsilon
            and record.capture_date.date() == photo.capture_date.date()
        )

    def upsert(self, photo: PhotoLocation) -> UpsertResult:
        """
        Store a photo location.

        Returns:
            UpsertResult with status NEW for a created record, UPDATED when a
            stored record gained a city or country, SEEN when the stored
            record was left untouched.
        """
        existing = self.find_match(photo)

        if existing is None:
            record = self.repository.add(
                LocationRecord(
                    id=None,
                    coordinate=photo.coordinate,
                    capture_date=photo.capture_date,
                    country=photo.country,
                    city=photo.city,
                    source_file_name=photo.file_name,
                )
            )
            self.logger.debug(f"New location {record.id} for {photo.file_name}")
            return UpsertResult(record, UpsertStatus.NEW)

        updated = False
        if not is_known_place(existing.city) and is_known_place(photo.city):
            existing.city = photo.city
            updated = True
        if not is_known_place(existing.country) and is_known_place(photo.country):
            existing.country = photo.country
            updated = True

        if updated:
            self.repository.update(existing)
            return UpsertResult(existing, UpsertStatus.UPDATED)

        return UpsertResult(existing, UpsertStatus.SEEN)
