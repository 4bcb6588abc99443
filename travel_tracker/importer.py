"""Batch import of photos into stored locations."""

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime
from pathlib import Path

from .constants import Constants
from .exceptions import ImportRequestError, PhotoMetadataError
from .geocoding import GeoResolver
from .gps import PhotoMetadataReader
from .storage import LocationRepository
from .types import ImportSummary, PhotoLocation
from .upsert import LocationUpserter
from .utils import DateParser, PathNormalizer


class PhotoImporter:
    """
    Turns photos into stored locations.

    Each photo goes through the same pipeline: read GPS and capture date,
    resolve the coordinate to a city and country, then upsert the result.
    A failing photo is logged and counted without stopping the batch, and
    the repository is saved once when the batch is done.

    Attributes:
        reader (PhotoMetadataReader): EXIF reader.
        resolver (GeoResolver): Coordinate to place resolution.
        upserter (LocationUpserter): Reconciliation with stored records.
        repository (LocationRepository): Record storage, saved after each batch.
        logger (logging.Logger): Logger instance for import events.
    """

    def __init__(
        self,
        reader: PhotoMetadataReader,
        resolver: GeoResolver,
        upserter: LocationUpserter,
        repository: LocationRepository,
        logger: logging.Logger,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.reader = reader
        self.resolver = resolver
        self.upserter = upserter
        self.repository = repository
        self.logger = logger
        self.clock = clock

    def process_files(self, paths: Iterable[str | Path]) -> ImportSummary:
        """
        Import explicitly chosen photos.

        No date filter applies; a photo without a capture date is stamped
        with the import time.

        Raises:
            ImportRequestError: If no files were given.
        """
        files = [Path(path) for path in paths]
        if not files:
            raise ImportRequestError("No files uploaded")

        self.logger.info(f"Processing {len(files)} photos")
        summary = ImportSummary()
        for path in files:
            summary.processed += 1
            self._import_photo(path, summary)
        return self._finish(summary)

    def import_directory(
        self,
        directory: str,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
        recursive: bool = True,
        max_images: int | None = None,
    ) -> ImportSummary:
        """
        Import the photos of a directory modified within a date range.

        Args:
            directory: Directory to scan; ``~`` is expanded. A Photos library
                bundle is scanned through its image folders.
            date_from: Start of the range, defaults to two months before now.
            date_to: End of the range, defaults to now.
            recursive: Whether to descend into subdirectories.
            max_images: Keep only this many of the most recently modified files.

        Raises:
            ImportRequestError: If the directory is missing or holds no
                matching image files.
        """
        if not directory or not directory.strip():
            raise ImportRequestError("Directory path is required")

        normalized = PathNormalizer.normalize_path(directory.strip())
        if PathNormalizer.is_photos_library(normalized):
            self.logger.info(f"Detected Photos library: {normalized}")
            return self.import_library(normalized, date_from, date_to, max_images)

        root = Path(normalized)
        if not root.is_dir():
            raise ImportRequestError(f"Directory not found: {directory}")

        range_from, range_to = self._date_range(date_from, date_to)
        files = self._collect_images([root], recursive, range_from, range_to, max_images)
        if not files:
            raise ImportRequestError(f"No image files found in directory matching criteria: {directory}")

        return self._import_batch(files, str(root), range_from, range_to)

    def import_recent(
        self,
        library_path: str | None = None,
        months: int = Constants.DEFAULT_IMPORT_MONTHS,
        max_images: int | None = None,
    ) -> ImportSummary:
        """Import photos of the last ``months`` months from a Photos library."""
        if months < 1:
            raise ImportRequestError(f"Months must be at least 1, got {months}")

        now = self.clock()
        library = library_path or str(PathNormalizer.default_photos_library())
        return self.import_library(library, DateParser.subtract_months(now, months), now, max_images)

    def import_library(
        self,
        library_path: str,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
        max_images: int | None = None,
    ) -> ImportSummary:
        """
        Import photos stored inside a macOS Photos library bundle.

        Raises:
            ImportRequestError: If the library or its image folders are missing.
        """
        library = Path(PathNormalizer.normalize_path(str(library_path)))
        if not library.is_dir():
            raise ImportRequestError(f"Photos library not found: {library}")

        folders = [library.joinpath(*parts) for parts in Constants.PHOTOS_LIBRARY_FOLDERS]
        folders = [folder for folder in folders if folder.is_dir()]
        if not folders:
            raise ImportRequestError(f"No photo folders found in Photos library: {library}")

        range_from, range_to = self._date_range(date_from, date_to)
        files = self._collect_images(folders, True, range_from, range_to, max_images)
        if not files:
            raise ImportRequestError(f"No photos found in Photos library matching criteria: {library}")

        return self._import_batch(files, str(library), range_from, range_to)

    def _date_range(
        self, date_from: date | datetime | None, date_to: date | datetime | None
    ) -> tuple[datetime, datetime]:
        if date_to is None:
            range_to = self.clock()
        elif isinstance(date_to, datetime):
            range_to = date_to
        else:
            range_to = DateParser.end_of_day(date_to)

        if date_from is None:
            range_from = DateParser.subtract_months(range_to, Constants.DEFAULT_IMPORT_MONTHS)
        elif isinstance(date_from, datetime):
            range_from = date_from
        else:
            range_from = DateParser.start_of_day(date_from)

        if range_from > range_to:
            raise ImportRequestError(
                f"Start date {range_from.date()} is after end date {range_to.date()}"
            )
        return range_from, range_to

    def _collect_images(
        self,
        roots: list[Path],
        recursive: bool,
        date_from: datetime,
        date_to: datetime,
        max_images: int | None,
    ) -> list[Path]:
        """Image files modified within the range, newest first."""
        found: dict[Path, datetime] = {}
        for root in roots:
            candidates = root.rglob("*") if recursive else root.glob("*")
            for path in candidates:
                if not self.reader.is_image_file(path) or path in found:
                    continue
                try:
                    if not path.is_file():
                        continue
                    modified = datetime.fromtimestamp(path.stat().st_mtime)
                except OSError as e:
                    self.logger.warning(f"Cannot access {path}: {e}")
                    continue
                if DateParser.is_in_range(modified, date_from, date_to):
                    found[path] = modified

        files = sorted(found, key=found.get, reverse=True)
        if max_images is not None and max_images > 0:
            files = files[:max_images]
        self.logger.info(f"Found {len(files)} image files to process")
        return files

    def _import_batch(
        self, files: list[Path], source: str, date_from: datetime, date_to: datetime
    ) -> ImportSummary:
        summary = ImportSummary(source_path=source, date_from=date_from, date_to=date_to)
        for path in files:
            summary.processed += 1
            self._import_photo(path, summary, (date_from, date_to))
        return self._finish(summary)

    def _import_photo(
        self,
        path: Path,
        summary: ImportSummary,
        date_range: tuple[datetime, datetime] | None = None,
    ) -> None:
        """Run one photo through the pipeline, recording the result in the summary."""
        try:
            metadata = self.reader.read(path)
            if metadata.coordinate is None:
                summary.no_gps += 1
                self.logger.info(f"No GPS data found in {path.name}")
                return

            capture_date = metadata.capture_date
            if date_range is not None:
                if not DateParser.is_in_range(capture_date, *date_range):
                    summary.skipped_for_date += 1
                    self.logger.debug(f"Skipping {path.name}: capture date {capture_date} outside range")
                    return
            elif capture_date is None:
                capture_date = self.clock()

            coordinate = metadata.coordinate
            city, country = self.resolver.resolve(coordinate.latitude, coordinate.longitude)
            result = self.upserter.upsert(
                PhotoLocation(
                    coordinate=coordinate,
                    capture_date=capture_date,
                    city=city,
                    country=country,
                    file_name=path.name,
                )
            )
            summary.record(result)
            self.logger.debug(f"{path.name}: {city}, {country} ({result.status.value})")
        except PhotoMetadataError as e:
            summary.failed += 1
            self.logger.error(f"Error processing photo {path.name}: {e}")
        except Exception as e:  # pylint: disable=broad-exception-caught
            summary.failed += 1
            self.logger.error(f"Unexpected error processing photo {path.name}: {e}")

    def _finish(self, summary: ImportSummary) -> ImportSummary:
        self.repository.save()
        self.logger.info(
            f"Processed {summary.processed} photos: {summary.new} new, "
            f"{summary.updated} updated, {summary.seen} already stored, "
            f"{summary.no_gps} without GPS, {summary.skipped} skipped"
        )
        return summary
