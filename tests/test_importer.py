"""Tests for the importer module.

These tests run real JPEG files through the import pipeline. Only the
reverse geocoder is replaced, by a resolver mock returning fixed places.
"""

from datetime import date, datetime, timedelta
from unittest.mock import Mock

import pytest

from travel_tracker.exceptions import ImportRequestError
from travel_tracker.gps import PhotoMetadataReader
from travel_tracker.importer import PhotoImporter
from travel_tracker.storage import LocationRepository
from travel_tracker.upsert import LocationUpserter


class TestPhotoImporter:
    """Test suite for PhotoImporter class."""

    @pytest.fixture(autouse=True)
    def _importer(self, mock_logger, temp_dir, test_utils, clock, fixed_now):
        self.mock_logger = mock_logger
        self.photos = temp_dir / "photos"
        self.photos.mkdir()
        self.utils = test_utils
        self.now = fixed_now
        self.database = temp_dir / "locations.json"
        self.repository = LocationRepository(mock_logger, self.database)
        self.resolver = Mock()
        self.resolver.resolve.return_value = ("Paris", "France")
        self.importer = PhotoImporter(
            PhotoMetadataReader(mock_logger),
            self.resolver,
            LocationUpserter(self.repository, mock_logger),
            self.repository,
            mock_logger,
            clock=clock,
        )

    def _photo(self, name, taken="2024:06:01 10:00:00", latitude=48.8566, longitude=2.3522,
               modified_days_ago=1, folder=None):
        path = self.utils.create_photo(
            (folder or self.photos) / name, latitude, longitude, taken=taken
        )
        self.utils.set_mtime(path, self.now - timedelta(days=modified_days_ago))
        return path

    # -------------------------------------------------------------------------
    # process_files
    # -------------------------------------------------------------------------

    @pytest.mark.unit
    def test_process_files_counts_every_outcome(self):
        """
        Test the per-photo tally.

        One photo resolves, one has no GPS tags and one is not an image at
        all; the batch still finishes and the database is saved.
        """
        good = self._photo("good.jpg")
        no_gps = self._photo("no_gps.jpg", latitude=None, longitude=None)
        broken = self.photos / "broken.jpg"
        broken.write_bytes(b"not an image")

        summary = self.importer.process_files([good, no_gps, broken])

        assert summary.processed == 3
        assert summary.new == 1
        assert summary.no_gps == 1
        assert summary.failed == 1
        assert summary.skipped == 1
        assert summary.locations_found == 1
        assert summary.locations[0].city == "Paris"
        assert summary.locations[0].source_file_name == "good.jpg"
        assert self.database.exists()
        self.mock_logger.error.assert_called_once()
        assert "broken.jpg" in self.mock_logger.error.call_args[0][0]

    @pytest.mark.unit
    def test_process_files_without_capture_date_uses_import_time(self):
        photo = self._photo("undated.jpg", taken=None)

        summary = self.importer.process_files([photo])

        assert summary.locations[0].capture_date == self.now

    @pytest.mark.unit
    def test_process_files_ignores_date_range(self):
        photo = self._photo("old.jpg", taken="2001:01:01 10:00:00", modified_days_ago=5000)

        summary = self.importer.process_files([photo])

        assert summary.new == 1
        assert summary.skipped_for_date == 0

    @pytest.mark.unit
    def test_process_files_requires_files(self):
        with pytest.raises(ImportRequestError):
            self.importer.process_files([])

    @pytest.mark.unit
    def test_resolver_error_counts_as_failed(self):
        first = self._photo("a.jpg")
        second = self._photo("b.jpg", latitude=51.5074, longitude=-0.1278)
        self.resolver.resolve.side_effect = [RuntimeError("boom"), ("London", "United Kingdom")]

        summary = self.importer.process_files([first, second])

        assert summary.failed == 1
        assert summary.new == 1
        assert summary.locations[0].city == "London"

    @pytest.mark.unit
    def test_reimport_enriches_unknown_location(self):
        """
        Scenario: a photo imported while geocoding was unavailable is imported again.

        The second import updates the stored record instead of adding one.
        """
        photo = self._photo("later.jpg")
        self.resolver.resolve.return_value = ("Unknown", "France")
        first = self.importer.process_files([photo])

        self.resolver.resolve.return_value = ("Paris", "France")
        second = self.importer.process_files([photo])
        third = self.importer.process_files([photo])

        assert (first.new, second.updated, third.seen) == (1, 1, 1)
        assert len(self.repository) == 1
        assert self.repository.all()[0].city == "Paris"

    # -------------------------------------------------------------------------
    # import_directory
    # -------------------------------------------------------------------------

    @pytest.mark.unit
    def test_import_directory_default_range(self):
        """
        Test the default two month window.

        Files modified before the window are not read at all; photos whose
        capture date is outside the window are read but skipped.
        """
        self._photo("recent.jpg", taken="2024:06:01 10:00:00", modified_days_ago=10)
        self._photo("stale.jpg", taken="2024:06:01 10:00:00", modified_days_ago=90)
        self._photo("old_capture.jpg", taken="2023:01:01 10:00:00", modified_days_ago=3)
        self._photo("no_date.jpg", taken=None, modified_days_ago=3)

        summary = self.importer.import_directory(str(self.photos))

        assert summary.processed == 3
        assert summary.new == 1
        assert summary.skipped_for_date == 2
        assert summary.date_to == self.now
        assert summary.date_from == datetime(2024, 4, 15, 12, 0, 0)
        assert summary.source_path == str(self.photos)

    @pytest.mark.unit
    def test_import_directory_explicit_dates_cover_whole_days(self):
        self._photo("june.jpg", taken="2024:06:10 23:30:00", modified_days_ago=5)

        summary = self.importer.import_directory(
            str(self.photos), date_from=date(2024, 6, 10), date_to=date(2024, 6, 10)
        )

        assert summary.new == 1
        assert summary.date_from == datetime(2024, 6, 10, 0, 0, 0)
        assert summary.date_to.date() == date(2024, 6, 10)

    @pytest.mark.unit
    def test_import_directory_rejects_inverted_range(self):
        with pytest.raises(ImportRequestError):
            self.importer.import_directory(
                str(self.photos), date_from=date(2024, 6, 10), date_to=date(2024, 6, 1)
            )

    @pytest.mark.unit
    def test_import_directory_newest_first_with_limit(self):
        self._photo("oldest.jpg", modified_days_ago=5)
        self._photo("newest.jpg", modified_days_ago=1)
        self._photo("middle.jpg", modified_days_ago=3)

        summary = self.importer.import_directory(str(self.photos), max_images=2)

        assert summary.processed == 2
        assert [r.source_file_name for r in summary.locations] == ["newest.jpg", "middle.jpg"]

    @pytest.mark.unit
    def test_import_directory_recursion(self):
        self._photo("top.jpg")
        self._photo("nested.jpg", folder=self.photos / "trip")
        (self.photos / "notes.txt").write_text("not a photo")

        flat = self.importer.import_directory(str(self.photos), recursive=False)
        deep = self.importer.import_directory(str(self.photos), recursive=True)

        assert flat.processed == 1
        assert deep.processed == 2

    @pytest.mark.unit
    def test_import_directory_missing_directory(self, temp_dir):
        with pytest.raises(ImportRequestError) as exc_info:
            self.importer.import_directory(str(temp_dir / "nope"))

        assert "Directory not found" in str(exc_info.value)

    @pytest.mark.unit
    def test_import_directory_requires_path(self):
        with pytest.raises(ImportRequestError):
            self.importer.import_directory("  ")

    @pytest.mark.unit
    def test_import_directory_without_matching_files(self):
        self._photo("stale.jpg", modified_days_ago=200)

        with pytest.raises(ImportRequestError) as exc_info:
            self.importer.import_directory(str(self.photos))

        assert "No image files found" in str(exc_info.value)

    @pytest.mark.unit
    def test_import_directory_routes_photos_library(self, temp_dir):
        library = temp_dir / "Trip.photoslibrary"
        self._photo("in_library.jpg", folder=library / "originals" / "A")
        self._photo("ignored.jpg", folder=library / "database")

        summary = self.importer.import_directory(str(library))

        assert summary.processed == 1
        assert summary.locations[0].source_file_name == "in_library.jpg"

    # -------------------------------------------------------------------------
    # import_recent / Photos library
    # -------------------------------------------------------------------------

    @pytest.mark.unit
    def test_import_recent_scans_library_folders(self, temp_dir):
        library = temp_dir / "Photos Library.photoslibrary"
        self._photo("a.jpg", folder=library / "Masters")
        self._photo("b.jpg", folder=library / "resources" / "derivatives", latitude=51.5, longitude=-0.12)

        summary = self.importer.import_recent(str(library), months=1)

        assert summary.processed == 2
        assert summary.new == 2
        assert summary.date_from == datetime(2024, 5, 15, 12, 0, 0)

    @pytest.mark.unit
    def test_import_recent_months_window(self, temp_dir):
        library = temp_dir / "Photos Library.photoslibrary"
        self._photo("fresh.jpg", folder=library / "originals", modified_days_ago=10)
        self._photo("older.jpg", folder=library / "originals", modified_days_ago=45)

        summary = self.importer.import_recent(str(library), months=1)

        assert summary.processed == 1

    @pytest.mark.unit
    def test_import_recent_missing_library(self, temp_dir):
        with pytest.raises(ImportRequestError) as exc_info:
            self.importer.import_recent(str(temp_dir / "Missing.photoslibrary"))

        assert "Photos library not found" in str(exc_info.value)

    @pytest.mark.unit
    def test_import_recent_library_without_photo_folders(self, temp_dir):
        library = temp_dir / "Empty.photoslibrary"
        (library / "database").mkdir(parents=True)

        with pytest.raises(ImportRequestError):
            self.importer.import_recent(str(library))

    @pytest.mark.unit
    def test_import_recent_rejects_bad_months(self):
        with pytest.raises(ImportRequestError):
            self.importer.import_recent(months=0)
