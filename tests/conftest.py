"""Pytest configuration and shared fixtures for travel_tracker tests."""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import Mock

import pytest
from PIL import ExifTags, Image
from PIL.TiffImagePlugin import IFDRational

from travel_tracker.storage import LocationRepository
from travel_tracker.types import Coordinate, LocationRecord


# =============================================================================
# Test Configuration
# =============================================================================

def pytest_configure(config):
    """Register the markers used by the suite."""
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "e2e: scenarios spanning several components")


@pytest.fixture
def temp_dir():
    """Temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def fixed_now():
    """The moment tests treat as "now"."""
    return datetime(2024, 6, 15, 12, 0, 0)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock(fixed_now):
    """Controllable clock starting at fixed_now."""
    return FakeClock(fixed_now)


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def make_record():
    """Factory for stored location records."""
    def _make(
        record_id=None,
        latitude=48.8566,
        longitude=2.3522,
        capture_date=datetime(2024, 5, 1, 10, 0, 0),
        country="France",
        city="Paris",
        source_file_name=None,
    ):
        return LocationRecord(
            id=record_id,
            coordinate=Coordinate(latitude, longitude),
            capture_date=capture_date,
            country=country,
            city=city,
            source_file_name=source_file_name,
        )
    return _make


@pytest.fixture
def sample_locations(make_record):
    """Three Paris photos, one London photo and one unresolved photo."""
    return [
        make_record(1, 48.8566, 2.3522, datetime(2024, 5, 1, 10, 0), "France", "Paris", "paris1.jpg"),
        make_record(2, 48.8606, 2.3376, datetime(2024, 5, 2, 11, 0), "France", "Paris", "paris2.jpg"),
        make_record(3, 51.5074, -0.1278, datetime(2024, 4, 20, 9, 0), "United Kingdom", "London", "london.jpg"),
        make_record(4, 48.8530, 2.3499, datetime(2024, 5, 3, 12, 0), "France", "Paris", "paris3.jpg"),
        make_record(5, 10.0, 10.0, datetime(2024, 3, 1, 8, 0), "Unknown", "Unknown", "nowhere.jpg"),
    ]


@pytest.fixture
def google_paris_results():
    """Raw Google Geocoding results for a point in Paris."""
    return [
        {
            "address_components": [
                {"long_name": "Paris", "short_name": "Paris", "types": ["locality", "political"]},
                {"long_name": "Île-de-France", "short_name": "IDF",
                 "types": ["administrative_area_level_1", "political"]},
                {"long_name": "France", "short_name": "FR", "types": ["country", "political"]},
            ],
            "formatted_address": "Paris, France",
            "types": ["locality", "political"],
        },
        {
            "address_components": [
                {"long_name": "France", "short_name": "FR", "types": ["country", "political"]},
            ],
            "formatted_address": "France",
            "types": ["country", "political"],
        },
    ]


@pytest.fixture
def sample_toml_config():
    """Sample TOML configuration content."""
    return """# Test configuration file
[geocoding]
api_key = "file-key-123456"
timeout = 5
user_agent = "travel_tracker_tests"

[cache]
max_size = 50
ttl_days = 2
precision = 0.1

[storage]
database = "from_file.json"

[import]
recursive = false
max_images = 25
months = 4

[output]
verbose = true
"""


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_logger():
    """Mock logger for testing."""
    logger = Mock()
    logger.info = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.debug = Mock()
    return logger


@pytest.fixture
def mock_geocoder(google_paris_results):
    """Mock reverse geocoder whose results carry the raw Google payload."""
    geocoder = Mock()
    geocoder.reverse.return_value = [Mock(raw=raw) for raw in google_paris_results]
    return geocoder


@pytest.fixture
def repository(mock_logger):
    """In-memory location repository."""
    return LocationRepository(mock_logger)


# =============================================================================
# File System Fixtures
# =============================================================================

@pytest.fixture
def sample_config_file(temp_dir, sample_toml_config):
    """Create a sample TOML configuration file."""
    config_file = temp_dir / "test_config.toml"
    config_file.write_text(sample_toml_config)
    return config_file


# =============================================================================
# Test Utilities
# =============================================================================

class TestUtils:
    """Utility functions for tests."""

    @staticmethod
    def _dms(value: float) -> tuple:
        degrees = int(value)
        minutes_float = (value - degrees) * 60
        minutes = int(minutes_float)
        seconds = (minutes_float - minutes) * 60
        return (
            IFDRational(degrees, 1),
            IFDRational(minutes, 1),
            IFDRational(round(seconds * 10000), 10000),
        )

    @staticmethod
    def create_photo(
        file_path: Path,
        latitude: float | None = None,
        longitude: float | None = None,
        taken: str | None = None,
        digitized: str | None = None,
        modified: str | None = None,
    ) -> Path:
        """Write a small JPEG carrying the given GPS position and EXIF timestamps."""
        file_path.parent.mkdir(parents=True, exist_ok=True)
        image = Image.new("RGB", (8, 8), "white")
        exif = Image.Exif()

        if modified is not None:
            exif[ExifTags.Base.DateTime] = modified

        exif_ifd = {}
        if taken is not None:
            exif_ifd[ExifTags.Base.DateTimeOriginal] = taken
        if digitized is not None:
            exif_ifd[ExifTags.Base.DateTimeDigitized] = digitized
        if exif_ifd:
            exif[ExifTags.IFD.Exif] = exif_ifd

        if latitude is not None and longitude is not None:
            exif[ExifTags.IFD.GPSInfo] = {
                ExifTags.GPS.GPSLatitudeRef: "N" if latitude >= 0 else "S",
                ExifTags.GPS.GPSLatitude: TestUtils._dms(abs(latitude)),
                ExifTags.GPS.GPSLongitudeRef: "E" if longitude >= 0 else "W",
                ExifTags.GPS.GPSLongitude: TestUtils._dms(abs(longitude)),
            }

        image.save(file_path, format="JPEG", exif=exif)
        return file_path

    @staticmethod
    def set_mtime(file_path: Path, moment: datetime) -> None:
        """Set a file's modification time."""
        import os
        timestamp = moment.timestamp()
        os.utime(file_path, (timestamp, timestamp))


@pytest.fixture
def test_utils():
    """Test utilities fixture."""
    return TestUtils
