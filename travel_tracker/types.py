"""Type definitions for the travel tracker application."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .constants import Constants
from .utils import DateParser


def normalize_place(value: str | None) -> str:
    """Return a place name, or the Unknown sentinel for None/blank values."""
    if value is None:
        return Constants.UNKNOWN
    value = value.strip()
    return value if value else Constants.UNKNOWN


def is_known_place(value: str | None) -> bool:
    """Check if a place name holds a real value rather than the sentinel."""
    return normalize_place(value) != Constants.UNKNOWN


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float


@dataclass
class PhotoMetadata:
    """Location-relevant metadata read from a single photo."""
    coordinate: Coordinate | None = None
    capture_date: datetime | None = None


@dataclass
class PhotoLocation:
    """A resolved photo location waiting to be stored."""
    coordinate: Coordinate
    capture_date: datetime
    city: str
    country: str
    file_name: str

    def __post_init__(self):
        self.city = normalize_place(self.city)
        self.country = normalize_place(self.country)


@dataclass
class LocationRecord:
    """A stored location derived from one photo."""
    id: int | None
    coordinate: Coordinate
    capture_date: datetime
    country: str = Constants.UNKNOWN
    city: str = Constants.UNKNOWN
    source_file_name: str | None = None

    def __post_init__(self):
        self.country = normalize_place(self.country)
        self.city = normalize_place(self.city)
        self.capture_date = DateParser.to_local_naive(self.capture_date)

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    def to_dict(self) -> dict:
        """Serialize the record to JSON-compatible values."""
        return {
            "id": self.id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "capture_date": self.capture_date.isoformat(),
            "country": self.country,
            "city": self.city,
            "source_file_name": self.source_file_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LocationRecord":
        """Build a record from the output of to_dict()."""
        return cls(
            id=data.get("id"),
            coordinate=Coordinate(float(data["latitude"]), float(data["longitude"])),
            capture_date=datetime.fromisoformat(data["capture_date"]),
            country=data.get("country"),
            city=data.get("city"),
            source_file_name=data.get("source_file_name"),
        )


@dataclass(frozen=True)
class CacheEntry:
    """A cached place name and the moment it was stored."""
    city: str
    country: str
    cached_at: datetime


@dataclass
class CacheStats:
    """Snapshot of the location cache."""
    size: int
    oldest_entry: datetime | None
    newest_entry: datetime | None
    precision: float
    ttl_days: float

    def to_dict(self) -> dict:
        return {
            "size": self.size,
            "oldest_entry": self.oldest_entry.isoformat() if self.oldest_entry else None,
            "newest_entry": self.newest_entry.isoformat() if self.newest_entry else None,
            "precision": self.precision,
            "ttl_days": self.ttl_days,
        }


class DetailLevel(str, Enum):
    """Granularity at which stored locations are clustered."""
    COUNTRY = "country"
    CITY = "city"
    AREA = "area"
    POINT = "point"


@dataclass
class ClusterAggregate:
    """A renderable group of stored locations."""
    id: str
    latitude: float
    longitude: float
    country: str
    city: str
    count: int
    capture_date: datetime
    visit_dates: list[datetime]
    detail_level: DetailLevel

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "country": self.country,
            "city": self.city,
            "count": self.count,
            "capture_date": self.capture_date.isoformat(),
            "visit_dates": [visit.isoformat() for visit in self.visit_dates],
            "detail_level": self.detail_level.value,
        }


class ResolutionOutcome(str, Enum):
    """Step of the resolution chain that produced (or failed to produce) a place."""
    CACHE_HIT = "cache_hit"
    PROVIDER_OK = "provider_ok"
    PROVIDER_FAILED = "provider_failed"
    FALLBACK_MATCHED = "fallback_matched"
    FALLBACK_UNMATCHED = "fallback_unmatched"


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a coordinate, with the trail of steps taken."""
    city: str
    country: str
    outcomes: tuple[ResolutionOutcome, ...]

    @property
    def outcome(self) -> ResolutionOutcome:
        return self.outcomes[-1]

    @property
    def place(self) -> tuple[str, str]:
        return self.city, self.country


class UpsertStatus(str, Enum):
    """What the upserter did with an incoming photo location."""
    NEW = "new"
    UPDATED = "updated"
    SEEN = "seen"


@dataclass
class UpsertResult:
    """Stored record for a photo and how it was reconciled."""
    record: LocationRecord
    status: UpsertStatus


@dataclass
class ImportSummary:
    """Tally of one photo import batch."""
    processed: int = 0
    new: int = 0
    updated: int = 0
    seen: int = 0
    skipped_for_date: int = 0
    no_gps: int = 0
    failed: int = 0
    locations: list[LocationRecord] = field(default_factory=list)
    source_path: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

    @property
    def skipped(self) -> int:
        return self.skipped_for_date + self.failed

    @property
    def locations_found(self) -> int:
        return len(self.locations)

    def record(self, result: UpsertResult) -> None:
        """Count an upsert result and keep its record for the caller."""
        if result.status is UpsertStatus.NEW:
            self.new += 1
        elif result.status is UpsertStatus.UPDATED:
            self.updated += 1
        else:
            self.seen += 1
        self.locations.append(result.record)

    def to_dict(self) -> dict:
        data = {
            "processed": self.processed,
            "locations_found": self.locations_found,
            "new": self.new,
            "updated": self.updated,
            "skipped": self.skipped,
            "skipped_for_date": self.skipped_for_date,
            "failed": self.failed,
            "no_gps": self.no_gps,
            "locations": [location.to_dict() for location in self.locations],
        }
        if self.source_path is not None:
            data["source_path"] = self.source_path
        if self.date_from is not None or self.date_to is not None:
            data["date_range"] = {
                "from": self.date_from.isoformat() if self.date_from else None,
                "to": self.date_to.isoformat() if self.date_to else None,
            }
        return data


@dataclass
class GeocodingConfig:
    """Reverse geocoding configuration parameters."""
    api_key: str | None = None
    timeout: int = Constants.GEOCODING_TIMEOUT_SECONDS
    user_agent: str = Constants.DEFAULT_USER_AGENT


@dataclass
class CacheConfig:
    """Location cache configuration parameters."""
    max_size: int = Constants.CACHE_MAX_SIZE
    ttl_days: float = Constants.CACHE_EXPIRY_DAYS
    precision: float = Constants.CACHE_COORDINATE_PRECISION


@dataclass
class StorageConfig:
    """Location storage configuration parameters."""
    database: str | None = Constants.DEFAULT_DATABASE_FILE


@dataclass
class ImportConfig:
    """Defaults applied to photo imports."""
    recursive: bool = True
    max_images: int | None = None
    months: int = Constants.DEFAULT_IMPORT_MONTHS


@dataclass
class CommandConfig:
    """The sub-command to run and its arguments."""
    name: str | None = None
    paths: list[str] = field(default_factory=list)
    directory: str | None = None
    library_path: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    year: int | None = None
    zoom: int | None = None
    cluster_by: str | None = None
    csv_path: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    confirmed: bool = False


@dataclass
class ApplicationConfig:
    """Complete application configuration."""
    command: CommandConfig = field(default_factory=CommandConfig)
    geocoding: GeocodingConfig = field(default_factory=GeocodingConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    importing: ImportConfig = field(default_factory=ImportConfig)
    verbose: bool = False
