"""Utility classes for the travel tracker application."""

import calendar
import logging
import os
from datetime import datetime, date, time
from pathlib import Path

from .constants import Constants
from .exceptions import ConfigurationError


class LoggingSetup:
    """Handles logging configuration."""

    @staticmethod
    def setup_logging(level: int = logging.INFO) -> logging.Logger:
        """Set up logging configuration."""
        logging.basicConfig(
            level=level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        logger = logging.getLogger("travel_tracker")
        logger.setLevel(level)
        return logger


class PathNormalizer:
    """Handles path normalization across different platforms."""

    @staticmethod
    def normalize_path(path: str) -> str:
        """Expand a leading ~ and make the path absolute."""
        if not path:
            return path

        expanded = Path(os.path.expanduser(path))
        if not expanded.is_absolute():
            expanded = expanded.resolve()
        return str(expanded)

    @staticmethod
    def is_photos_library(path: str) -> bool:
        """Check if a path points at a macOS Photos library bundle."""
        return path.rstrip("/\\").lower().endswith(Constants.PHOTOS_LIBRARY_SUFFIX)

    @staticmethod
    def default_photos_library() -> Path:
        """Location of the current user's Photos library."""
        return Path.home() / "Pictures" / "Photos Library.photoslibrary"


class DateParser:
    """Handles date parsing and validation."""

    @staticmethod
    def parse_date(date_str: str, field_name: str) -> date:
        """Parse a date string in YYYY-MM-DD format."""
        if not date_str:
            raise ConfigurationError(f"Empty date string for {field_name}")

        try:
            return datetime.strptime(date_str, "%Y-%m-%d").date()
        except ValueError as e:
            raise ConfigurationError(f"Invalid date format for {field_name}: {date_str}. Use YYYY-MM-DD") from e

    @staticmethod
    def parse_exif_datetime(value) -> datetime | None:
        """
        Parse an EXIF timestamp ("YYYY:MM:DD HH:MM:SS").

        ISO-8601 strings are accepted as well, with any UTC offset converted to
        naive local time so all capture dates compare. Returns None for anything
        that cannot be parsed, including the all-zero placeholder some
        cameras write.
        """
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("ascii", errors="ignore")
        text = str(value).strip().strip("\x00").strip()
        if not text:
            return None

        try:
            return datetime.strptime(text[:19], Constants.EXIF_DATETIME_FORMAT)
        except ValueError:
            pass
        try:
            return DateParser.to_local_naive(datetime.fromisoformat(text))
        except ValueError:
            return None

    @staticmethod
    def to_local_naive(moment: datetime) -> datetime:
        """Convert an offset-aware timestamp to naive local time; naive ones pass through."""
        if moment.tzinfo is None:
            return moment
        return moment.astimezone().replace(tzinfo=None)

    @staticmethod
    def start_of_day(day: date) -> datetime:
        return datetime.combine(day, time.min)

    @staticmethod
    def end_of_day(day: date) -> datetime:
        return datetime.combine(day, time.max)

    @staticmethod
    def subtract_months(moment: datetime, months: int) -> datetime:
        """Go back a number of calendar months, clamping the day to the target month."""
        month_index = moment.year * 12 + (moment.month - 1) - months
        year, month_zero = divmod(month_index, 12)
        last_day = calendar.monthrange(year, month_zero + 1)[1]
        return moment.replace(year=year, month=month_zero + 1, day=min(moment.day, last_day))

    @staticmethod
    def is_in_range(
        moment: datetime | None, date_from: datetime | None, date_to: datetime | None
    ) -> bool:
        """Check if a capture timestamp falls within an inclusive range."""
        if moment is None:
            return False
        if date_from and moment < date_from:
            return False
        if date_to and moment > date_to:
            return False
        return True


class CoordinateGrid:
    """
    Snaps coordinates to a fixed grid step.

    Used for location cache keys and for area/point clustering. Values are
    formatted with as many decimals as the step has, so 48.8512 on a 0.05
    grid becomes "48.85".
    """

    def __init__(self, step: float):
        if step <= 0:
            raise ConfigurationError(f"Grid step must be positive, got {step}")
        self.step = step
        self.decimals = self._decimals_for(step)

    @staticmethod
    def _decimals_for(step: float) -> int:
        text = f"{step:.10f}".rstrip("0")
        return len(text.split(".")[1])

    def cell(self, latitude: float, longitude: float) -> tuple[int, int]:
        """Integer cell indices of a coordinate."""
        return round(latitude / self.step), round(longitude / self.step)

    def snap(self, value: float) -> float:
        return round(round(value / self.step) * self.step, self.decimals)

    def format_value(self, value: float) -> str:
        return f"{self.snap(value):.{self.decimals}f}"

    def key(self, latitude: float, longitude: float, separator: str = ":") -> str:
        return f"{self.format_value(latitude)}{separator}{self.format_value(longitude)}"
