"""GPS data and capture date extraction from photo metadata."""

import logging
import math
from datetime import datetime
from pathlib import Path

from PIL import ExifTags, Image, UnidentifiedImageError

from .constants import Constants
from .exceptions import PhotoMetadataError
from .types import Coordinate, PhotoMetadata
from .utils import DateParser


class PhotoMetadataReader:
    """Reads GPS coordinates and capture timestamps from image files."""

    # Checked in order: Exif sub-IFD tags first, then the main IFD.
    EXIF_DATE_TAGS = (ExifTags.Base.DateTimeOriginal, ExifTags.Base.DateTimeDigitized)
    MAIN_DATE_TAGS = (ExifTags.Base.DateTime,)

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.date_parser = DateParser()

    @staticmethod
    def is_image_file(path: str | Path) -> bool:
        """Check if a file is a supported image based on its file extension."""
        return Path(path).suffix.lower() in Constants.IMAGE_EXTENSIONS

    def read(self, image_path: str | Path) -> PhotoMetadata:
        """
        Extract GPS and capture date from a single image file.

        Args:
            image_path: Full path to the image file

        Returns:
            PhotoMetadata whose coordinate and capture_date are None when the
            image does not carry them.

        Raises:
            PhotoMetadataError: If the file cannot be opened as an image.
        """
        filename = Path(image_path).name
        try:
            with Image.open(image_path) as image:
                exif = image.getexif()
                gps_info = exif.get_ifd(ExifTags.IFD.GPSInfo)
                exif_info = exif.get_ifd(ExifTags.IFD.Exif)
                coordinate = self._get_coordinate(gps_info, filename)
                capture_date = self._extract_date_taken(exif, exif_info)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise PhotoMetadataError(f"Error reading {filename}. Corrupt file? {e}") from e

        return PhotoMetadata(coordinate=coordinate, capture_date=capture_date)

    def _get_coordinate(self, gps_info, filename: str) -> Coordinate | None:
        """Convert the GPS IFD into a decimal-degree coordinate."""
        if not gps_info:
            self.logger.debug(f"Image has no GPS data: {filename}")
            return None

        latitude = self._convert_dms_to_decimal(gps_info.get(ExifTags.GPS.GPSLatitude))
        longitude = self._convert_dms_to_decimal(gps_info.get(ExifTags.GPS.GPSLongitude))
        if latitude is None or longitude is None:
            self.logger.debug(f"Image has incomplete GPS data: {filename}")
            return None

        # Apply negative sign for South and West
        if self._ref(gps_info.get(ExifTags.GPS.GPSLatitudeRef)) == "S":
            latitude = -latitude
        if self._ref(gps_info.get(ExifTags.GPS.GPSLongitudeRef)) == "W":
            longitude = -longitude

        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            self.logger.debug(f"Image has out-of-range GPS data: {filename} ({latitude}, {longitude})")
            return None

        return Coordinate(latitude, longitude)

    @staticmethod
    def _ref(value) -> str:
        if isinstance(value, bytes):
            value = value.decode("ascii", errors="ignore")
        return str(value or "").strip("\x00 ").upper()

    @staticmethod
    def _convert_dms_to_decimal(dms) -> float | None:
        """
        Convert degrees, minutes, seconds (DMS) format to decimal degrees.

        Args:
            dms: A sequence of [degrees, minutes, seconds] rationals

        Returns:
            The decimal degree equivalent of the DMS values, or None if invalid
        """
        if not dms or len(dms) < 3:
            return None

        try:
            degrees, minutes, seconds = (float(part) for part in dms[:3])
        except (TypeError, ValueError, ZeroDivisionError):
            return None

        value = degrees + minutes / 60 + seconds / 3600
        if math.isnan(value) or math.isinf(value):
            return None
        return value

    def _extract_date_taken(self, exif, exif_info) -> datetime | None:
        """Extract date taken from EXIF data."""
        candidates = [exif_info.get(tag) for tag in self.EXIF_DATE_TAGS]
        candidates.extend(exif.get(tag) for tag in self.MAIN_DATE_TAGS)
        for value in candidates:
            parsed = self.date_parser.parse_exif_datetime(value)
            if parsed is not None:
                return parsed
        return None
