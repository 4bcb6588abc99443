"""Constants and error codes for the travel tracker application."""


class Constants:
    """
    Constants used throughout the travel_tracker application.

    Attributes:
        UNKNOWN (str): Sentinel used for a city or country that could not be resolved.
        IMAGE_EXTENSIONS (set): Photo file extensions considered during imports.
        PHOTOS_LIBRARY_SUFFIX (str): Directory suffix of a macOS Photos library.
        PHOTOS_LIBRARY_FOLDERS (tuple): Folders inside a Photos library that hold images.
        CACHE_COORDINATE_PRECISION (float): Grid step of the location cache (~1 km).
        CACHE_EXPIRY_DAYS (int): Days before a cached location expires.
        CACHE_MAX_SIZE (int): Maximum number of cached locations.
        MATCH_COORDINATE_EPSILON (float): Coordinate tolerance when matching a stored photo.
        AREA_GRID_PRECISION (float): Grid step of area clusters (~5 km).
        POINT_GRID_PRECISION (float): Grid step of point clusters (~1 km).
        COUNTRY_MAX_ZOOM (int): Highest map zoom rendered at country level.
        CITY_MAX_ZOOM (int): Highest map zoom rendered at city level.
        AREA_MAX_ZOOM (int): Highest map zoom rendered at area level.
        VISIT_DATES_LIMIT (int): Number of visit dates carried by a cluster.
        DEFAULT_IMPORT_MONTHS (int): Default look-back window for imports.
        GOOGLE_MAPS_PLACEHOLDER_KEY (str): Placeholder that counts as "no API key".
        GOOGLE_RESULT_TYPES (str): Result types requested from the reverse geocoder.
        GEOCODING_TIMEOUT_SECONDS (int): Timeout for geocoding operations in seconds.
        DEFAULT_USER_AGENT (str): Default user agent string for HTTP requests.
        DEFAULT_DATABASE_FILE (str): Default JSON file holding stored locations.
        EXIF_DATETIME_FORMAT (str): Timestamp layout of EXIF date fields.

    Classes:
        ErrorCodes: Application exit codes indicating various error and success states.
    """

    UNKNOWN = "Unknown"

    IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".tif", ".tiff"}
    PHOTOS_LIBRARY_SUFFIX = ".photoslibrary"
    PHOTOS_LIBRARY_FOLDERS = (
        ("originals",),
        ("Masters",),
        ("resources", "masters"),
        ("resources", "derivatives"),
    )

    # Location cache
    CACHE_COORDINATE_PRECISION = 0.01
    CACHE_EXPIRY_DAYS = 7
    CACHE_MAX_SIZE = 1000

    # Matching a re-imported photo against stored records
    MATCH_COORDINATE_EPSILON = 0.0001

    # Map clustering
    AREA_GRID_PRECISION = 0.05
    POINT_GRID_PRECISION = 0.01
    COUNTRY_MAX_ZOOM = 3
    CITY_MAX_ZOOM = 6
    AREA_MAX_ZOOM = 10
    VISIT_DATES_LIMIT = 10

    DEFAULT_IMPORT_MONTHS = 2

    # Reverse geocoding
    GOOGLE_MAPS_PLACEHOLDER_KEY = "YOUR_API_KEY"
    GOOGLE_RESULT_TYPES = "locality|country"
    GEOCODING_TIMEOUT_SECONDS = 10
    DEFAULT_USER_AGENT = "travel_tracker"
    API_KEY_ENV_VAR = "GOOGLE_MAPS_API_KEY"

    DEFAULT_DATABASE_FILE = "travel_tracker.json"
    EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"

    class ErrorCodes:
        """
        ErrorCodes

        Integer exit codes returned by the travel-tracker command line.

        Attributes:
            SUCCESS (int): Operation completed successfully.
            INTERRUPTED (int): Operation was interrupted.
            INVALID_REQUEST (int): Import request had no usable input.
            INVALID_COORDINATES (int): Provided coordinates are invalid.
            FILE_OPERATION_ERROR (int): Error occurred reading or writing stored data.
            PHOTO_METADATA_ERROR (int): Error related to photo metadata.
            CONFIGURATION_ERROR (int): Error in application configuration.
            GENERAL_ERROR (int): General or unspecified error.
        """

        SUCCESS = 0
        INTERRUPTED = 1
        INVALID_REQUEST = 2
        INVALID_COORDINATES = 7
        FILE_OPERATION_ERROR = 17
        PHOTO_METADATA_ERROR = 18
        CONFIGURATION_ERROR = 19
        GENERAL_ERROR = 20
