"""Custom exceptions for the travel tracker application."""


class TravelTrackerError(Exception):
    """Base exception for travel tracker operations."""
    pass


class ConfigurationError(TravelTrackerError):
    """Raised when there are configuration-related errors."""
    pass


class InvalidCoordinatesError(ConfigurationError):
    """Raised when a latitude or longitude is outside its valid range."""
    pass


class PhotoMetadataError(TravelTrackerError):
    """Raised when a photo's metadata cannot be read."""
    pass


class FileOperationError(TravelTrackerError):
    """Raised when file operations fail."""
    pass


class ImportRequestError(TravelTrackerError):
    """Raised when an import request has no usable input."""
    pass
