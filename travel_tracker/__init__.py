"""
Travel Tracker - builds a travel history from GPS-tagged photos.

This package provides functionality to:
- Read GPS coordinates and capture dates from photo EXIF metadata
- Resolve coordinates to a city and country (Google Maps with a cache and an offline fallback)
- Import photos repeatedly without creating duplicate locations
- Cluster stored locations by country, city, area or point depending on map zoom
- Report visited countries and cities, and export locations to CSV
"""

__version__ = "1.0.0"
__author__ = "stbrie"

from .main import main

__all__ = ["main"]
