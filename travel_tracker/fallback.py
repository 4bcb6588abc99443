"""Offline heuristic that maps coordinates to a country and a handful of cities."""

from dataclasses import dataclass

from .constants import Constants


@dataclass(frozen=True)
class CityArea:
    """A city matched when a coordinate lies within ``radius`` degrees on both axes."""
    latitude: float
    longitude: float
    radius: float
    name: str

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            abs(latitude - self.latitude) < self.radius
            and abs(longitude - self.longitude) < self.radius
        )


@dataclass(frozen=True)
class CountryRegion:
    """A bounding box assigned to one country, with optional city areas inside it."""
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float
    country: str
    cities: tuple[CityArea, ...] = ()

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.min_lat <= latitude <= self.max_lat
            and self.min_lng <= longitude <= self.max_lng
        )

    def city_at(self, latitude: float, longitude: float) -> str:
        for city in self.cities:
            if city.contains(latitude, longitude):
                return city.name
        return Constants.UNKNOWN


# Checked in order; the first region containing the coordinate wins.
FALLBACK_REGIONS: tuple[CountryRegion, ...] = (
    CountryRegion(24, 49, -125, -66, "United States", (
        CityArea(40.71, -74.01, 1, "New York"),
        CityArea(34.05, -118.24, 1, "Los Angeles"),
        CityArea(41.88, -87.63, 1, "Chicago"),
        CityArea(37.77, -122.42, 1, "San Francisco"),
        CityArea(25.76, -80.19, 1, "Miami"),
        CityArea(29.76, -95.37, 1, "Houston"),
        CityArea(33.75, -84.39, 1, "Atlanta"),
    )),
    CountryRegion(50, 59, -10, 2, "United Kingdom", (
        CityArea(51.5, -0.13, 1, "London"),
    )),
    CountryRegion(43, 51, 2, 8, "France", (
        CityArea(48.85, 2.35, 1, "Paris"),
    )),
    CountryRegion(-44, -10, 110, 155, "Australia", (
        CityArea(-33.87, 151.21, 1, "Sydney"),
        CityArea(-37.81, 144.96, 1, "Melbourne"),
    )),
    CountryRegion(30, 46, 129, 146, "Japan", (
        CityArea(35.68, 139.77, 1, "Tokyo"),
        CityArea(34.67, 135.5, 1, "Osaka"),
    )),
    CountryRegion(5, 21, 97, 106, "Thailand", (
        CityArea(13.75, 100.5, 1, "Bangkok"),
    )),
)


def lookup_place(
    latitude: float,
    longitude: float,
    regions: tuple[CountryRegion, ...] = FALLBACK_REGIONS,
) -> tuple[str, str]:
    """
    Resolve a coordinate against the static region table.

    Returns:
        (city, country); either part is Unknown when nothing matched.
    """
    for region in regions:
        if region.contains(latitude, longitude):
            return region.city_at(latitude, longitude), region.country
    return Constants.UNKNOWN, Constants.UNKNOWN
