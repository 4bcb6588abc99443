"""Travel statistics over the stored locations."""

import logging

from .clustering import SpatialAggregator
from .storage import LocationRepository
from .types import ClusterAggregate, DetailLevel, LocationRecord, is_known_place


class StatisticsService:
    """Read-side queries: counts, raw locations and clustered views."""

    CLUSTER_LEVELS = {
        "country": DetailLevel.COUNTRY,
        "city": DetailLevel.CITY,
    }

    def __init__(
        self,
        repository: LocationRepository,
        aggregator: SpatialAggregator,
        logger: logging.Logger,
    ):
        self.repository = repository
        self.aggregator = aggregator
        self.logger = logger

    def summary(self, year: int | None = None) -> dict:
        """
        Count visited countries, cities and photos.

        Args:
            year: Restrict to locations captured in this year.

        Returns:
            dict with countries_count, countries (first seen order),
            cities_count and photos_count.
        """
        records = self.repository.by_year(year)

        countries: list[str] = []
        cities: set[tuple[str, str]] = set()
        for record in records:
            if is_known_place(record.country) and record.country not in countries:
                countries.append(record.country)
            if is_known_place(record.city):
                cities.add((record.city, record.country))

        return {
            "year": year,
            "countries_count": len(countries),
            "countries": countries,
            "cities_count": len(cities),
            "photos_count": len(records),
        }

    def locations(self, year: int | None = None) -> list[LocationRecord]:
        return self.repository.by_year(year)

    def clustered_locations(self, year: int | None = None, cluster_by: str = "city") -> list[ClusterAggregate]:
        """Locations merged per city or per country."""
        try:
            detail_level = self.CLUSTER_LEVELS[cluster_by]
        except KeyError as e:
            raise ValueError(f"cluster_by must be one of {sorted(self.CLUSTER_LEVELS)}, got {cluster_by!r}") from e
        return self.aggregator.aggregate_at(self.repository.by_year(year), detail_level)

    def map_clusters(self, zoom: int, year: int | None = None) -> list[ClusterAggregate]:
        """Locations clustered for a map shown at the given zoom level."""
        records = self.repository.by_year(year)
        self.logger.debug(f"Clustering {len(records)} locations for zoom {zoom}")
        return self.aggregator.aggregate(records, zoom)
