"""Zoom-dependent geographic clustering of stored locations."""

import logging
import re
from collections import Counter
from collections.abc import Sequence

from .constants import Constants
from .types import ClusterAggregate, DetailLevel, LocationRecord, is_known_place
from .utils import CoordinateGrid


class SpatialAggregator:
    """
    Groups stored locations into map clusters.

    The detail level follows the map zoom: whole countries when zoomed out,
    then cities, then ~5 km grid areas, then ~1 km grid points. Every input
    location is counted in exactly one returned cluster, so the counts always
    add up to the number of locations passed in.
    """

    def __init__(
        self,
        logger: logging.Logger,
        area_precision: float = Constants.AREA_GRID_PRECISION,
        point_precision: float = Constants.POINT_GRID_PRECISION,
        visit_dates_limit: int = Constants.VISIT_DATES_LIMIT,
    ):
        self.logger = logger
        self.grids = {
            DetailLevel.AREA: CoordinateGrid(area_precision),
            DetailLevel.POINT: CoordinateGrid(point_precision),
        }
        self.visit_dates_limit = visit_dates_limit

    @staticmethod
    def detail_level_for_zoom(zoom_level: int) -> DetailLevel:
        """Map a zoom level to a detail level (upper bounds are inclusive)."""
        if zoom_level <= Constants.COUNTRY_MAX_ZOOM:
            return DetailLevel.COUNTRY
        if zoom_level <= Constants.CITY_MAX_ZOOM:
            return DetailLevel.CITY
        if zoom_level <= Constants.AREA_MAX_ZOOM:
            return DetailLevel.AREA
        return DetailLevel.POINT

    def aggregate(self, locations: Sequence[LocationRecord], zoom_level: int) -> list[ClusterAggregate]:
        """Cluster locations at the detail level matching a map zoom."""
        return self.aggregate_at(locations, self.detail_level_for_zoom(zoom_level))

    def aggregate_at(
        self, locations: Sequence[LocationRecord], detail_level: DetailLevel
    ) -> list[ClusterAggregate]:
        """
        Cluster locations at an explicit detail level.

        Country and city levels merge records sharing a known name and return
        records with an Unknown name one by one. Area and point levels merge
        every record falling into the same grid cell.

        Args:
            locations: Stored locations to cluster.
            detail_level: Granularity of the clusters.

        Returns:
            list[ClusterAggregate]: Merged clusters in first-seen order,
                followed by single-record entries in input order.
        """
        if detail_level is DetailLevel.COUNTRY:
            aggregates = self._by_country(locations)
        elif detail_level is DetailLevel.CITY:
            aggregates = self._by_city(locations)
        else:
            aggregates = self._by_grid(locations, detail_level)

        self.logger.debug(
            f"Aggregated {len(locations)} locations into "
            f"{len(aggregates)} {detail_level.value} clusters"
        )
        return aggregates

    def _by_country(self, locations: Sequence[LocationRecord]) -> list[ClusterAggregate]:
        groups: dict[str, list[LocationRecord]] = {}
        individuals: list[LocationRecord] = []
        for record in locations:
            if is_known_place(record.country):
                groups.setdefault(record.country, []).append(record)
            else:
                individuals.append(record)

        aggregates = []
        for country, members in groups.items():
            cities = {member.city for member in members if is_known_place(member.city)}
            aggregates.append(
                self._build(
                    self._slug("country", country),
                    members,
                    country=country,
                    city=f"{len(cities)} cities",
                    detail_level=DetailLevel.COUNTRY,
                )
            )
        aggregates.extend(self._individual(record) for record in individuals)
        return aggregates

    def _by_city(self, locations: Sequence[LocationRecord]) -> list[ClusterAggregate]:
        groups: dict[tuple[str, str], list[LocationRecord]] = {}
        individuals: list[LocationRecord] = []
        for record in locations:
            if is_known_place(record.city):
                groups.setdefault((record.city, record.country), []).append(record)
            else:
                individuals.append(record)

        aggregates = [
            self._build(
                self._slug("city", city, country),
                members,
                country=country,
                city=city,
                detail_level=DetailLevel.CITY,
            )
            for (city, country), members in groups.items()
        ]
        aggregates.extend(self._individual(record) for record in individuals)
        return aggregates

    def _by_grid(
        self, locations: Sequence[LocationRecord], detail_level: DetailLevel
    ) -> list[ClusterAggregate]:
        grid = self.grids[detail_level]
        cells: dict[tuple[int, int], list[LocationRecord]] = {}
        for record in locations:
            cells.setdefault(grid.cell(record.latitude, record.longitude), []).append(record)

        aggregates = []
        for members in cells.values():
            first = members[0]
            cell_id = self._slug(
                detail_level.value,
                grid.format_value(first.latitude).replace(".", "p"),
                grid.format_value(first.longitude).replace(".", "p"),
            )
            aggregates.append(
                self._build(
                    cell_id,
                    members,
                    country=self._most_common(member.country for member in members),
                    city=self._most_common(member.city for member in members),
                    detail_level=detail_level,
                )
            )
        return aggregates

    @staticmethod
    def _most_common(values) -> str:
        # Counter keeps first-encountered order among equal counts.
        return Counter(values).most_common(1)[0][0]

    @staticmethod
    def _slug(*parts: str) -> str:
        return re.sub(r"\s+", "-", "-".join(parts).strip().lower())

    def _build(
        self,
        cluster_id: str,
        members: list[LocationRecord],
        country: str,
        city: str,
        detail_level: DetailLevel,
    ) -> ClusterAggregate:
        count = len(members)
        visit_dates = sorted((member.capture_date for member in members), reverse=True)
        return ClusterAggregate(
            id=cluster_id,
            latitude=sum(member.latitude for member in members) / count,
            longitude=sum(member.longitude for member in members) / count,
            country=country,
            city=city,
            count=count,
            capture_date=visit_dates[0],
            visit_dates=visit_dates[: self.visit_dates_limit],
            detail_level=detail_level,
        )

    def _individual(self, record: LocationRecord) -> ClusterAggregate:
        if record.id is not None:
            record_id = str(record.id)
        else:
            record_id = f"{record.latitude:.6f}-{record.longitude:.6f}".replace(".", "p")
        return ClusterAggregate(
            id=f"location-{record_id}",
            latitude=record.latitude,
            longitude=record.longitude,
            country=record.country,
            city=record.city,
            count=1,
            capture_date=record.capture_date,
            visit_dates=[record.capture_date],
            detail_level=DetailLevel.POINT,
        )
