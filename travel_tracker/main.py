"""Main application module for the travel tracker."""

import json
import logging
import sys
from datetime import timedelta

from .cache import LocationCache
from .clustering import SpatialAggregator
from .config import ConfigurationManager
from .constants import Constants
from .exceptions import (
    ConfigurationError,
    FileOperationError,
    ImportRequestError,
    InvalidCoordinatesError,
    PhotoMetadataError,
)
from .export import CSVExporter
from .geocoding import GeoResolver
from .gps import PhotoMetadataReader
from .importer import PhotoImporter
from .statistics import StatisticsService
from .storage import LocationRepository
from .types import ApplicationConfig
from .upsert import LocationUpserter
from .utils import LoggingSetup


class TravelTrackerWorkflow:
    """Wires the components together and runs one command."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.repository: LocationRepository | None = None
        self.resolver: GeoResolver | None = None
        self.importer: PhotoImporter | None = None
        self.statistics: StatisticsService | None = None
        self.csv_exporter: CSVExporter | None = None

    def run(self, app_config: ApplicationConfig) -> dict:
        """Run the configured command and return its JSON-serializable result."""
        self._initialize_components(app_config)

        handlers = {
            "process": self._process,
            "import-directory": self._import_directory,
            "recent": self._recent,
            "stats": self._stats,
            "locations": self._locations,
            "resolve": self._resolve,
            "clear-all-data": self._clear_all_data,
        }
        handler = handlers.get(app_config.command.name)
        if handler is None:
            raise ConfigurationError(f"Unknown command: {app_config.command.name}")
        return handler(app_config)

    def _initialize_components(self, app_config: ApplicationConfig) -> None:
        """Initialize all workflow components."""
        cache = LocationCache(
            self.logger,
            max_size=app_config.cache.max_size,
            ttl=timedelta(days=app_config.cache.ttl_days),
            precision=app_config.cache.precision,
        )
        self.repository = LocationRepository(self.logger, app_config.storage.database)
        self.resolver = GeoResolver(app_config.geocoding, cache, self.logger)
        self.importer = PhotoImporter(
            PhotoMetadataReader(self.logger),
            self.resolver,
            LocationUpserter(self.repository, self.logger),
            self.repository,
            self.logger,
        )
        self.statistics = StatisticsService(self.repository, SpatialAggregator(self.logger), self.logger)
        self.csv_exporter = CSVExporter(self.logger)

    def _process(self, app_config: ApplicationConfig) -> dict:
        assert self.importer is not None, "Components must be initialized first"
        return self.importer.process_files(app_config.command.paths).to_dict()

    def _import_directory(self, app_config: ApplicationConfig) -> dict:
        assert self.importer is not None, "Components must be initialized first"
        summary = self.importer.import_directory(
            app_config.command.directory,
            date_from=app_config.command.date_from,
            date_to=app_config.command.date_to,
            recursive=app_config.importing.recursive,
            max_images=app_config.importing.max_images,
        )
        return summary.to_dict()

    def _recent(self, app_config: ApplicationConfig) -> dict:
        assert self.importer is not None, "Components must be initialized first"
        summary = self.importer.import_recent(
            app_config.command.library_path,
            months=app_config.importing.months,
            max_images=app_config.importing.max_images,
        )
        return summary.to_dict()

    def _stats(self, app_config: ApplicationConfig) -> dict:
        assert self.statistics is not None, "Components must be initialized first"
        return self.statistics.summary(app_config.command.year)

    def _locations(self, app_config: ApplicationConfig) -> dict:
        assert (
            self.statistics is not None and self.csv_exporter is not None
        ), "Components must be initialized first"
        command = app_config.command

        if command.zoom is None and command.cluster_by is None:
            records = self.statistics.locations(command.year)
            if command.csv_path:
                self.csv_exporter.export_locations(records, command.csv_path)
            return {"count": len(records), "locations": [record.to_dict() for record in records]}

        if command.zoom is not None:
            clusters = self.statistics.map_clusters(command.zoom, command.year)
        else:
            clusters = self.statistics.clustered_locations(command.year, command.cluster_by)
        if command.csv_path:
            self.csv_exporter.export_clusters(clusters, command.csv_path)
        return {"count": len(clusters), "clusters": [cluster.to_dict() for cluster in clusters]}

    def _resolve(self, app_config: ApplicationConfig) -> dict:
        assert self.resolver is not None, "Components must be initialized first"
        latitude, longitude = app_config.command.latitude, app_config.command.longitude
        resolution = self.resolver.resolve_detailed(latitude, longitude)
        report = self.resolver.diagnose(latitude, longitude)
        report["resolution"] = {
            "city": resolution.city,
            "country": resolution.country,
            "outcomes": [outcome.value for outcome in resolution.outcomes],
        }
        return report

    def _clear_all_data(self, app_config: ApplicationConfig) -> dict:
        assert self.repository is not None, "Components must be initialized first"
        deleted = self.repository.clear_all()
        return {"deleted": deleted, "database": app_config.storage.database}


def main(argv: list[str] | None = None) -> None:
    """Parse the configuration, run the command and print its result as JSON."""
    logging_setup = LoggingSetup()
    logger = logging_setup.setup_logging()

    try:
        config_manager = ConfigurationManager(logger)
        app_config = config_manager.parse_arguments_and_config(argv)

        if app_config.verbose:
            logger.setLevel(logging.DEBUG)

        workflow = TravelTrackerWorkflow(logger)
        result = workflow.run(app_config)
        print(json.dumps(result, indent=2))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(Constants.ErrorCodes.INTERRUPTED)
    except InvalidCoordinatesError as e:
        logger.error(f"Invalid coordinates: {e}")
        sys.exit(Constants.ErrorCodes.INVALID_COORDINATES)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(Constants.ErrorCodes.CONFIGURATION_ERROR)
    except ImportRequestError as e:
        logger.error(f"Invalid import request: {e}")
        sys.exit(Constants.ErrorCodes.INVALID_REQUEST)
    except PhotoMetadataError as e:
        logger.error(f"Photo metadata error: {e}")
        sys.exit(Constants.ErrorCodes.PHOTO_METADATA_ERROR)
    except FileOperationError as e:
        logger.error(f"File operation error: {e}")
        sys.exit(Constants.ErrorCodes.FILE_OPERATION_ERROR)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error(f"Unexpected error: {e}")
        sys.exit(Constants.ErrorCodes.GENERAL_ERROR)


if __name__ == "__main__":
    main()
