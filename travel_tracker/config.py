"""Configuration management for the travel tracker application."""

import argparse
import logging
import os
import sys
from datetime import date
from pathlib import Path

import tomllib

from .constants import Constants
from .exceptions import ConfigurationError, FileOperationError, InvalidCoordinatesError
from .types import (
    ApplicationConfig,
    CacheConfig,
    CommandConfig,
    GeocodingConfig,
    ImportConfig,
    StorageConfig,
)
from .utils import DateParser, PathNormalizer


class ConfigurationManager:
    """Manages application configuration by parsing command-line arguments and TOML
        configuration files, merging their values, validating the resulting configuration,
        and providing configuration objects for use throughout the application.
    Responsibilities:
        - Parse the global options and the sub-command using argparse.
        - Load configuration from TOML files, supporting multiple standard locations.
        - Merge configuration file values with command-line arguments, prioritizing
            explicit arguments.
        - Fall back to the GOOGLE_MAPS_API_KEY environment variable for the API key.
        - Validate configuration for value ranges and logical consistency.
    Methods:
        __init__(logger: logging.Logger)
            Initializes the ConfigurationManager with a logger and utility helpers.
        parse_arguments_and_config(argv: list[str] | None = None) -> ApplicationConfig
            Parses command-line arguments and configuration files, merges them, validates,
                and returns an ApplicationConfig object containing all configuration sections.
        _create_argument_parser() -> argparse.ArgumentParser
            Creates and configures the argument parser and its sub-commands.
        _load_config_file(config_path: str | Path | None = None) -> dict
            Loads configuration from a TOML file, searching standard locations if no path is
            provided.
        _merge_config_with_args(config_data: dict, args: argparse.Namespace) -> None
            Merges configuration file data into command-line arguments based on defined
            field mappings.
        _create_sample_config(output_path: str | Path | None = None) -> None
            Creates a sample TOML configuration file with documentation and example settings.
        _validate_configuration(app_config: ApplicationConfig) -> None
            Validates the complete configuration.
    Exceptions:
        Raises ConfigurationError for invalid or missing configuration.
        Raises FileOperationError for file creation errors.
    """

    CONFIG_FILE_NAME = "travel_tracker.toml"

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.path_normalizer = PathNormalizer()
        self.date_parser = DateParser()

    def parse_arguments_and_config(self, argv: list[str] | None = None) -> ApplicationConfig:
        """
        Parses command line arguments and configuration file, merges them, and constructs the
            application configuration.

        This method performs the following steps:
        1. Parses command line arguments using an argument parser.
        2. Handles early exit if the user requests to create a sample configuration file.
        3. Loads configuration data from a TOML file if one is found.
        4. Merges configuration file data with command line arguments.
        5. Constructs the configuration sections and validates them.

        Raises:
            ConfigurationError: If no command is given or configuration is invalid.

        Returns:
            ApplicationConfig: The fully constructed application configuration object.
        """

        args = self._create_argument_parser().parse_args(argv)

        # Handle early exits
        if args.create_config:
            self._create_sample_config(args.create_config)
            sys.exit(Constants.ErrorCodes.SUCCESS)

        if not args.command:
            raise ConfigurationError("A command is required (see --help)")

        config_data = self._load_config_file(getattr(args, "config", None))
        if config_data:
            self._merge_config_with_args(config_data, args)

        if not args.api_key:
            args.api_key = os.environ.get(Constants.API_KEY_ENV_VAR)

        command_config = CommandConfig(
            name=args.command,
            paths=list(getattr(args, "paths", None) or []),
            directory=getattr(args, "directory", None),
            library_path=getattr(args, "library", None),
            date_from=self._parse_date_arg(args, "date_from"),
            date_to=self._parse_date_arg(args, "date_to"),
            year=getattr(args, "year", None),
            zoom=getattr(args, "zoom", None),
            cluster_by=getattr(args, "cluster_by", None),
            csv_path=getattr(args, "csv", None),
            latitude=getattr(args, "latitude", None),
            longitude=getattr(args, "longitude", None),
            confirmed=getattr(args, "yes", False),
        )

        geocoding_config = GeocodingConfig(
            api_key=args.api_key,
            timeout=self._value_or_default(args, "timeout", Constants.GEOCODING_TIMEOUT_SECONDS),
            user_agent=getattr(args, "user_agent", None) or Constants.DEFAULT_USER_AGENT,
        )

        cache_config = CacheConfig(
            max_size=self._value_or_default(args, "cache_max_size", Constants.CACHE_MAX_SIZE),
            ttl_days=self._value_or_default(args, "cache_ttl_days", Constants.CACHE_EXPIRY_DAYS),
            precision=self._value_or_default(
                args, "cache_precision", Constants.CACHE_COORDINATE_PRECISION
            ),
        )

        database = args.database or Constants.DEFAULT_DATABASE_FILE
        storage_config = StorageConfig(database=self.path_normalizer.normalize_path(database))

        import_config = ImportConfig(
            recursive=not getattr(args, "no_recursive", False),
            max_images=getattr(args, "max_images", None),
            months=self._value_or_default(args, "months", Constants.DEFAULT_IMPORT_MONTHS),
        )

        app_config = ApplicationConfig(
            command=command_config,
            geocoding=geocoding_config,
            cache=cache_config,
            storage=storage_config,
            importing=import_config,
            verbose=bool(args.verbose),
        )

        self._validate_configuration(app_config)

        return app_config

    @staticmethod
    def _value_or_default(args: argparse.Namespace, name: str, default):
        value = getattr(args, name, None)
        return default if value is None else value

    def _create_argument_parser(self) -> argparse.ArgumentParser:
        """
        Creates and configures an argparse.ArgumentParser for the travel tracker.

        Global options come before the sub-command:
            --config                       Path to TOML configuration file (optional).
            --create-config                Create a sample configuration file and exit (optionally
                                            specify path).
            --database                     JSON file holding stored locations.
            --api-key                      Google Maps API key.
            -v, --verbose                  Print additional information.

        Sub-commands:
            process                        Import specific photo files.
            import-directory               Import photos of a directory within a date range.
            recent                         Import recent photos from a Photos library.
            stats                          Show visited countries, cities and photo counts.
            locations                      List stored locations, optionally clustered.
            resolve                        Diagnose how a coordinate resolves to a place.
            clear-all-data                 Delete every stored location.

        Returns:
            argparse.ArgumentParser: Configured argument parser with all supported options.
        """

        parser = argparse.ArgumentParser(
            prog="travel-tracker",
            description="Builds a travel history from the GPS tags embedded in photos.",
            epilog="Examples:\n"
            "  %(prog)s process IMG_0001.jpg IMG_0002.jpg\n"
            "  %(prog)s import-directory ~/Pictures/2024 --date-from 2024-06-01 --date-to 2024-06-30\n"
            "  %(prog)s recent --months 3 --max-images 500\n"
            "  %(prog)s stats --year 2024\n"
            "  %(prog)s locations --zoom 5 --csv clusters.csv\n"
            "  %(prog)s resolve 48.8566 2.3522\n"
            "  %(prog)s --create-config  # Create sample config file\n\n"
            "Configuration files (TOML format) are searched in this order:\n"
            "  1. Path specified with --config\n"
            "  2. ./travel_tracker.toml\n"
            "  3. ~/.config/travel_tracker/config.toml\n"
            "  4. ~/.travel_tracker.toml",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--config",
            type=str,
            help="Path to TOML configuration file (optional)",
        )
        parser.add_argument(
            "--create-config",
            type=str,
            nargs="?",
            const=self.CONFIG_FILE_NAME,
            help="Create a sample configuration file and exit (optionally specify path)",
        )
        parser.add_argument(
            "--database",
            type=str,
            help=f"JSON file holding stored locations (defaults to {Constants.DEFAULT_DATABASE_FILE})",
        )
        parser.add_argument(
            "--api-key",
            type=str,
            help=f"Google Maps API key (falls back to ${Constants.API_KEY_ENV_VAR})",
        )
        parser.add_argument(
            "-v", "--verbose", action="store_true", help="print additional information"
        )

        subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

        process = subparsers.add_parser("process", help="Import specific photo files")
        process.add_argument("paths", nargs="+", help="Photo files to import")

        directory = subparsers.add_parser(
            "import-directory", help="Import photos of a directory within a date range"
        )
        directory.add_argument("directory", help="Directory (or Photos library) to scan")
        self._add_date_range_arguments(directory)
        directory.add_argument(
            "--no-recursive",
            action="store_true",
            help="Don't search subfolders recursively",
        )
        self._add_max_images_argument(directory)

        recent = subparsers.add_parser("recent", help="Import recent photos from a Photos library")
        recent.add_argument(
            "--library",
            type=str,
            help="Photos library path (defaults to ~/Pictures/Photos Library.photoslibrary)",
        )
        recent.add_argument(
            "--months",
            type=int,
            help=f"How many months back to import (defaults to {Constants.DEFAULT_IMPORT_MONTHS})",
        )
        self._add_max_images_argument(recent)

        stats = subparsers.add_parser("stats", help="Show visited countries, cities and photo counts")
        self._add_year_argument(stats)

        locations = subparsers.add_parser("locations", help="List stored locations")
        self._add_year_argument(locations)
        grouping = locations.add_mutually_exclusive_group()
        grouping.add_argument(
            "--cluster-by",
            choices=["city", "country"],
            help="Merge locations per city or per country",
        )
        grouping.add_argument(
            "--zoom",
            type=int,
            help="Cluster locations for a map shown at this zoom level",
        )
        locations.add_argument("--csv", type=str, help="Also export the result to this CSV file")

        resolve = subparsers.add_parser("resolve", help="Diagnose how a coordinate resolves to a place")
        resolve.add_argument("latitude", type=float, help="Decimal latitude")
        resolve.add_argument("longitude", type=float, help="Decimal longitude")

        clear = subparsers.add_parser("clear-all-data", help="Delete every stored location")
        clear.add_argument("--yes", action="store_true", help="Confirm the deletion")

        return parser

    @staticmethod
    def _add_date_range_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--date-from",
            type=str,
            help="Import photos from this date (YYYY-MM-DD format, defaults to two months ago)",
        )
        parser.add_argument(
            "--date-to",
            type=str,
            help="Import photos to this date (YYYY-MM-DD format, defaults to today)",
        )

    @staticmethod
    def _add_max_images_argument(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--max-images",
            type=int,
            help="Import at most this many of the most recently modified photos",
        )

    @staticmethod
    def _add_year_argument(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--year", type=int, help="Only include photos captured in this year")

    def _load_config_file(self, config_path: str | Path | None = None) -> dict:
        """
        Loads configuration data from a TOML file.

        Args:
            config_path (str | Path | None): Optional path to a configuration file. If not provided,
                standard locations are checked.

        Returns:
            dict: The loaded configuration as a dictionary. Returns an empty dictionary if no
                configuration file is found or if loading/parsing fails.
        """

        config_locations = []

        if config_path:
            config_locations.append(Path(config_path).expanduser())

        config_locations.extend(
            [
                Path.cwd() / self.CONFIG_FILE_NAME,
                Path.home() / ".config" / "travel_tracker" / "config.toml",
                Path.home() / ".travel_tracker.toml",
            ]
        )

        for config_file in config_locations:
            if config_file.exists():
                try:
                    with open(config_file, "rb") as f:
                        config_data = tomllib.load(f)
                    self.logger.info(f"Loaded configuration from: {config_file}")
                    return config_data
                except (OSError, IOError) as e:
                    self.logger.warning(f"Could not load config file {config_file}: {e}")
                    continue
                except tomllib.TOMLDecodeError as e:
                    self.logger.warning(f"Could not parse config file {config_file}: {e}")
                    continue

        return {}

    def _merge_config_with_args(self, config_data: dict, args: argparse.Namespace) -> None:
        """
        Merges configuration data from a TOML file with command-line arguments.

        Each mapping names the TOML section, the argument name, the TOML field and the
            merge strategy. Values given on the command line always win.

        The ``recursive`` field of the ``import`` section uses inverse logic against the
            ``--no-recursive`` flag.

        Args:
            config_data (dict): The configuration data loaded from a TOML file,
                                organized by sections.
            args (argparse.Namespace): The namespace containing command-line
                                        arguments to be updated.
        """

        field_mappings = [
            # (toml_section, arg_name, toml_field, merge_strategy)
            ("geocoding", "api_key", "api_key", "string_not_empty"),
            ("geocoding", "timeout", "timeout", "none_check"),
            ("geocoding", "user_agent", "user_agent", "string_not_empty"),
            ("cache", "cache_max_size", "max_size", "none_check"),
            ("cache", "cache_ttl_days", "ttl_days", "none_check"),
            ("cache", "cache_precision", "precision", "none_check"),
            ("storage", "database", "database", "string_not_empty"),
            ("import", "max_images", "max_images", "none_check"),
            ("import", "months", "months", "none_check"),
            ("output", "verbose", "verbose", "boolean_false_to_true"),
        ]

        for mapping in field_mappings:
            self._apply_field_mapping(config_data, args, mapping)

        import_config = config_data.get("import", {})
        if not getattr(args, "no_recursive", False):
            if import_config.get("recursive", True) is False:
                args.no_recursive = True

    def _apply_field_mapping(
        self, config_data: dict, args: argparse.Namespace, mapping: tuple
    ) -> None:
        """
        Applies a single field mapping from a configuration dictionary to an argparse.
            Namespace object based on a specified merge strategy.

        Merge Strategies:
            - "string_not_empty": Sets the argument if it is empty/falsy and config value exists.
            - "none_check": Sets the argument if it is None and config value exists.
            - "boolean_false_to_true": Sets the argument if it is False and config value is True.
        """
        toml_section, arg_name, toml_field, merge_strategy = mapping

        section_data = config_data.get(toml_section, {})
        if not isinstance(section_data, dict) or toml_field not in section_data:
            return

        if merge_strategy == "string_not_empty":
            if not getattr(args, arg_name, None):
                setattr(args, arg_name, section_data[toml_field])

        elif merge_strategy == "none_check":
            if getattr(args, arg_name, None) is None:
                setattr(args, arg_name, section_data[toml_field])

        elif merge_strategy == "boolean_false_to_true":
            if not getattr(args, arg_name, False) and section_data[toml_field]:
                setattr(args, arg_name, True)

    def _parse_date_arg(self, args: argparse.Namespace, field_name: str) -> date | None:
        """Parse a date argument from the args namespace."""
        date_str = getattr(args, field_name, None)
        if date_str:
            return self.date_parser.parse_date(date_str, field_name)
        return None

    def _create_sample_config(self, output_path: str | Path | None = None) -> None:
        """Creates a sample configuration file for the travel tracker in TOML format.

        If no output path is provided, the file is saved as 'travel_tracker.toml' in the current
        working directory.

        Parameters:
            output_path (str | Path | None): Optional path to save the sample configuration file.

        Raises:
            FileOperationError: If the configuration file cannot be created due to an OS or IO
                                error.
        """

        if not output_path:
            output_path = Path.cwd() / self.CONFIG_FILE_NAME
        else:
            output_path = Path(output_path)

        sample_config = """# Travel Tracker Configuration File
# Save this as travel_tracker.toml in your working directory,
# ~/.config/travel_tracker/config.toml, or ~/.travel_tracker.toml

[geocoding]
# Google Maps Geocoding API access. Without a key, places are resolved
# with a small built-in table of countries and cities.
api_key = "YOUR_API_KEY"  # Or set the GOOGLE_MAPS_API_KEY environment variable
timeout = 10              # Seconds before a geocoding request is abandoned
user_agent = "travel_tracker"

[cache]
# Resolved places are cached per ~1 km grid cell
max_size = 1000           # Maximum number of cached places
ttl_days = 7              # Days before a cached place is looked up again
precision = 0.01          # Grid step in degrees

[storage]
database = "travel_tracker.json"  # JSON file holding stored locations

[import]
# Defaults for import-directory and recent
recursive = true          # Search subfolders
# max_images = 500        # Only import the most recently modified photos
months = 2                # Look-back window of the recent command

[output]
verbose = false           # Enable verbose output
"""

        try:
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(sample_config)
            self.logger.info(f"Sample configuration file created: {output_path}")
            self.logger.info("Edit this file with your preferred settings.")
        except (OSError, IOError) as e:
            self.logger.error(f"Error creating sample config file: {e}")
            raise FileOperationError(f"Could not create config file: {e}") from e

    def _validate_configuration(self, app_config: ApplicationConfig) -> None:
        """
        Validates the application configuration for value ranges and consistency.

        Checks:
            - Geocoding timeout and cache settings are positive.
            - Import limits are positive.
            - The date range is ordered and the zoom level is not negative.
            - The coordinate of the resolve command is within range.
            - clear-all-data is confirmed.

        Raises:
            ConfigurationError: If any configuration requirement is not met.
        """

        if app_config.geocoding.timeout <= 0:
            raise ConfigurationError("geocoding.timeout must be positive")
        if app_config.cache.max_size < 1:
            raise ConfigurationError("cache.max_size must be at least 1")
        if app_config.cache.ttl_days <= 0:
            raise ConfigurationError("cache.ttl_days must be positive")
        if app_config.cache.precision <= 0:
            raise ConfigurationError("cache.precision must be positive")

        if app_config.importing.months < 1:
            raise ConfigurationError("--months must be at least 1")
        if app_config.importing.max_images is not None and app_config.importing.max_images < 1:
            raise ConfigurationError("--max-images must be at least 1")

        command = app_config.command
        if command.date_from and command.date_to and command.date_from > command.date_to:
            raise ConfigurationError("--date-from must not be after --date-to")
        if command.zoom is not None and command.zoom < 0:
            raise ConfigurationError("--zoom must not be negative")

        if command.name == "resolve":
            if not -90 <= command.latitude <= 90:
                raise InvalidCoordinatesError(f"Latitude must be between -90 and 90, got {command.latitude}")
            if not -180 <= command.longitude <= 180:
                raise InvalidCoordinatesError(
                    f"Longitude must be between -180 and 180, got {command.longitude}"
                )

        if command.name == "clear-all-data" and not command.confirmed:
            raise ConfigurationError("clear-all-data deletes every stored location; pass --yes to confirm")
