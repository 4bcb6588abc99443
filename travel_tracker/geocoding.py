"""Reverse geocoding of photo coordinates into a city and country."""

import logging
from functools import partial
from urllib.parse import urlencode

from geopy.exc import (
    GeocoderAuthenticationFailure,
    GeocoderInsufficientPrivileges,
    GeocoderQuotaExceeded,
    GeopyError,
)
from geopy.geocoders import GoogleV3
from geopy.geocoders.base import DEFAULT_SENTINEL

from .cache import LocationCache
from .constants import Constants
from .fallback import FALLBACK_REGIONS, CountryRegion, lookup_place
from .types import GeocodingConfig, Resolution, ResolutionOutcome, is_known_place, normalize_place


class LocalityGoogleV3(GoogleV3):
    """GoogleV3 geocoder whose reverse lookups can be restricted by result type."""

    def reverse(
        self,
        query,
        *,
        exactly_one=True,
        timeout=DEFAULT_SENTINEL,
        language=None,
        result_type=None,
    ):
        """
        Return addresses for a point, optionally limited to ``result_type``
        (a ``|``-separated list such as ``"locality|country"``).
        """
        params = {"latlng": self._coerce_point_to_string(query)}
        if result_type:
            params["result_type"] = result_type
        if language:
            params["language"] = language
        if self.api_key:
            params["key"] = self.api_key

        url = "?".join((self.api, urlencode(params)))
        callback = partial(self._parse_json, exactly_one=exactly_one)
        return self._call_geocoder(url, callback, timeout=timeout)


class GeoResolver:
    """
    Resolves coordinates into (city, country) through a cache, the Google
    Geocoding API and a static fallback table.

    Resolution never raises: provider failures are logged and the answer
    degrades to the fallback table, and finally to (Unknown, Unknown).

    Attributes:
        config (GeocodingConfig): API key, timeout and user agent.
        cache (LocationCache): Shared cache of resolved places.
        logger (logging.Logger): Logger instance for resolution events.
        geocoder (LocalityGoogleV3 | None): Provider client, None when no
            usable API key is configured.
    """

    def __init__(
        self,
        geocoding_config: GeocodingConfig,
        cache: LocationCache,
        logger: logging.Logger,
        geocoder=None,
        regions: tuple[CountryRegion, ...] = FALLBACK_REGIONS,
    ):
        self.config = geocoding_config
        self.cache = cache
        self.logger = logger
        self.regions = regions
        self.api_key_configured = self.is_valid_api_key(geocoding_config.api_key)

        if not self.api_key_configured:
            self.logger.warning(
                "Google Maps API key is not configured. "
                "Geocoding will use simplified fallback logic."
            )
            self.geocoder = None
        elif geocoder is not None:
            self.geocoder = geocoder
        else:
            self.logger.info("Google Maps API configuration detected.")
            self.geocoder = LocalityGoogleV3(
                api_key=geocoding_config.api_key,
                timeout=geocoding_config.timeout,
                user_agent=geocoding_config.user_agent,
            )

    @staticmethod
    def is_valid_api_key(api_key: str | None) -> bool:
        """A key counts as configured when it is non-blank and not the placeholder."""
        return bool(api_key and api_key.strip()) and api_key != Constants.GOOGLE_MAPS_PLACEHOLDER_KEY

    @staticmethod
    def mask_api_key(api_key: str | None) -> str:
        """Show only the first four and last two characters of a key."""
        if not api_key or len(api_key) <= 4:
            return "not configured"
        return f"{api_key[:4]}...{api_key[-2:]}"

    def resolve(self, latitude: float, longitude: float) -> tuple[str, str]:
        """Return (city, country) for a coordinate."""
        return self.resolve_detailed(latitude, longitude).place

    def resolve_detailed(self, latitude: float, longitude: float) -> Resolution:
        """Return the resolved place together with the steps that produced it."""
        try:
            return self._resolve(latitude, longitude)
        except Exception as e:  # pylint: disable=broad-exception-caught
            self.logger.warning(f"Unexpected error resolving {latitude}, {longitude}: {e}")
            return Resolution(
                Constants.UNKNOWN, Constants.UNKNOWN, (ResolutionOutcome.FALLBACK_UNMATCHED,)
            )

    def _resolve(self, latitude: float, longitude: float) -> Resolution:
        cached = self.cache.get(latitude, longitude)
        if cached is not None:
            self.logger.debug(f"Location cache hit for coordinates {latitude}, {longitude}")
            return Resolution(cached[0], cached[1], (ResolutionOutcome.CACHE_HIT,))

        outcomes: list[ResolutionOutcome] = []

        if self.geocoder is not None:
            city, country = self._query_provider(latitude, longitude)
            if is_known_place(city) and is_known_place(country):
                self.cache.put(latitude, longitude, city, country)
                return Resolution(city, country, (ResolutionOutcome.PROVIDER_OK,))
            outcomes.append(ResolutionOutcome.PROVIDER_FAILED)

        city, country = lookup_place(latitude, longitude, self.regions)
        if is_known_place(city) or is_known_place(country):
            self.cache.put(latitude, longitude, city, country)
            outcomes.append(ResolutionOutcome.FALLBACK_MATCHED)
        else:
            outcomes.append(ResolutionOutcome.FALLBACK_UNMATCHED)

        return Resolution(city, country, tuple(outcomes))

    def _query_provider(self, latitude: float, longitude: float) -> tuple[str, str]:
        """Ask the provider for locality and country; failures become (Unknown, Unknown)."""
        self.logger.debug(f"Calling Google Maps API for coordinates {latitude}, {longitude}")
        try:
            results = self._reverse(latitude, longitude)
        except GeopyError as e:
            self.logger.warning(
                f"Google Maps API failed for coordinates {latitude}, {longitude}: {e}"
            )
            return Constants.UNKNOWN, Constants.UNKNOWN
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self.logger.warning(
                f"Malformed Google Maps API response for coordinates {latitude}, {longitude}: {e}"
            )
            return Constants.UNKNOWN, Constants.UNKNOWN

        if not results:
            self.logger.info(f"No Google Maps results for coordinates {latitude}, {longitude}")
            return Constants.UNKNOWN, Constants.UNKNOWN

        city, country = self.parse_address_components(
            [getattr(result, "raw", result) for result in results]
        )
        if not (is_known_place(city) and is_known_place(country)):
            self.logger.info(
                f"Incomplete Google Maps result for {latitude}, {longitude}: {city}, {country}"
            )
        return city, country

    def _reverse(self, latitude: float, longitude: float):
        return self.geocoder.reverse(
            (latitude, longitude),
            exactly_one=False,
            result_type=Constants.GOOGLE_RESULT_TYPES,
        )

    @staticmethod
    def parse_address_components(raw_results: list) -> tuple[str, str]:
        """
        Pick the city and country out of Google Geocoding results.

        The first ``country``-typed component across all results gives the
        country and the first ``locality``-typed component gives the city.
        Entries that do not have the expected shape are ignored.

        Args:
            raw_results: The ``results`` array of a Google Geocoding response.

        Returns:
            (city, country), Unknown where nothing matched.
        """
        city = Constants.UNKNOWN
        country = Constants.UNKNOWN

        for result in raw_results:
            if not isinstance(result, dict):
                continue
            components = result.get("address_components")
            if not isinstance(components, list):
                continue

            for component in components:
                if not isinstance(component, dict):
                    continue
                types = component.get("types") or []
                long_name = component.get("long_name")
                if not isinstance(long_name, str):
                    continue

                if "country" in types and country == Constants.UNKNOWN:
                    country = normalize_place(long_name)
                elif "locality" in types and city == Constants.UNKNOWN:
                    city = normalize_place(long_name)

        return city, country

    def diagnose(self, latitude: float, longitude: float) -> dict:
        """
        Report how a coordinate resolves through each step, bypassing the cache.

        Returns:
            dict with the API configuration, the cache snapshot, the provider
            result (or error), the fallback result and a suggested next step.
        """
        provider_result: dict
        action = "Use the API result if successful, otherwise use the fallback."

        if self.geocoder is None:
            provider_result = {"error": "Google Maps API key is not configured"}
            action = "Set geocoding.api_key in the configuration file to enable Google Maps lookups."
        else:
            try:
                results = self._reverse(latitude, longitude) or []
                city, country = self.parse_address_components(
                    [getattr(result, "raw", result) for result in results]
                )
                provider_result = {"city": city, "country": country}
            except (GeocoderAuthenticationFailure, GeocoderInsufficientPrivileges) as e:
                provider_result = {"error": str(e)}
                action = (
                    "Your API key appears to be invalid or unauthorized. "
                    "Check for typos and ensure it's entered correctly."
                )
            except GeocoderQuotaExceeded as e:
                provider_result = {"error": str(e)}
                action = "You've exceeded your API request limit. Wait or upgrade your plan."
            except GeopyError as e:
                provider_result = {"error": str(e)}
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                provider_result = {"error": f"Malformed Google Maps API response: {e}"}

        fallback_city, fallback_country = lookup_place(latitude, longitude, self.regions)

        return {
            "api_configuration": {
                "key_configured": self.api_key_configured,
                "masked_key": self.mask_api_key(self.config.api_key),
            },
            "coordinates": {"latitude": latitude, "longitude": longitude},
            "cache_key": self.cache.key_for(latitude, longitude),
            "cache": self.cache.stats().to_dict(),
            "provider_result": provider_result,
            "fallback_result": {"city": fallback_city, "country": fallback_country},
            "recommended_action": action,
        }
