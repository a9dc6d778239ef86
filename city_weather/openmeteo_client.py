"""OpenMeteo API Clients for City Geocoding and Hourly Forecasts

This module provides the two upstream clients of the city weather service.

Core Components:
- OpenMeteoClient: Base class holding the shared HTTP session, request timeout
  and the JSON request/validation routine
- OpenMeteoGeocodingClient: Resolves a city name to its first matching Coordinate
- OpenMeteoForecastClient: Retrieves the hourly temperature series for a Coordinate

API Endpoints Supported:

OpenMeteo Geocoding API:
- Endpoint: https://geocoding-api.open-meteo.com/v1/search
- Request: name={city}&count=1&language=en&format=json
- Response: {"results": [{"latitude": float, "longitude": float, ...}]}
- An unknown city yields a body without "results"

OpenMeteo Forecast API:
- Endpoint: https://api.open-meteo.com/v1/forecast
- Request: latitude={lat}&longitude={lon}&hourly=temperature_2m
- Response: {"latitude", "longitude", "timezone",
  "hourly": {"time": [str], "temperature_2m": [float]}}

Error Handling:
- Transport failures, non-2xx statuses and malformed bodies raise UpstreamError
- A geocoding search without results raises NotFoundError
- Requests are sent exactly once; no retry adapter is mounted on the session

Session Configuration:
- A requests_cache CachedSession is shared between both clients
- Cache expiry is configurable; responses with non-200 statuses are not cached

Dependencies:
- requests: HTTP transport
- requests_cache: HTTP response caching
"""

import logging
from numbers import Real
from typing import Any, Dict, Optional

import requests
import requests_cache

from city_weather.config import ServiceConfig
from city_weather.errors import NotFoundError, UpstreamError
from city_weather.weather_models import Coordinate, ForecastSeries


def build_session(config: ServiceConfig) -> requests.Session:
    """Create the cached HTTP session shared by the OpenMeteo clients.

    Args:
        config (ServiceConfig): Service configuration with cache name and expiry.

    Returns:
        requests.Session: CachedSession with the configured expiry.
    """
    return requests_cache.CachedSession(
        config.http_cache_name,
        expire_after=config.http_cache_expire_after,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


class OpenMeteoClient:
    """Base class for OpenMeteo API clients.

    Subclasses set URL_KEY to the name of the ServiceConfig attribute holding
    their endpoint and call get_json() with their query parameters.

    Attributes:
        session: HTTP session used for all requests
        url (str): Endpoint of the API
        timeout (float): Request timeout in seconds
        logger: Configured logger for operation monitoring
    """

    URL_KEY = ""

    def __init__(
        self,
        config: ServiceConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize OpenMeteoClient with configuration and HTTP session.

        Args:
            config (ServiceConfig): Service configuration.
            session (Optional[requests.Session], optional): HTTP session. A new
                cached session is built from config when omitted.
        """
        self.session = session if session is not None else build_session(config)
        self.url = getattr(config, self.URL_KEY)
        self.timeout = config.request_timeout

        self.logger = logging.getLogger(name=self.__class__.__name__)

    def get_json(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Send a GET request and return the decoded JSON object.

        Args:
            params (Dict[str, Any]): Query parameters; requests URL-encodes them.

        Raises:
            UpstreamError: On transport failure, non-2xx status, a body that is
                not JSON, or a JSON body that is not an object.

        Returns:
            Dict[str, Any]: Decoded response body.
        """
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(f"Request to {self.url} failed: {e}")
            raise UpstreamError(f"Request to {self.url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            self.logger.error(f"Request to {self.url} returned status {response.status_code}")
            raise UpstreamError(
                f"Request to {self.url} returned non-2xx status {response.status_code}"
            )

        try:
            body = response.json()
        except ValueError as e:
            self.logger.error(f"Response from {self.url} is not valid JSON: {e}")
            raise UpstreamError(f"Response from {self.url} is not valid JSON") from e

        if not isinstance(body, dict):
            self.logger.error(f"Response from {self.url} is not a JSON object")
            raise UpstreamError(
                f"Response from {self.url} does not match expected type. Expected: {dict} Got {type(body)} instead."
            )

        return body


class OpenMeteoGeocodingClient(OpenMeteoClient):
    """OpenMeteo Geocoding API client.

    Looks up a city name and returns the coordinate of the first candidate.
    Only one candidate is requested and result names are in English.

    Example:
        client = OpenMeteoGeocodingClient(ServiceConfig())
        coordinate = client.lookup("Berlin")
    """

    URL_KEY = "geocoding_url"

    def lookup(self, city_name: str) -> Coordinate:
        """Resolve a city name to a coordinate.

        Args:
            city_name (str): City name as typed by the user.

        Raises:
            NotFoundError: When the API reports no matching city.
            UpstreamError: When the request fails or the body is malformed.

        Returns:
            Coordinate: Coordinate of the first result.
        """
        self.logger.info(f"Geocoding {city_name!r}")

        body = self.get_json(
            {
                "name": city_name,
                "count": 1,
                "language": "en",
                "format": "json",
            }
        )

        results = body.get("results")

        if results is None or results == []:
            self.logger.info(f"No geocoding results for {city_name!r}")
            raise NotFoundError(city_name)

        if not isinstance(results, list) or not isinstance(results[0], dict):
            self.logger.error(f"Malformed geocoding results for {city_name!r}")
            raise UpstreamError(f"Malformed geocoding results for {city_name!r}: {results!r}")

        first = results[0]
        latitude = first.get("latitude")
        longitude = first.get("longitude")

        if not (_is_number(latitude) and _is_number(longitude)):
            self.logger.error(f"Geocoding result for {city_name!r} has no numeric coordinates")
            raise UpstreamError(
                f"Geocoding result for {city_name!r} has no numeric latitude/longitude: {first!r}"
            )

        return Coordinate(latitude=float(latitude), longitude=float(longitude))


class OpenMeteoForecastClient(OpenMeteoClient):
    """OpenMeteo Forecast API client for hourly 2m temperatures.

    Example:
        client = OpenMeteoForecastClient(ServiceConfig())
        series = client.fetch(Coordinate(52.52, 13.405))
    """

    URL_KEY = "forecast_url"

    def fetch(self, coordinate: Coordinate) -> ForecastSeries:
        """Retrieve the hourly temperature series for a coordinate.

        Args:
            coordinate (Coordinate): Location to forecast.

        Raises:
            UpstreamError: When the request fails or the body lacks a valid
                hourly time/temperature_2m section.

        Returns:
            ForecastSeries: Timestamps and temperatures in upstream order.
        """
        self.logger.info(
            f"Retrieving hourly forecast for Lat.: {coordinate.latitude}° (N), Lon.: {coordinate.longitude}° (E)"
        )

        body = self.get_json(
            {
                "latitude": coordinate.latitude,
                "longitude": coordinate.longitude,
                "hourly": "temperature_2m",
            }
        )

        hourly = body.get("hourly")

        if not isinstance(hourly, dict):
            self.logger.error("Forecast response has no hourly section")
            raise UpstreamError(f"Forecast response has no hourly section: {body!r}")

        times = hourly.get("time")
        temperatures = hourly.get("temperature_2m")

        if not isinstance(times, list) or not all(isinstance(t, str) for t in times):
            self.logger.error("Forecast field hourly.time is malformed")
            raise UpstreamError("Forecast response field hourly.time is not a list of strings")

        if not isinstance(temperatures, list) or not all(
            _is_number(t) for t in temperatures
        ):
            self.logger.error("Forecast field hourly.temperature_2m is malformed")
            raise UpstreamError(
                "Forecast response field hourly.temperature_2m is not a list of numbers"
            )

        return ForecastSeries(
            times=list(times),
            temperatures=[float(t) for t in temperatures],
            latitude=self.__optional_float(body.get("latitude")),
            longitude=self.__optional_float(body.get("longitude")),
            timezone=body.get("timezone") if isinstance(body.get("timezone"), str) else None,
        )

    def __optional_float(self, value: Any) -> Optional[float]:
        return float(value) if _is_number(value) else None

