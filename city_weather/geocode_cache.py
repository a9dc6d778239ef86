"""Cache-aside resolution of city names to coordinates.

GeocodeCache consults the city store first and only calls the geocoding API on
a miss, persisting the result afterwards.

Concurrency:
Resolutions are not serialized per city. Two concurrent first-time requests for
the same name may both miss, both call the geocoding API and both insert. The
store accepts the duplicate rows and always answers with the oldest one, so
callers must not assume at most one upstream call per city.
"""

import logging

from city_weather.errors import NotFoundError
from city_weather.openmeteo_client import OpenMeteoGeocodingClient
from city_weather.weather_models import CityDatabase, Coordinate


class GeocodeCache:
    """Resolves city names through the city store, falling back to the
    geocoding API.

    Args:
        database (CityDatabase): City store; the only writer of City rows.
        client (OpenMeteoGeocodingClient): Geocoding API client used on a miss.
    """

    def __init__(self, database: CityDatabase, client: OpenMeteoGeocodingClient) -> None:
        self.database = database
        self.client = client

        self.logger = logging.getLogger(name=self.__class__.__name__)

    def resolve(self, city_name: str) -> Coordinate:
        """Resolve a city name to its coordinate.

        Args:
            city_name (str): City name, matched exactly and case-sensitively.

        Raises:
            ValueError: When city_name is empty.
            NotFoundError: When the geocoding API has no match. Nothing is stored.
            UpstreamError: When the geocoding API or the store fails.

        Returns:
            Coordinate: Stored coordinate on a hit, freshly resolved one on a miss.
        """
        if not city_name:
            raise ValueError("City name must not be empty.")

        coordinate = self.database.get_coordinate(city_name)

        if coordinate is not None:
            self.logger.debug(f"Cache hit for {city_name!r}")
            return coordinate

        self.logger.info(f"Cache miss for {city_name!r}, querying geocoding API")

        try:
            coordinate = self.client.lookup(city_name)
        except NotFoundError:
            self.logger.info(f"City {city_name!r} is unknown to the geocoding API")
            raise

        self.database.insert_city(city_name, coordinate)

        self.logger.info(f"Stored {city_name!r} at {coordinate}")

        return coordinate
