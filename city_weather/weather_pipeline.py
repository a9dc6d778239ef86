"""Weather Pipeline

Orchestrates a single weather request:

    GeocodeCache.resolve -> OpenMeteoForecastClient.fetch -> aggregate

The steps run strictly in this order. Every failure propagates unchanged to
the caller; nothing is retried and no fallback coordinate is substituted.
"""

import logging

from city_weather.forecast_aggregator import aggregate
from city_weather.geocode_cache import GeocodeCache
from city_weather.openmeteo_client import OpenMeteoForecastClient
from city_weather.weather_models import WeatherDisplay


class WeatherPipeline:
    """Turns a city name into its hourly temperature forecast.

    Args:
        geocode_cache (GeocodeCache): Resolver for city coordinates.
        forecast_client (OpenMeteoForecastClient): Forecast API client.

    Example:
        pipeline = WeatherPipeline(geocode_cache, forecast_client)
        display = pipeline.handle("Berlin")
    """

    def __init__(
        self,
        geocode_cache: GeocodeCache,
        forecast_client: OpenMeteoForecastClient,
    ) -> None:
        self.geocode_cache = geocode_cache
        self.forecast_client = forecast_client

        self.logger = logging.getLogger(name=self.__class__.__name__)

    def handle(self, city_name: str) -> WeatherDisplay:
        """Resolve, fetch and aggregate the forecast for one city.

        Args:
            city_name (str): Non-empty city name.

        Raises:
            NotFoundError: When the city cannot be geocoded.
            UpstreamError: When an external API or the store fails.

        Returns:
            WeatherDisplay: The requested name with its ordered forecast samples.
        """
        coordinate = self.geocode_cache.resolve(city_name)

        series = self.forecast_client.fetch(coordinate)

        forecasts = aggregate(series)

        self.logger.info(f"Built {len(forecasts)} forecast samples for {city_name!r}")

        return WeatherDisplay(city=city_name, forecasts=forecasts)
