"""Live calls against the public Open-Meteo APIs.

Deselected by default; run with `pytest -m integration`.
"""

import pytest

from city_weather.config import ServiceConfig
from city_weather.errors import NotFoundError
from city_weather.openmeteo_client import (
    OpenMeteoForecastClient,
    OpenMeteoGeocodingClient,
)
from city_weather.weather_models import Coordinate


@pytest.fixture
def live_config(tmp_path):
    return ServiceConfig(
        from_env=False,
        kwargs={
            "database_url": f"sqlite:///{tmp_path / 'cities.db'}",
            "http_cache_name": str(tmp_path / "http_cache"),
        },
    )


@pytest.mark.integration
class TestOpenMeteoLive:
    def test_geocodes_berlin(self, live_config):
        coordinate = OpenMeteoGeocodingClient(live_config).lookup("Berlin")

        assert coordinate.latitude == pytest.approx(52.52, abs=0.1)
        assert coordinate.longitude == pytest.approx(13.41, abs=0.1)

    def test_unknown_city_is_not_found(self, live_config):
        with pytest.raises(NotFoundError):
            OpenMeteoGeocodingClient(live_config).lookup("Qwxzvbnmlkjh")

    def test_forecast_has_hourly_temperatures(self, live_config):
        series = OpenMeteoForecastClient(live_config).fetch(Coordinate(52.52, 13.405))

        assert series.times
        assert len(series.times) == len(series.temperatures)
