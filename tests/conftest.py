"""Shared fixtures for the city weather service tests."""

from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
import requests

from city_weather.config import ServiceConfig
from city_weather.weather_models import CityDatabase, DatabaseEngine


def make_response(
    json_body: Any = None,
    status_code: int = 200,
    invalid_json: bool = False,
) -> MagicMock:
    """Build a stand-in for requests.Response."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code

    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Server Error"
        )

    if invalid_json:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    else:
        response.json.return_value = json_body

    return response


def make_session(response: Optional[MagicMock] = None) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    if response is not None:
        session.get.return_value = response
    return session


@pytest.fixture
def config(tmp_path) -> ServiceConfig:
    return ServiceConfig(
        from_env=False,
        kwargs={
            "database_url": f"sqlite:///{tmp_path / 'cities.db'}",
            "http_cache_name": str(tmp_path / "http_cache"),
        },
    )


@pytest.fixture
def database(config):
    city_database = CityDatabase(DatabaseEngine(config.database_url).get_engine)
    city_database.create_tables()
    yield city_database
    city_database.close()
