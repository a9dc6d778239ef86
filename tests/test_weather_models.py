"""Tests for the city store."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import OperationalError

from city_weather.errors import UpstreamError
from city_weather.weather_models import City, Coordinate

BERLIN = Coordinate(latitude=52.52, longitude=13.405)


def count_rows(database, name: str) -> int:
    with database.Session() as session:
        return session.scalar(select(func.count()).select_from(City).where(City.name == name))


class TestCityDatabase:
    def test_create_tables_is_idempotent(self, database):
        database.create_tables()

        inspector = inspect(database.Session.kw["bind"])
        assert "cities" in inspector.get_table_names()
        assert {column["name"] for column in inspector.get_columns("cities")} == {
            "id",
            "name",
            "lat",
            "long",
        }

    def test_unknown_city_returns_none(self, database):
        assert database.get_coordinate("Berlin") is None

    def test_insert_then_get(self, database):
        database.insert_city("Berlin", BERLIN)

        assert database.get_coordinate("Berlin") == BERLIN

    def test_lookup_is_case_sensitive(self, database):
        database.insert_city("Berlin", BERLIN)

        assert database.get_coordinate("berlin") is None
        assert database.get_coordinate("Berlin ") is None

    def test_duplicate_names_are_accepted_and_first_write_wins(self, database):
        database.insert_city("Springfield", Coordinate(39.78, -89.65))
        database.insert_city("Springfield", Coordinate(42.10, -72.59))

        assert count_rows(database, "Springfield") == 2
        assert database.get_coordinate("Springfield") == Coordinate(39.78, -89.65)

    def test_recent_cities_newest_first(self, database):
        for name in ["Berlin", "Paris", "Rome"]:
            database.insert_city(name, BERLIN)

        assert database.get_recent_cities() == ["Rome", "Paris", "Berlin"]
        assert database.get_recent_cities(limit=2) == ["Rome", "Paris"]

    def test_recent_cities_empty(self, database):
        assert database.get_recent_cities() == []

    def test_connectivity_test(self, database):
        assert database.connectivity_test() is True

    def test_read_failure_raises_upstream_error(self, database, monkeypatch):
        monkeypatch.setattr(
            database,
            "Session",
            MagicMock(side_effect=OperationalError("SELECT", {}, Exception("down"))),
        )

        with pytest.raises(UpstreamError):
            database.get_coordinate("Berlin")

        with pytest.raises(UpstreamError):
            database.get_recent_cities()

    def test_write_failure_rolls_back_and_raises(self, database, monkeypatch):
        session = MagicMock()
        session.__enter__.return_value = session
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
        monkeypatch.setattr(database, "Session", MagicMock(return_value=session))

        with pytest.raises(UpstreamError):
            database.insert_city("Berlin", BERLIN)

        session.rollback.assert_called_once()
