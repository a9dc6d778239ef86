"""Tests for forecast aggregation and temperature formatting."""

import pytest

from city_weather.forecast_aggregator import aggregate, format_temperature
from city_weather.weather_models import ForecastSample, ForecastSeries


class TestAggregate:
    def test_pairs_samples_in_order(self):
        series = ForecastSeries(
            times=["2024-01-01T00:00", "2024-01-01T01:00", "2024-01-01T02:00"],
            temperatures=[3.5, 2.0, -1.25],
        )

        assert aggregate(series) == [
            ForecastSample(date="2024-01-01T00:00", temperature="3.5"),
            ForecastSample(date="2024-01-01T01:00", temperature="2"),
            ForecastSample(date="2024-01-01T02:00", temperature="-1.25"),
        ]

    def test_more_times_than_temperatures_drops_tail(self):
        series = ForecastSeries(times=["t0", "t1", "t2"], temperatures=[1.0, 2.0])

        assert aggregate(series) == [
            ForecastSample(date="t0", temperature="1"),
            ForecastSample(date="t1", temperature="2"),
        ]

    def test_more_temperatures_than_times_drops_tail(self):
        series = ForecastSeries(times=["t0"], temperatures=[1.5, 2.5, 3.5])

        assert aggregate(series) == [ForecastSample(date="t0", temperature="1.5")]

    def test_empty_series(self):
        assert aggregate(ForecastSeries(times=[], temperatures=[])) == []

    def test_one_side_empty(self):
        assert aggregate(ForecastSeries(times=["t0", "t1"], temperatures=[])) == []


@pytest.mark.parametrize(
    "value, expected",
    [
        (3.5, "3.5"),
        (1.0, "1"),
        (0.0, "0"),
        (100.0, "100"),
        (-0.5, "-0.5"),
        (13.405, "13.405"),
        (0.1, "0.1"),
        (1e20, "100000000000000000000"),
        (1e-7, "0.0000001"),
        (21, "21"),
    ],
)
def test_format_temperature(value, expected):
    assert format_temperature(value) == expected


def test_format_temperature_non_finite():
    assert format_temperature(float("nan")) == "NaN"
    assert format_temperature(float("inf")) == "inf"
    assert format_temperature(float("-inf")) == "-inf"
