"""Forecast aggregation: pairs the parallel hourly sequences of a ForecastSeries
into ordered ForecastSample records.
"""

import math
from decimal import Decimal
from typing import List

from city_weather.weather_models import ForecastSample, ForecastSeries


def format_temperature(value: float) -> str:
    """Format a temperature as its shortest decimal string.

    No exponent and no trailing ".0": 1.0 -> "1", 3.5 -> "3.5", 100.0 -> "100".

    Args:
        value (float): Temperature in degrees Celsius.

    Returns:
        str: Canonical decimal representation.
    """
    value = float(value)

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"

    return format(Decimal(repr(value)).normalize(), "f")


def aggregate(series: ForecastSeries) -> List[ForecastSample]:
    """Zip timestamps and temperatures into forecast samples.

    When the sequences differ in length the result stops at the shorter one;
    the surplus tail is dropped.

    Args:
        series (ForecastSeries): Raw hourly series.

    Returns:
        List[ForecastSample]: One sample per index, in upstream order.
    """
    return [
        ForecastSample(date=time, temperature=format_temperature(temperature))
        for time, temperature in zip(series.times, series.temperatures)
    ]
