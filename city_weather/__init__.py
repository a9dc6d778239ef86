"""City weather service: cached city geocoding and hourly forecasts from Open-Meteo."""
