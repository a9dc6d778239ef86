"""
City Weather Frontend API

A FastAPI application that resolves city names to coordinates, serves hourly
temperature forecasts for them and lists recently resolved cities.

Features:
    - Health check endpoint for monitoring database connectivity
    - Hourly temperature forecast by city name
    - Recently resolved cities, protected by a static Basic credential

Endpoints:
    GET /health - Service and database health status
    GET /weather?city={name} - Hourly forecast for a city
    GET /stats - Most recently resolved city names (Basic auth)

Status Codes:
    - 404 when the city has no geocoding match
    - 503 when an upstream API or the database fails
    - 401 with a WWW-Authenticate challenge when /stats credentials are rejected

Dependencies:
    - FastAPI: Web framework for building APIs
    - Pydantic: Response serialization
    - city_weather: Pipeline, auth gate and city store

Configuration:
    All settings come from ServiceConfig (environment variables or a JSON file).
    Components are built in the lifespan hook and kept on app.state; any of them
    can be injected through create_app().
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from city_weather.auth import AuthGate, Authorized, Unauthorized
from city_weather.config import ServiceConfig, configure_logging
from city_weather.errors import NotFoundError, UpstreamError
from city_weather.geocode_cache import GeocodeCache
from city_weather.openmeteo_client import (
    OpenMeteoForecastClient,
    OpenMeteoGeocodingClient,
    build_session,
)
from city_weather.weather_models import CityDatabase, DatabaseEngine
from city_weather.weather_pipeline import WeatherPipeline


class ForecastResponse(BaseModel):
    date: str
    temperature: str


class WeatherResponse(BaseModel):
    city: str
    forecasts: List[ForecastResponse]


class StatsResponse(BaseModel):
    cities: List[str]


class HealthResponse(BaseModel):
    status: str
    database: str
    message: Optional[str] = None


class StatsUnauthorized(Exception):
    """Carries a rejected AuthGate result to the exception handler."""

    def __init__(self, result: Unauthorized) -> None:
        self.result = result
        super().__init__(result.body)


def create_app(
    config: Optional[ServiceConfig] = None,
    database: Optional[CityDatabase] = None,
    geocoding_client: Optional[OpenMeteoGeocodingClient] = None,
    forecast_client: Optional[OpenMeteoForecastClient] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config (Optional[ServiceConfig], optional): Service configuration. Read
            from the environment when omitted.
        database (Optional[CityDatabase], optional): City store. Built from
            config.database_url when omitted.
        geocoding_client (Optional[OpenMeteoGeocodingClient], optional):
            Geocoding client. Built from config when omitted.
        forecast_client (Optional[OpenMeteoForecastClient], optional):
            Forecast client. Built from config when omitted.

    Returns:
        FastAPI: Application instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan definition of FastAPI app.

        - Builds configuration, city store, clients, pipeline and auth gate on startup.
        - Closes the database connections and HTTP session it built on shutdown.
          Injected components are left open for their owner.

        Args:
            app (FastAPI): FastAPI instance.
        """
        service_config = config if config is not None else ServiceConfig()
        configure_logging(service_config.log_level)

        city_database = database
        owned_database = None
        session = None
        try:
            if city_database is None:
                owned_database = CityDatabase(
                    DatabaseEngine(service_config.database_url).get_engine
                )
                city_database = owned_database

            geocoder = geocoding_client
            forecaster = forecast_client
            if geocoder is None or forecaster is None:
                session = build_session(service_config)
            if geocoder is None:
                geocoder = OpenMeteoGeocodingClient(service_config, session=session)
            if forecaster is None:
                forecaster = OpenMeteoForecastClient(service_config, session=session)

            app.state.config = service_config
            app.state.database = city_database
            app.state.pipeline = WeatherPipeline(
                GeocodeCache(city_database, geocoder), forecaster
            )
            app.state.auth_gate = AuthGate(
                service_config.stats_username, service_config.stats_password
            )
            yield
        finally:
            if owned_database is not None:
                owned_database.close()
            if session is not None:
                session.close()

    app = FastAPI(
        title="City Weather Service API",
        description="Hourly temperature forecasts by city name",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.exception_handler(StatsUnauthorized)
    async def stats_unauthorized_handler(
        request: Request, exc: StatsUnauthorized
    ) -> PlainTextResponse:
        return PlainTextResponse(
            exc.result.body,
            status_code=exc.result.status_code,
            headers=exc.result.headers,
        )

    def require_stats_user(request: Request) -> Authorized:
        """Run AuthGate before any /stats business logic.

        Raises:
            StatsUnauthorized: Raised when the credential check fails.

        Returns:
            Authorized: The accepted principal.
        """
        result = request.app.state.auth_gate.authorize(request.headers)

        if isinstance(result, Unauthorized):
            raise StatsUnauthorized(result)

        return result

    @app.get("/health", response_model=HealthResponse)
    def health_check(request: Request) -> HealthResponse:
        """Health check endpoint that verifies database connectivity

        Raises:
            HTTPException: Raised when the database connectivity test fails.

        Returns:
            HealthResponse: HealthResponse object.
        """
        if request.app.state.database.connectivity_test():
            return HealthResponse(
                status="healthy",
                database="connected",
                message="City database is accessible",
            )

        raise HTTPException(
            status_code=503,
            detail={"status": "unhealthy", "database": "disconnected"},
        )

    @app.get("/weather", response_model=WeatherResponse)
    def get_weather(
        request: Request,
        city: str = Query(..., min_length=1),
    ) -> WeatherResponse:
        """Get the hourly temperature forecast for a city.

        Args:
            city (str): City name, matched case-sensitively against stored cities.

        Raises:
            HTTPException: Status 404 when the city cannot be geocoded.
            HTTPException: Status 503 when an upstream API or the database fails.

        Returns:
            WeatherResponse: City name and its ordered forecast samples.
        """
        try:
            display = request.app.state.pipeline.handle(city)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except UpstreamError as e:
            raise HTTPException(status_code=503, detail=f"Service unavailable: {e}")

        return WeatherResponse(
            city=display.city,
            forecasts=[
                ForecastResponse(date=sample.date, temperature=sample.temperature)
                for sample in display.forecasts
            ],
        )

    @app.get("/stats", response_model=StatsResponse)
    def get_stats(
        request: Request,
        user: Authorized = Depends(require_stats_user),
    ) -> StatsResponse:
        """Get the most recently resolved city names, newest first.

        Raises:
            HTTPException: Status 503 when the database fails.

        Returns:
            StatsResponse: Recently stored city names.
        """
        try:
            cities = request.app.state.database.get_recent_cities(
                request.app.state.config.stats_limit
            )
        except UpstreamError as e:
            raise HTTPException(status_code=503, detail=f"Service unavailable: {e}")

        return StatsResponse(cities=cities)

    return app


app = create_app()
