"""City Weather Data Models and Database Management

This module defines the value types passed between the service components and
the persistence layer for resolved city coordinates.

Core Components:

Value Types:
- Coordinate: Immutable latitude/longitude pair
- ForecastSeries: Raw hourly series as returned by the forecast API
- ForecastSample: One formatted (date, temperature) pair
- WeatherDisplay: Forecast samples paired with the requested city name

Database Models:
- City: Resolved city coordinates, table "cities"

Database Management:
- DatabaseEngine: SQLAlchemy engine configuration from a database URL
- CityDatabase: High-level interface for all city store operations

Storage Semantics:
The "cities" table is append-only. The name column carries a non-unique index,
so concurrent first-time resolutions of the same city may each insert a row
without failing. Reads return the oldest row for a name, which makes the first
successful write authoritative. Rows are never updated or deleted.

Session Management:
Every operation opens its own session from a shared engine, so a single
CityDatabase instance can serve concurrent requests from several threads.

Usage Patterns:
    database = CityDatabase(DatabaseEngine(config.database_url).get_engine)
    database.create_tables()
    database.insert_city("Berlin", Coordinate(52.52, 13.405))
    coordinate = database.get_coordinate("Berlin")
    database.close()

Dependencies:
- SQLAlchemy: ORM and database abstraction layer
- PostgreSQL: Primary database backend with psycopg2 driver
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import Column, Float, Integer, String, create_engine, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from city_weather.errors import UpstreamError

Base = declarative_base()


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass
class ForecastSeries:
    """Hourly temperature series as returned by the forecast API.

    times and temperatures are expected to have equal length. latitude,
    longitude and timezone are echoed by the API and kept for reference only.
    """

    times: List[str] = field(default_factory=list)
    temperatures: List[float] = field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None


@dataclass(frozen=True)
class ForecastSample:
    date: str
    temperature: str


@dataclass
class WeatherDisplay:
    city: str
    forecasts: List[ForecastSample] = field(default_factory=list)


class City(Base):
    """Resolved city coordinates data table.

    Table Structure:
    - id: Autoincrementing primary key, also the insertion order
    - name: City name as requested, matched case-sensitively
    - lat, long: Coordinates returned by the geocoding API
    - Non-unique index on name; duplicate names are tolerated
    """

    __tablename__ = "cities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, index=True, nullable=False)
    latitude = Column("lat", Float, nullable=False)
    longitude = Column("long", Float, nullable=False)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(latitude=float(self.latitude), longitude=float(self.longitude))


class DatabaseEngine:
    """SQLAlchemy Database Engine Configuration

    Builds the engine from a database URL. PostgreSQL with the psycopg2 driver is
    the production backend; SQLite URLs are accepted for local runs and tests and
    are opened with check_same_thread disabled so the connection pool can hand
    connections to FastAPI worker threads.

    Args:
        database_url (str): SQLAlchemy database URL.
    """

    def __init__(self, database_url: str) -> None:
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self.__engine = create_engine(
            database_url,
            echo=False,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

    @property
    def get_engine(self) -> Engine:
        """SQLAlchemy database engine.

        Returns:
            sqlalchemy.engine.Engine: Configured SQLAlchemy engine instance
                ready for database operations.
        """
        return self.__engine


class CityDatabase:
    """City Database Management Class

    This class owns the persisted set of city records. Callers never touch City
    rows directly; they go through get_coordinate and insert_city.

    Every SQLAlchemyError is logged and re-raised as UpstreamError so that
    storage failures surface to the HTTP layer as a service failure.

    Attributes:
        logger: Configured logger instance for database operations
        Session: Session factory bound to the engine

    Example:
        database = CityDatabase(DatabaseEngine("sqlite:///cities.db").get_engine)
        database.create_tables()
        database.close()
    """

    def __init__(self, engine: Engine) -> None:
        """Initialize CityDatabase instance.

        Args:
            engine (Engine): SQLAlchemy engine shared by all sessions.
        """
        self.logger = logging.getLogger(name=self.__class__.__name__)

        self.__engine = engine

        self.Session = sessionmaker(bind=self.__engine, expire_on_commit=False)

    def create_tables(self) -> None:
        """Create the cities table and its name index if they do not exist.

        Raises:
            UpstreamError: When the database rejects the DDL statements.
        """
        try:
            Base.metadata.create_all(self.__engine)
        except SQLAlchemyError as e:
            self.logger.error(f"Error during table creation: {e}")
            raise UpstreamError("Could not create database tables") from e

        self.logger.info(f"Tables {list(Base.metadata.tables.keys())} are available.")

    def connectivity_test(self) -> bool:
        """Check whether the database answers a trivial query.

        Returns:
            bool: True if SELECT 1 succeeds, False otherwise.
        """
        try:
            with self.__engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            self.logger.warning(f"Connectivity test failed: {e}")
            return False

        return True

    def get_coordinate(self, name: str) -> Optional[Coordinate]:
        """Look up the stored coordinate of a city.

        Matching is exact and case-sensitive. When several rows exist for the
        same name, the oldest one wins.

        Args:
            name (str): City name as requested.

        Raises:
            UpstreamError: When the query fails.

        Returns:
            Optional[Coordinate]: Stored coordinate, or None if the city is unknown.
        """
        try:
            with self.Session() as session:
                city = session.scalars(
                    select(City).where(City.name == name).order_by(City.id).limit(1)
                ).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error during lookup of {name!r}: {e}")
            raise UpstreamError(f"Could not read city {name!r} from the database") from e

        if city is None:
            return None

        return city.to_coordinate()

    def insert_city(self, name: str, coordinate: Coordinate) -> None:
        """Persist a resolved city.

        The row is committed in its own transaction. Duplicate names are
        accepted.

        Args:
            name (str): City name as requested.
            coordinate (Coordinate): Coordinate returned by the geocoding API.

        Raises:
            UpstreamError: When the insert cannot be committed. The transaction
                is rolled back first.
        """
        with self.Session() as session:
            session.add(
                City(
                    name=name,
                    latitude=coordinate.latitude,
                    longitude=coordinate.longitude,
                )
            )
            try:
                session.commit()
            except SQLAlchemyError as e:
                self.logger.error(f"Error during writing city {name!r}: {e}")
                self.logger.info("Rolling back transaction...")
                session.rollback()
                raise UpstreamError(f"Could not store city {name!r}") from e

        self.logger.debug(f"Stored {name!r} at {coordinate}")

    def get_recent_cities(self, limit: int = 10) -> List[str]:
        """Retrieve the names of the most recently stored cities.

        Args:
            limit (int, optional): Maximum number of names. Defaults to 10.

        Raises:
            UpstreamError: When the query fails.

        Returns:
            List[str]: City names, newest first.
        """
        try:
            with self.Session() as session:
                names = session.scalars(
                    select(City.name).order_by(City.id.desc()).limit(limit)
                ).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error during retrieval of recent cities: {e}")
            raise UpstreamError("Could not read recent cities from the database") from e

        return list(names)

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self.__engine.dispose()
        self.logger.info("Database connections closed.")
