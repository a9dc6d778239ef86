"""City Weather Bootstrap Module

Creates the "cities" table and its name index when the service is first
deployed. Existing tables and rows are left untouched, so the routine is safe
to run on every deployment.

Usage:
    python -m city_weather.bootstrap

Configuration:
    The database URL is taken from ServiceConfig (DATABASE_URL or the
    POSTGRES_* environment variables).
"""

import logging
import sys

from city_weather.config import ServiceConfig, configure_logging
from city_weather.errors import UpstreamError
from city_weather.weather_models import CityDatabase, DatabaseEngine


def main() -> int:
    """Run the bootstrap routine.

    Returns:
        int: Process exit code, 0 on success and 1 on failure.
    """
    config = ServiceConfig()
    configure_logging(config.log_level)
    logger = logging.getLogger(name="Bootstrap Service")

    database = CityDatabase(DatabaseEngine(config.database_url).get_engine)

    try:
        logger.info("Starting bootstrap routine...")
        database.create_tables()
        logger.info("Bootstrap routine completed successfully!")
        return 0
    except UpstreamError:
        logger.exception("An error occurred during the bootstrap routine: ")
        return 1
    finally:
        database.close()


if __name__ == "__main__":
    sys.exit(main())
