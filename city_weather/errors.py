"""Exception types shared by the city weather service.

NotFoundError and UpstreamError are kept distinct so callers can tell
"the city is unknown" apart from "a service we depend on is unavailable".
The HTTP layer maps them to 404 and 503 respectively.
"""


class NotFoundError(LookupError):
    """Raised when the geocoding API has no match for a city name."""

    def __init__(self, city_name: str) -> None:
        self.city_name = city_name
        super().__init__(f"No geocoding results found for {city_name!r}")


class UpstreamError(RuntimeError):
    """Raised on transport, status or body failures of an external API, or on
    a storage failure.
    """
