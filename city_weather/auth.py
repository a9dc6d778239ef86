"""Static Basic credential check for the stats endpoint.

AuthGate.authorize() has exactly two outcomes. Any failure (missing header,
other scheme, undecodable payload, wrong credential) collapses into the same
Unauthorized value carrying the 401 challenge.
"""

import base64
import binascii
import hmac
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

CHALLENGE_HEADER = "WWW-Authenticate"
CHALLENGE = 'Basic realm="Please enter your credentials"'
SCHEME_PREFIX = "Basic "


@dataclass(frozen=True)
class Authorized:
    username: str


@dataclass(frozen=True)
class Unauthorized:
    status_code: int = 401
    headers: Dict[str, str] = field(
        default_factory=lambda: {CHALLENGE_HEADER: CHALLENGE}, hash=False
    )
    body: str = "Unauthorized"


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value

    # plain dicts are case-sensitive, HTTP header names are not
    for key, candidate in headers.items():
        if key.lower() == name.lower():
            return candidate

    return None


class AuthGate:
    """Validates the Authorization header against one static credential.

    Args:
        username (str): Expected username.
        password (str): Expected password.

    Example:
        gate = AuthGate("forecast", "forecast")
        result = gate.authorize(request.headers)
        if isinstance(result, Unauthorized):
            ...
    """

    def __init__(self, username: str, password: str) -> None:
        self.__expected = f"{username}:{password}".encode("utf-8")
        self.__username = username

        self.logger = logging.getLogger(name=self.__class__.__name__)

    def authorize(self, headers: Mapping[str, str]) -> Authorized | Unauthorized:
        """Check the Authorization header of a request.

        Args:
            headers (Mapping[str, str]): Request headers.

        Returns:
            Authorized | Unauthorized: Authorized if the header carries the
                Basic-encoded static credential, Unauthorized otherwise.
        """
        authorization = _get_header(headers, "Authorization")

        if authorization is None:
            self.logger.warning("Denied request without Authorization header")
            return Unauthorized()

        if not authorization.startswith(SCHEME_PREFIX):
            self.logger.warning("Denied request with non-Basic Authorization header")
            return Unauthorized()

        try:
            decoded = base64.b64decode(authorization[len(SCHEME_PREFIX):].strip(), validate=True)
        except (binascii.Error, ValueError):
            self.logger.warning("Denied request with malformed Basic payload")
            return Unauthorized()

        if not hmac.compare_digest(decoded, self.__expected):
            self.logger.warning("Denied request with wrong credential")
            return Unauthorized()

        return Authorized(username=self.__username)
