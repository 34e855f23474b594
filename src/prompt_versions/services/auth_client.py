"""HTTP client for verifying caller credentials."""

from typing import Any, Dict, Optional

import httpx
import structlog

from ..core.config import settings
from ..core.exceptions import AuthenticationError

logger = structlog.get_logger(__name__)


class AuthClient:
    """Resolves a bearer token to a user through the auth service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize auth client.

        Args:
            base_url: Auth service base URL
            api_key: Service api key sent as ``apikey``
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.base_url = (base_url or settings.auth_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.auth_api_key
        self.timeout = timeout or settings.auth_timeout
        self._transport = transport

    async def get_user(self, authorization: Optional[str]) -> Dict[str, Any]:
        """Return the user owning ``authorization``.

        Args:
            authorization: Raw ``Authorization`` header value

        Returns:
            User payload from the auth service, with at least an ``id``

        Raises:
            AuthenticationError: When the header is missing or rejected
        """
        if not authorization:
            raise AuthenticationError("Authorization required", error_code="AUTH_REQUIRED")

        headers = {"Authorization": authorization}
        if self.api_key:
            headers["apikey"] = self.api_key

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(float(self.timeout)),
            transport=self._transport,
        ) as client:
            try:
                response = await client.get("/auth/v1/user", headers=headers)
            except httpx.HTTPError as e:
                logger.warning("Auth service request failed", error=str(e), auth_url=self.base_url)
                raise AuthenticationError("Invalid authentication") from e

        if response.status_code != 200:
            logger.info("Credential rejected", status_code=response.status_code)
            raise AuthenticationError("Invalid authentication")

        try:
            user = response.json()
        except ValueError as e:
            raise AuthenticationError("Invalid authentication") from e

        if not isinstance(user, dict) or not user.get("id"):
            raise AuthenticationError("Invalid authentication")

        return user
