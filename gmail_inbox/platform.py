"""
Client for the hosting platform's session and connector endpoints.

Each inbound request gets its own PlatformClient carrying the caller's
Authorization header. The platform owns session validation and the OAuth
lifecycle of connected accounts; this module only asks it two questions:
who is the caller, and what is the current access token for a connector.
"""

import logging
from typing import Optional

import requests

from gmail_inbox import config
from gmail_inbox.errors import AuthenticationError, PlatformError

logger = logging.getLogger(__name__)

USER_ME_PATH = "/apps/{app_id}/entities/User/me"
CONNECTOR_TOKEN_PATH = "/apps/{app_id}/external-auth/tokens/{integration}"


class PlatformClient:
    """Per-request view of the platform, scoped to the caller's session"""

    def __init__(
        self,
        authorization: Optional[str],
        *,
        base_url: str = config.PLATFORM_API_URL,
        app_id: str = config.PLATFORM_APP_ID,
        service_token: str = config.PLATFORM_SERVICE_TOKEN,
        timeout: float = config.PLATFORM_TIMEOUT,
    ):
        self.authorization = authorization
        self.base_url = base_url
        self.app_id = app_id
        self.service_token = service_token
        self.timeout = timeout

    @classmethod
    def from_request(cls, request) -> "PlatformClient":
        return cls(request.headers.get("authorization"))

    def me(self) -> Optional[dict]:
        """
        Return the session user, or None when the request carries no session.

        Raises:
            AuthenticationError: the platform rejected the session token
            PlatformError: the platform could not be reached or answered 5xx
        """
        if not self.authorization:
            return None

        url = self.base_url + USER_ME_PATH.format(app_id=self.app_id)
        response = self._get(url, self.authorization)

        if response.status_code in (401, 403):
            raise AuthenticationError("Unauthorized")
        if response.status_code != 200:
            logger.error("Platform user lookup failed: %s", response.status_code)
            raise PlatformError(f"Platform error: {response.status_code} - {response.text}")

        return response.json() or None

    def get_access_token(self, integration: str) -> str:
        """
        Fetch the current OAuth access token of a connected integration.

        The token is returned to the caller and never cached here.
        """
        url = self.base_url + CONNECTOR_TOKEN_PATH.format(
            app_id=self.app_id, integration=integration
        )
        response = self._get(url, f"Bearer {self.service_token}")

        if response.status_code != 200:
            logger.error("Connector token request for %s failed: %s", integration, response.status_code)
            raise PlatformError(
                f"Could not get access token for {integration}: {response.status_code} - {response.text}"
            )

        token = (response.json() or {}).get("access_token")
        if not token:
            raise PlatformError(f"Connector {integration} returned no access token")
        return token

    def _get(self, url: str, authorization: str) -> requests.Response:
        headers = {
            "Authorization": authorization,
            "X-App-Id": self.app_id,
            "Accept": "application/json",
        }
        try:
            return requests.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Platform request failed: %s", e)
            raise PlatformError(f"Platform request error: {e}") from e
