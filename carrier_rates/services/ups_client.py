"""
UPS OAuth Client

Implements the UPS OAuth 2.0 client-credentials flow with an in-memory token
cache. One UPSTokenCache belongs to one carrier adapter; nothing is shared
between accounts or processes.

- Tokens are reused until 60s before the expiry UPS reports
- Concurrent cache misses may both re-authenticate; the last write wins
- Token values are never logged
"""
import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from carrier_rates.core.config import UPS_PRODUCTION_URL, UPS_SANDBOX_URL
from carrier_rates.core.exceptions import CarrierError, CarrierErrorKind
from carrier_rates.core.http_client import HTTPTransport
from carrier_rates.models.carrier import CarrierCode

logger = logging.getLogger(__name__)

# OAuth endpoints
OAUTH_TOKEN_PATH = "/security/v1/oauth/token"

# API endpoints
RATING_VERSION = "v2403"
RATING_PATH = f"/api/rating/{RATING_VERSION}"  # + /Rate or /Shop

# Refresh this many seconds before the reported expiry
TOKEN_EXPIRY_BUFFER_SECONDS = 60


@dataclass
class UPSCredentials:
    """UPS API credentials."""
    client_id: str
    client_secret: str
    account_number: str
    use_sandbox: bool = False
    base_url_override: Optional[str] = None

    @property
    def base_url(self) -> str:
        if self.base_url_override:
            return self.base_url_override.rstrip("/")
        return UPS_SANDBOX_URL if self.use_sandbox else UPS_PRODUCTION_URL

    def __repr__(self) -> str:
        return (
            f"UPSCredentials(client_id={self.client_id!r}, account_number={self.account_number!r}, "
            f"base_url={self.base_url!r})"
        )


@dataclass
class CachedCredential:
    """Bearer token plus absolute expiry (epoch seconds, buffer already subtracted)."""
    access_token: str
    expires_at: float


class UPSTokenCache:
    """
    Lazily obtains and caches a UPS bearer token.

    Usage:
        cache = UPSTokenCache(credentials, transport)
        token = await cache.get_token()
        ...
        cache.invalidate()  # after a 401
    """

    def __init__(
        self,
        credentials: UPSCredentials,
        transport: HTTPTransport,
        clock: Callable[[], float] = time.time,
    ):
        self.credentials = credentials
        self.transport = transport
        self._clock = clock
        self._credential: Optional[CachedCredential] = None

    @property
    def has_token(self) -> bool:
        return self._credential is not None

    async def get_token(self) -> str:
        """
        Return a valid bearer token, exchanging credentials only when needed.

        Raises:
            CarrierError: AUTH_FAILED, or the transport's TIMEOUT/NETWORK_ERROR/
                MALFORMED_RESPONSE unchanged
        """
        if self._credential and self._clock() < self._credential.expires_at:
            return self._credential.access_token
        return await self._fetch_token()

    def invalidate(self) -> None:
        """Drop the cached token. The next get_token() re-authenticates."""
        if self._credential is not None:
            logger.info("UPS OAuth token invalidated")
        self._credential = None

    async def _fetch_token(self) -> str:
        url = f"{self.credentials.base_url}{OAUTH_TOKEN_PATH}"

        # Basic auth header
        auth_string = f"{self.credentials.client_id}:{self.credentials.client_secret}"
        auth_header = base64.b64encode(auth_string.encode()).decode()

        try:
            response = await self.transport.send(
                "POST",
                url,
                headers={"Authorization": f"Basic {auth_header}"},
                body="grant_type=client_credentials",
                form=True,
            )

            if response.status != 200:
                logger.error(f"UPS OAuth failed: {response.status}")
                raise CarrierError(
                    CarrierErrorKind.AUTH_FAILED,
                    "Failed to obtain UPS access token",
                    carrier=CarrierCode.UPS.value,
                    status_code=response.status,
                    details={"response": response.data},
                )

            data = response.data
            access_token = data["access_token"]
            if not isinstance(access_token, str) or not access_token:
                raise ValueError("access_token must be a non-empty string")
            expires_in = int(data["expires_in"])

            self._credential = CachedCredential(
                access_token=access_token,
                expires_at=self._clock() + expires_in - TOKEN_EXPIRY_BUFFER_SECONDS,
            )
            logger.info(f"UPS OAuth token obtained, expires in {expires_in}s")
            return access_token

        except CarrierError as e:
            if e.carrier is None:
                e.carrier = CarrierCode.UPS.value
            raise
        except Exception as e:
            logger.error(f"UPS OAuth token exchange failed: {type(e).__name__}: {e}")
            raise CarrierError(
                CarrierErrorKind.AUTH_FAILED,
                "Unexpected error during UPS token acquisition",
                carrier=CarrierCode.UPS.value,
                cause=e,
            ) from e
