"""
HTTP Transport for Carrier API Calls

All carrier traffic goes through HTTPTransport.send(). It issues exactly one
request (no retries), enforces a per-call timeout, always parses the body as
JSON and classifies every failure as a CarrierError:

- timeout/cancellation     -> TIMEOUT
- body is not JSON         -> MALFORMED_RESPONSE (any status code)
- DNS/refused/reset/other  -> NETWORK_ERROR

Non-2xx responses with a JSON body are returned, not raised. Interpreting
status codes is the carrier adapter's job.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

import httpx

from carrier_rates.core.exceptions import CarrierError, CarrierErrorKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

# How much of a non-JSON body is kept for diagnostics
MAX_BODY_DETAIL_CHARS = 500


@dataclass
class TransportResponse:
    """Outcome of one HTTP exchange with a JSON body."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    data: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HTTPTransport:
    """
    Async single-shot HTTP client with timeout and error classification.

    Usage:
        async with HTTPTransport(timeout=10.0) as transport:
            response = await transport.send("POST", url, body={"a": 1})
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        default_headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            timeout: Default per-call timeout in seconds
            default_headers: Headers sent with every request
            transport: Optional httpx transport (httpx.MockTransport in tests)
        """
        self.timeout = timeout
        self.default_headers = default_headers or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def init(self):
        """Initialize client without context manager. Must call close() when done."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.default_headers,
                transport=self._transport,
            )
        return self

    async def close(self):
        """Close the client. Safe to call more than once."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _encode_body(body: Any, form: bool) -> Dict[str, Any]:
        """Build the httpx keyword arguments for the request body."""
        if body is None:
            return {}
        if form:
            if isinstance(body, Mapping):
                body = urlencode(body)
            if isinstance(body, str):
                body = body.encode()
            return {"content": body}
        return {"json": body}

    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Union[Mapping[str, Any], str, bytes, None] = None,
        *,
        form: bool = False,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        """
        Issue one HTTP request and return the parsed JSON response.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Per-request headers (override the defaults)
            body: JSON-serializable body, or a raw/form body when form=True
            form: Send body as application/x-www-form-urlencoded instead of JSON
            timeout: Override the default timeout for this call

        Returns:
            TransportResponse with status, headers and parsed JSON data

        Raises:
            CarrierError: TIMEOUT, MALFORMED_RESPONSE or NETWORK_ERROR
        """
        await self.init()
        call_timeout = timeout if timeout is not None else self.timeout

        request_headers = {
            "Content-Type": "application/x-www-form-urlencoded" if form else "application/json",
            "Accept": "application/json",
        }
        request_headers.update(headers or {})

        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method.upper(),
                    url,
                    headers=request_headers,
                    timeout=call_timeout,
                    **self._encode_body(body, form),
                ),
                timeout=call_timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"[HTTP] {method.upper()} {url} timed out after {call_timeout}s")
            raise CarrierError(
                CarrierErrorKind.TIMEOUT,
                f"Request timed out after {call_timeout}s",
                details={"url": url, "timeout_seconds": call_timeout},
                cause=e,
            ) from e
        except (httpx.HTTPError, OSError) as e:
            logger.warning(f"[HTTP] {method.upper()} {url} failed: {e}")
            raise CarrierError(
                CarrierErrorKind.NETWORK_ERROR,
                str(e) or "Network error",
                details={"url": url},
                cause=e,
            ) from e

        logger.debug(f"[HTTP] {method.upper()} {url} -> {response.status_code}")

        # Gateways return HTML error pages; never hand those back as data.
        text = response.text
        try:
            data = response.json()
        except ValueError as e:
            raise CarrierError(
                CarrierErrorKind.MALFORMED_RESPONSE,
                "Response is not valid JSON",
                status_code=response.status_code,
                details={"body": text[:MAX_BODY_DETAIL_CHARS]},
                cause=e,
            ) from e

        return TransportResponse(
            status=response.status_code,
            headers=dict(response.headers),
            data=data,
            text=text,
        )
