"""
UPS Carrier Implementation

- Implements BaseCarrier for the UPS Rating API (v2403)
- Owns its token cache, mapper and transport; nothing is shared across carriers
- Every failure leaves as a CarrierError tagged "UPS"
- No automatic retry; a 401 only clears the token for the next call
"""
import logging
import time
import uuid
from typing import Any, Callable, List, Optional

from carrier_rates.core.exceptions import CarrierError, CarrierErrorKind
from carrier_rates.core.http_client import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_BODY_DETAIL_CHARS,
    HTTPTransport,
    TransportResponse,
)
from carrier_rates.models.carrier import CarrierCode
from carrier_rates.modules.shipping.carriers.base import BaseCarrier, RateQuote, RateRequest
from carrier_rates.modules.shipping.carriers.ups_mapper import UPSMapper
from carrier_rates.schemas.shipping import validate_rate_request
from carrier_rates.services.ups_client import RATING_PATH, UPSCredentials, UPSTokenCache

logger = logging.getLogger(__name__)

DEFAULT_TRANSACTION_SOURCE = "carrier-rates"


class UPSCarrier(BaseCarrier):
    """
    UPS shipping carrier.

    Usage:
        carrier = UPSCarrier(UPSCredentials(client_id, client_secret, account_number))
        quotes = await carrier.get_rates(request)
        await carrier.close()
    """

    def __init__(
        self,
        credentials: UPSCredentials,
        transport: Optional[HTTPTransport] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        negotiated_rates: bool = False,
        transaction_source: str = DEFAULT_TRANSACTION_SOURCE,
        clock: Callable[[], float] = time.time,
    ):
        self.credentials = credentials
        self.transport = transport or HTTPTransport(timeout=timeout)
        self.transaction_source = transaction_source
        self.auth = UPSTokenCache(credentials, self.transport, clock=clock)
        self.mapper = UPSMapper(credentials.account_number, negotiated_rates=negotiated_rates)

    @property
    def code(self) -> str:
        return CarrierCode.UPS.value

    @property
    def name(self) -> str:
        return "UPS"

    async def close(self) -> None:
        await self.transport.close()

    def _error(self, kind: CarrierErrorKind, message: str, **kwargs: Any) -> CarrierError:
        return CarrierError(kind, message, carrier=self.code, **kwargs)

    def _validate(self, request: RateRequest) -> None:
        violations = validate_rate_request(request)
        if violations:
            issues = "; ".join(f"{v.path}: {v.message}" for v in violations)
            raise self._error(
                CarrierErrorKind.VALIDATION_ERROR,
                f"Invalid rate request: {issues}",
                details={"issues": [{"path": v.path, "message": v.message} for v in violations]},
            )

    def _rating_url(self, request: RateRequest) -> str:
        # Shop for every service, Rate for a specific one
        endpoint = "Shop" if request.is_rate_shop else "Rate"
        return f"{self.credentials.base_url}{RATING_PATH}/{endpoint}"

    @staticmethod
    def _error_list(data: Any) -> Optional[List[Any]]:
        """Pull response.errors from an error body, whatever shape it arrived in."""
        envelope = data.get("response") if isinstance(data, dict) else None
        errors = envelope.get("errors") if isinstance(envelope, dict) else None

        # Single object when UPS reports one error
        if isinstance(errors, dict):
            return [errors]
        return errors if isinstance(errors, list) else None

    def _raise_for_status(self, response: TransportResponse) -> None:
        if response.status == 401:
            # Token expired or revoked between check and use
            self.auth.invalidate()
            raise self._error(
                CarrierErrorKind.AUTH_FAILED,
                "UPS authentication expired or revoked",
                status_code=401,
            )

        if response.status == 429:
            raise self._error(
                CarrierErrorKind.RATE_LIMIT,
                "UPS rate limit exceeded, try again later",
                status_code=429,
            )

        if response.status >= 400:
            errors = self._error_list(response.data)
            message = "UPS API error"
            if errors and isinstance(errors[0], dict) and errors[0].get("message"):
                message = errors[0]["message"]
            raise self._error(
                CarrierErrorKind.CARRIER_API_ERROR,
                message,
                status_code=response.status,
                details={"errors": errors},
            )

    async def get_rates(self, request: RateRequest) -> List[RateQuote]:
        """
        Get UPS rates for a shipment.

        Validation runs first; an invalid request never reaches the network.
        """
        self._validate(request)

        try:
            token = await self.auth.get_token()
            body = self.mapper.to_wire_request(request)
            url = self._rating_url(request)

            response = await self.transport.send(
                "POST",
                url,
                headers={
                    "Authorization": f"Bearer {token}",
                    "transId": str(uuid.uuid4()),
                    "transactionSrc": self.transaction_source,
                },
                body=body,
            )
            logger.debug(f"UPS rating {url} -> {response.status}")

            self._raise_for_status(response)

            try:
                quotes = self.mapper.from_wire_response(response.data)
            except Exception as e:
                logger.error(f"Failed to parse UPS rate response: {type(e).__name__}: {e}")
                raise self._error(
                    CarrierErrorKind.MALFORMED_RESPONSE,
                    "Failed to parse UPS rate response",
                    status_code=response.status,
                    details={"response": response.text[:MAX_BODY_DETAIL_CHARS]},
                    cause=e,
                ) from e

        except CarrierError as e:
            if e.carrier is None:
                e.carrier = self.code
            raise
        except Exception as e:
            logger.exception(f"Unexpected error getting UPS rates: {e}")
            raise self._error(CarrierErrorKind.UNKNOWN, str(e) or type(e).__name__, cause=e) from e

        logger.info(f"UPS returned {len(quotes)} rate(s)")
        return quotes
