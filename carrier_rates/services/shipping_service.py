"""
Shipping Service

Entry point for rate queries across carriers:
- get_rates: one carrier, errors propagate unchanged
- get_rates_from_all: every registered carrier concurrently; one carrier's
  failure never blocks or hides another's quotes
- Results keep registry order and are never merged, sorted or deduplicated

Usage:
    service = create_shipping_service(get_settings())
    results = await service.get_rates_from_all(request)
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from carrier_rates.core.config import Settings
from carrier_rates.core.exceptions import CarrierError
from carrier_rates.modules.shipping.carriers import CarrierRegistry
from carrier_rates.modules.shipping.carriers.base import RateQuote, RateRequest
from carrier_rates.modules.shipping.carriers.ups import UPSCarrier
from carrier_rates.services.ups_client import UPSCredentials

logger = logging.getLogger(__name__)


@dataclass
class CarrierRateResult:
    """Outcome for one carrier in a fan-out query."""
    carrier: str
    quotes: List[RateQuote] = field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"carrier": self.carrier, "quotes": self.quotes}
        if self.error is not None:
            data["error"] = self.error
            data["error_kind"] = self.error_kind
        return data


class ShippingService:
    """Delegates rate queries to registered carriers."""

    def __init__(self, registry: CarrierRegistry):
        self.registry = registry

    async def get_rates(self, carrier_code: str, request: RateRequest) -> List[RateQuote]:
        """
        Get rates from a specific carrier.

        Raises:
            CarrierError: CARRIER_NOT_FOUND or whatever the carrier raised
        """
        carrier = self.registry.get(carrier_code)
        return await carrier.get_rates(request)

    async def get_rates_from_all(self, request: RateRequest) -> List[CarrierRateResult]:
        """
        Get rates from every registered carrier in parallel.

        Carrier failures never raise. Each carrier gets exactly one result, in
        registry order; a failed carrier has no quotes and a human-readable error.
        """
        carriers = self.registry.list()
        if not carriers:
            logger.warning("No carriers registered for rate lookup")
            return []

        outcomes = await asyncio.gather(
            *(carrier.get_rates(request) for carrier in carriers),
            return_exceptions=True,
        )

        results: List[CarrierRateResult] = []
        for carrier, outcome in zip(carriers, outcomes):
            if isinstance(outcome, CarrierError):
                logger.warning(f"Error getting rates from {carrier.code}: {outcome}")
                results.append(CarrierRateResult(
                    carrier=carrier.code,
                    error=outcome.message,
                    error_kind=outcome.kind.value,
                ))
            elif isinstance(outcome, Exception):
                logger.error(f"Unexpected error getting rates from {carrier.code}: {outcome!r}")
                results.append(CarrierRateResult(
                    carrier=carrier.code,
                    error=str(outcome) or type(outcome).__name__,
                ))
            elif isinstance(outcome, BaseException):
                # Cancellation and interpreter exits are not carrier failures
                raise outcome
            else:
                logger.info(f"Got {len(outcome)} rates from {carrier.code}")
                results.append(CarrierRateResult(carrier=carrier.code, quotes=list(outcome)))

        return results

    async def close(self) -> None:
        """Release every carrier's network resources."""
        for carrier in self.registry.list():
            try:
                await carrier.close()
            except Exception as e:
                logger.warning(f"Error closing carrier {carrier.code}: {e}")


def create_shipping_service(settings: Settings) -> ShippingService:
    """Build the service with every carrier configured in settings."""
    registry = CarrierRegistry()
    registry.register(UPSCarrier(
        UPSCredentials(
            client_id=settings.UPS_CLIENT_ID,
            client_secret=settings.UPS_CLIENT_SECRET,
            account_number=settings.UPS_ACCOUNT_NUMBER,
            use_sandbox=settings.UPS_USE_SANDBOX,
            base_url_override=settings.ups_base_url,
        ),
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
        negotiated_rates=settings.UPS_NEGOTIATED_RATES,
        transaction_source=settings.UPS_TRANSACTION_SOURCE,
    ))
    return ShippingService(registry)
