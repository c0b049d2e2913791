"""
Carrier Registry

- Maps carrier codes to carrier instances
- Each code maps to at most one carrier; registering again replaces it in place
- Lookup of an unknown code raises CARRIER_NOT_FOUND (no network involved)
"""
from typing import Dict, Iterator, List
import logging

from carrier_rates.core.exceptions import CarrierError, CarrierErrorKind
from carrier_rates.modules.shipping.carriers.base import BaseCarrier

logger = logging.getLogger(__name__)


class CarrierRegistry:
    """
    Registry of configured carrier instances.

    Usage:
        registry = CarrierRegistry()
        registry.register(UPSCarrier(credentials))
        carrier = registry.get("UPS")
    """

    def __init__(self):
        self._carriers: Dict[str, BaseCarrier] = {}

    def register(self, carrier: BaseCarrier) -> None:
        """Register a carrier under its code."""
        if carrier.code in self._carriers:
            logger.warning(f"Replacing registered carrier: {carrier.code}")
        else:
            logger.info(f"Registered carrier: {carrier.code} -> {type(carrier).__name__}")
        self._carriers[carrier.code] = carrier

    def get(self, code: str) -> BaseCarrier:
        """
        Get the carrier registered for a code.

        Raises:
            CarrierError: CARRIER_NOT_FOUND if nothing is registered for code
        """
        carrier = self._carriers.get(code)
        if carrier is None:
            raise CarrierError(
                CarrierErrorKind.CARRIER_NOT_FOUND,
                f'No carrier registered for code "{code}"',
                details={"code": code, "registered": self.codes()},
            )
        return carrier

    def list(self) -> List[BaseCarrier]:
        """All carriers in registration order."""
        return list(self._carriers.values())

    def codes(self) -> List[str]:
        return list(self._carriers.keys())

    def __contains__(self, code: object) -> bool:
        return code in self._carriers

    def __len__(self) -> int:
        return len(self._carriers)

    def __iter__(self) -> Iterator[BaseCarrier]:
        return iter(self.list())


__all__ = ["BaseCarrier", "CarrierRegistry"]
