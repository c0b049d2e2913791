"""
Base Carrier Interface

- All carriers implement BaseCarrier
- Carriers are independent implementations, never subclasses of each other
- Domain values below are carrier-agnostic; each adapter maps to/from its
  own wire format

Future capabilities (label purchase, tracking, address validation) extend
BaseCarrier; carriers that do not support them simply do not define them.
"""
import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple, Union


class DimensionUnit(str, enum.Enum):
    IN = "IN"
    CM = "CM"


class WeightUnit(str, enum.Enum):
    LBS = "LBS"
    KGS = "KGS"


# =============================================================================
# Carrier-Agnostic Data Classes
# =============================================================================

@dataclass(frozen=True)
class Address:
    """Postal address. country_code is ISO 3166-1 alpha-2."""
    name: str
    street_lines: Tuple[str, ...]
    city: str
    state_code: str
    postal_code: str
    country_code: str
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class PackageDimensions:
    length: float
    width: float
    height: float
    unit: Union[DimensionUnit, str] = DimensionUnit.IN


@dataclass(frozen=True)
class PackageWeight:
    value: float
    unit: Union[WeightUnit, str] = WeightUnit.LBS


@dataclass(frozen=True)
class PackageSpec:
    """One package. Unit conversion, if any, is the carrier's concern."""
    dimensions: PackageDimensions
    weight: PackageWeight
    description: Optional[str] = None
    packaging_type: Optional[str] = None  # carrier-specific code


@dataclass(frozen=True)
class RateRequest:
    """
    Rate query.

    service_code None means rate shop (every available service); a value means
    quote that one service only.
    """
    origin: Address
    destination: Address
    packages: Tuple[PackageSpec, ...]
    service_code: Optional[str] = None

    @property
    def is_rate_shop(self) -> bool:
        return not self.service_code


@dataclass(frozen=True)
class ChargeLine:
    """One line of a quote's charge breakdown."""
    description: str
    amount: Decimal
    currency: str


@dataclass(frozen=True)
class RateQuote:
    """Normalized rate quote returned by any carrier."""
    carrier: str
    service_code: str
    service_name: str
    total_cost: Decimal
    currency: str
    transit_days: Optional[int] = None
    guaranteed_delivery: bool = False
    charges: Tuple[ChargeLine, ...] = ()


def unit_code(unit: Union[enum.Enum, str]) -> str:
    """Plain string code for a unit given as enum member or string."""
    return unit.value if isinstance(unit, enum.Enum) else unit


# =============================================================================
# Base Carrier Interface
# =============================================================================

class BaseCarrier(ABC):
    """
    Abstract base class for all shipping carriers.

    The registry and aggregation service only ever see this interface.
    """

    @property
    @abstractmethod
    def code(self) -> str:
        """Unique carrier code (registry key)."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable carrier name."""
        pass

    @abstractmethod
    async def get_rates(self, request: RateRequest) -> List[RateQuote]:
        """
        Get shipping rates from the carrier.

        Args:
            request: Origin, destination, packages and optional service code

        Returns:
            Quotes in the order the carrier returned them

        Raises:
            CarrierError: on any failure, never anything else
        """
        pass

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None
