"""
Shipping Schemas

Pydantic models for rate requests and responses. The request models double as
the validation gate carriers run before any network call: they validate a
RateRequest dataclass directly (from_attributes) and report every violation.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError

from carrier_rates.modules.shipping.carriers.base import (
    Address,
    DimensionUnit,
    PackageDimensions,
    PackageSpec,
    PackageWeight,
    RateQuote,
    RateRequest,
    WeightUnit,
)


StreetLine = Annotated[str, Field(min_length=1)]


# ==================== Request Schemas ====================


class AddressSchema(BaseModel):
    """Postal address."""
    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., min_length=1)
    street_lines: List[StreetLine] = Field(..., min_length=1, max_length=3)
    city: str = Field(..., min_length=1)
    state_code: str = Field(..., min_length=2, max_length=3)
    postal_code: str = Field(..., min_length=1)
    country_code: str = Field(..., min_length=2, max_length=2, description="ISO 3166-1 alpha-2")
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

    def to_domain(self) -> Address:
        return Address(
            name=self.name,
            street_lines=tuple(self.street_lines),
            city=self.city,
            state_code=self.state_code,
            postal_code=self.postal_code,
            country_code=self.country_code,
            phone=self.phone,
            email=self.email,
        )


class PackageDimensionsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    length: float = Field(..., gt=0, allow_inf_nan=False)
    width: float = Field(..., gt=0, allow_inf_nan=False)
    height: float = Field(..., gt=0, allow_inf_nan=False)
    unit: DimensionUnit = DimensionUnit.IN


class PackageWeightSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    value: float = Field(..., gt=0, allow_inf_nan=False)
    unit: WeightUnit = WeightUnit.LBS


class PackageSchema(BaseModel):
    """One package in a shipment."""
    model_config = ConfigDict(from_attributes=True)

    dimensions: PackageDimensionsSchema
    weight: PackageWeightSchema
    description: Optional[str] = None
    packaging_type: Optional[str] = Field(None, description="Carrier packaging code")

    def to_domain(self) -> PackageSpec:
        return PackageSpec(
            dimensions=PackageDimensions(
                length=self.dimensions.length,
                width=self.dimensions.width,
                height=self.dimensions.height,
                unit=self.dimensions.unit,
            ),
            weight=PackageWeight(value=self.weight.value, unit=self.weight.unit),
            description=self.description,
            packaging_type=self.packaging_type,
        )


class RateRequestSchema(BaseModel):
    """Rate request. Omit service_code to rate shop across every service."""
    model_config = ConfigDict(from_attributes=True)

    origin: AddressSchema
    destination: AddressSchema
    packages: List[PackageSchema] = Field(..., min_length=1)
    service_code: Optional[str] = None

    def to_domain(self) -> RateRequest:
        return RateRequest(
            origin=self.origin.to_domain(),
            destination=self.destination.to_domain(),
            packages=tuple(p.to_domain() for p in self.packages),
            service_code=self.service_code,
        )


# ==================== Validation Gate ====================


@dataclass(frozen=True)
class FieldViolation:
    """One violated field: dotted path (e.g. packages.0.weight.value) and message."""
    path: str
    message: str


def validate_rate_request(request: Any) -> List[FieldViolation]:
    """
    Validate a RateRequest-shaped value.

    Returns:
        Every violation found; an empty list means the request is acceptable
    """
    try:
        RateRequestSchema.model_validate(request, from_attributes=True)
    except ValidationError as e:
        return [
            FieldViolation(
                path=".".join(str(part) for part in error["loc"]),
                message=error["msg"],
            )
            for error in e.errors()
        ]
    return []


# ==================== Response Schemas ====================


class ChargeLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    description: str
    amount: Decimal
    currency: str


class RateQuoteResponse(BaseModel):
    """Normalized rate quote."""
    model_config = ConfigDict(from_attributes=True)

    carrier: str
    service_code: str
    service_name: str
    total_cost: Decimal
    currency: str
    transit_days: Optional[int] = None
    guaranteed_delivery: bool = False
    charges: List[ChargeLineResponse] = []

    @classmethod
    def from_quote(cls, quote: RateQuote) -> "RateQuoteResponse":
        return cls.model_validate(quote, from_attributes=True)


class CarrierRatesResponse(BaseModel):
    """Outcome for one carrier in a fan-out query."""
    carrier: str
    quotes: List[RateQuoteResponse] = []
    error: Optional[str] = None
    error_kind: Optional[str] = None


class MultiCarrierRatesResponse(BaseModel):
    results: List[CarrierRatesResponse]


class CarrierRatesListResponse(BaseModel):
    """Quotes from a single carrier."""
    carrier: str
    quotes: List[RateQuoteResponse]


class CarrierInfo(BaseModel):
    code: str
    name: str

