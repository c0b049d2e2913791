"""
UPS Wire Mapper

The only code that knows the UPS Rating JSON shape. Pure translation, no I/O.
Missing or malformed response fields raise plain KeyError/TypeError/
InvalidOperation; the carrier adapter reclassifies them.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from carrier_rates.models.carrier import (
    CarrierCode,
    UPS_PACKAGING_CUSTOMER_SUPPLIED,
    UPS_SERVICE_CODES,
    UPS_SURCHARGE_CODES,
    UPS_UNIT_DESCRIPTIONS,
)
from carrier_rates.modules.shipping.carriers.base import (
    Address,
    ChargeLine,
    PackageSpec,
    RateQuote,
    RateRequest,
    unit_code,
)

DEFAULT_CUSTOMER_CONTEXT = "Carrier Rates Request"


def _wire_number(value: Any) -> str:
    """Number as UPS expects it: plain decimal string, no exponent, no trailing zeros."""
    return format(Decimal(str(value)).normalize(), "f")


def _money(charge: Dict[str, Any]) -> Decimal:
    return Decimal(str(charge["MonetaryValue"]))


class UPSMapper:
    """
    Translates between the domain model and UPS Rating API payloads.

    Args:
        account_number: UPS shipper account number
        negotiated_rates: Ask UPS for account-specific negotiated pricing
        customer_context: TransactionReference label echoed back by UPS
    """

    def __init__(
        self,
        account_number: str,
        negotiated_rates: bool = False,
        customer_context: str = DEFAULT_CUSTOMER_CONTEXT,
    ):
        self.account_number = account_number
        self.negotiated_rates = negotiated_rates
        self.customer_context = customer_context

    # ==================== Request ====================

    @staticmethod
    def _party(address: Address) -> Dict[str, Any]:
        return {
            "Name": address.name,
            "Address": {
                "AddressLine": list(address.street_lines),
                "City": address.city,
                "StateProvinceCode": address.state_code,
                "PostalCode": address.postal_code,
                "CountryCode": address.country_code,
            },
        }

    @staticmethod
    def _package(package: PackageSpec) -> Dict[str, Any]:
        dimension_unit = unit_code(package.dimensions.unit)
        weight_unit = unit_code(package.weight.unit)
        return {
            "PackagingType": {
                "Code": package.packaging_type or UPS_PACKAGING_CUSTOMER_SUPPLIED,
                "Description": "Package",
            },
            "Dimensions": {
                "UnitOfMeasurement": {
                    "Code": dimension_unit,
                    "Description": UPS_UNIT_DESCRIPTIONS.get(dimension_unit, dimension_unit),
                },
                "Length": _wire_number(package.dimensions.length),
                "Width": _wire_number(package.dimensions.width),
                "Height": _wire_number(package.dimensions.height),
            },
            "PackageWeight": {
                "UnitOfMeasurement": {
                    "Code": weight_unit,
                    "Description": UPS_UNIT_DESCRIPTIONS.get(weight_unit, weight_unit),
                },
                "Weight": _wire_number(package.weight.value),
            },
        }

    def to_wire_request(self, request: RateRequest) -> Dict[str, Any]:
        """Build the UPS RateRequest body. Units and values are passed through unconverted."""
        shipper = self._party(request.origin)
        shipper["ShipperNumber"] = self.account_number

        shipment: Dict[str, Any] = {
            "Shipper": shipper,
            "ShipTo": self._party(request.destination),
            "ShipFrom": self._party(request.origin),
            "Package": [self._package(p) for p in request.packages],
        }

        # No Service block means UPS rate shops every available service
        if request.service_code:
            shipment["Service"] = {
                "Code": request.service_code,
                "Description": UPS_SERVICE_CODES.get(request.service_code, "Unknown"),
            }

        if self.negotiated_rates:
            shipment["ShipmentRatingOptions"] = {"NegotiatedRatesIndicator": ""}

        return {
            "RateRequest": {
                "Request": {
                    "TransactionReference": {"CustomerContext": self.customer_context},
                },
                "Shipment": shipment,
            }
        }

    # ==================== Response ====================

    def from_wire_response(self, body: Dict[str, Any]) -> List[RateQuote]:
        """Parse a UPS RateResponse into quotes, keeping UPS's order."""
        rated = body["RateResponse"]["RatedShipment"]

        # Single object for Rate, list for Shop
        if isinstance(rated, dict):
            rated = [rated]
        if not isinstance(rated, list):
            raise TypeError(f"RatedShipment must be an object or list, got {type(rated).__name__}")

        return [self._quote(shipment) for shipment in rated]

    @staticmethod
    def _service_name(service: Dict[str, Any]) -> str:
        code = str(service["Code"])
        return (
            UPS_SERVICE_CODES.get(code)
            or service.get("Description")
            or f"UPS Service {code}"
        )

    @staticmethod
    def _transit_days(shipment: Dict[str, Any]) -> Optional[int]:
        guaranteed = shipment.get("GuaranteedDelivery")
        if guaranteed and guaranteed.get("BusinessDaysInTransit"):
            return int(guaranteed["BusinessDaysInTransit"])

        arrival = (
            shipment.get("TimeInTransit", {})
            .get("ServiceSummary", {})
            .get("EstimatedArrival", {})
        )
        if arrival.get("BusinessDaysInTransit"):
            return int(arrival["BusinessDaysInTransit"])
        return None

    def _charges(self, shipment: Dict[str, Any], currency: str) -> Tuple[ChargeLine, ...]:
        charges = []
        for description, key in (
            ("Transportation", "TransportationCharges"),
            ("Service Options", "ServiceOptionsCharges"),
        ):
            charge = shipment.get(key)
            if charge:
                charges.append(ChargeLine(
                    description=description,
                    amount=_money(charge),
                    currency=charge.get("CurrencyCode", currency),
                ))
            else:
                charges.append(ChargeLine(description=description, amount=Decimal("0"), currency=currency))

        itemized = shipment.get("ItemizedCharges") or []
        if isinstance(itemized, dict):
            itemized = [itemized]
        for item in itemized:
            code = str(item.get("Code", ""))
            charges.append(ChargeLine(
                description=UPS_SURCHARGE_CODES.get(code, f"Surcharge {code}"),
                amount=_money(item),
                currency=item.get("CurrencyCode", currency),
            ))

        return tuple(charges)

    def _quote(self, shipment: Dict[str, Any]) -> RateQuote:
        service = shipment["Service"]
        service_code = str(service["Code"])

        # Negotiated rates reflect actual account pricing
        negotiated = shipment.get("NegotiatedRateCharges") or {}
        total = negotiated.get("TotalCharge") or shipment["TotalCharges"]
        currency = total["CurrencyCode"]

        return RateQuote(
            carrier=CarrierCode.UPS.value,
            service_code=service_code,
            service_name=self._service_name(service),
            total_cost=_money(total),
            currency=currency,
            transit_days=self._transit_days(shipment),
            guaranteed_delivery="GuaranteedDelivery" in shipment,
            charges=self._charges(shipment, currency),
        )
