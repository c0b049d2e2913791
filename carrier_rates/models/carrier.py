"""
Carrier codes and UPS reference tables.

Codes are the registry keys; each adapter reports one of these as its `code`.
"""
import enum


class CarrierCode(str, enum.Enum):
    """
    Supported shipping carriers.

    Each code maps to at most one registered adapter.
    """
    UPS = "UPS"
    # Future carriers
    # FEDEX = "FEDEX"
    # USPS = "USPS"
    # DHL = "DHL"


# UPS service code -> display name
UPS_SERVICE_CODES = {
    "01": "UPS Next Day Air",
    "02": "UPS 2nd Day Air",
    "03": "UPS Ground",
    "07": "UPS Express",
    "08": "UPS Expedited",
    "11": "UPS Standard",
    "12": "UPS 3 Day Select",
    "13": "UPS Next Day Air Saver",
    "14": "UPS Next Day Air Early",
    "54": "UPS Express Plus",
    "59": "UPS 2nd Day Air A.M.",
    "65": "UPS Saver",
}

# UPS itemized surcharge code -> charge line description
UPS_SURCHARGE_CODES = {
    "110": "Delivery Area Surcharge",
    "111": "Delivery Area Surcharge - Extended",
    "270": "Residential Surcharge",
    "375": "Fuel Surcharge",
    "376": "Fuel Surcharge",
}

UPS_PACKAGING_CUSTOMER_SUPPLIED = "02"

UPS_UNIT_DESCRIPTIONS = {
    "IN": "Inches",
    "CM": "Centimeters",
    "LBS": "Pounds",
    "KGS": "Kilograms",
}
