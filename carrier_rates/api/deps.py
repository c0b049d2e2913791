"""
API dependencies
"""
from fastapi import Request

from carrier_rates.services.shipping_service import ShippingService


def get_shipping_service(request: Request) -> ShippingService:
    """Shipping service built at startup (see main.lifespan)."""
    return request.app.state.shipping_service
