"""
Shipping API Routes

Provides endpoints for:
- Listing registered carriers
- Rate quoting across every carrier (partial failures reported per carrier)
- Rate quoting from one carrier (errors mapped by core.error_handler)
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from carrier_rates.api.deps import get_shipping_service
from carrier_rates.schemas.shipping import (
    CarrierInfo,
    CarrierRatesListResponse,
    CarrierRatesResponse,
    MultiCarrierRatesResponse,
    RateQuoteResponse,
    RateRequestSchema,
)
from carrier_rates.services.shipping_service import ShippingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shipping", tags=["shipping"])


# ==================== Carriers ====================


@router.get("/carriers", response_model=List[CarrierInfo])
async def list_carriers(service: ShippingService = Depends(get_shipping_service)):
    """List registered carriers in registration order."""
    return [CarrierInfo(code=c.code, name=c.name) for c in service.registry.list()]


# ==================== Rate Quoting ====================


@router.post("/rates", response_model=MultiCarrierRatesResponse)
async def get_rates_from_all(
    rate_request: RateRequestSchema,
    service: ShippingService = Depends(get_shipping_service),
):
    """
    Get rates from every registered carrier.

    Always 200: a failing carrier appears with an empty quote list and an error.
    """
    results = await service.get_rates_from_all(rate_request.to_domain())
    return MultiCarrierRatesResponse(results=[
        CarrierRatesResponse(
            carrier=r.carrier,
            quotes=[RateQuoteResponse.from_quote(q) for q in r.quotes],
            error=r.error,
            error_kind=r.error_kind,
        )
        for r in results
    ])


@router.post("/rates/{carrier_code}", response_model=CarrierRatesListResponse)
async def get_carrier_rates(
    carrier_code: str,
    rate_request: RateRequestSchema,
    service: ShippingService = Depends(get_shipping_service),
):
    """Get rates from one carrier. Carrier codes are case-insensitive."""
    code = carrier_code.upper()
    quotes = await service.get_rates(code, rate_request.to_domain())
    logger.info(f"Rate quote from {code}: {len(quotes)} option(s)")
    return CarrierRatesListResponse(
        carrier=code,
        quotes=[RateQuoteResponse.from_quote(q) for q in quotes],
    )
