"""
Pytest configuration and fixtures for carrier rate tests.

UPS is faked with httpx.MockTransport; no test touches the network.
"""
import copy
import json
import os
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["UPS_CLIENT_ID"] = "test-client-id"
os.environ["UPS_CLIENT_SECRET"] = "test-client-secret"
os.environ["UPS_ACCOUNT_NUMBER"] = "A1B2C3"

from carrier_rates.core.http_client import HTTPTransport  # noqa: E402
from carrier_rates.modules.shipping.carriers.base import (  # noqa: E402
    Address,
    DimensionUnit,
    PackageDimensions,
    PackageSpec,
    PackageWeight,
    RateRequest,
    WeightUnit,
)
from carrier_rates.modules.shipping.carriers.ups import UPSCarrier  # noqa: E402
from carrier_rates.services.ups_client import UPSCredentials  # noqa: E402

UPS_TEST_BASE_URL = "https://wwwcie.ups.com"


# ==================== UPS Payloads ====================


TOKEN_RESPONSE = {
    "token_type": "Bearer",
    "issued_at": "1700000000000",
    "client_id": "test-client-id",
    "access_token": "eyJhbGciOiJSUzM4NCIsInR5cCI6IkpXVCJ9.mock-token-payload",
    "expires_in": "14399",
    "status": "approved",
}


def _charge(value: str, currency: str = "USD") -> Dict[str, str]:
    return {"CurrencyCode": currency, "MonetaryValue": value}


def _rated_shipment(
    code: str,
    description: str,
    transport: str,
    total: str,
    days: Optional[str],
    service_options: str = "0.00",
) -> Dict[str, Any]:
    shipment = {
        "Service": {"Code": code, "Description": description},
        "RatedShipmentAlert": [{"Code": "110971", "Description": "Your invoice may vary"}],
        "BillingWeight": {"UnitOfMeasurement": {"Code": "LBS", "Description": "Pounds"}, "Weight": "5.0"},
        "TransportationCharges": _charge(transport),
        "ServiceOptionsCharges": _charge(service_options),
        "TotalCharges": _charge(total),
    }
    if days is not None:
        shipment["GuaranteedDelivery"] = {"BusinessDaysInTransit": days}
    return shipment


SINGLE_RATE_RESPONSE = {
    "RateResponse": {
        "Response": {
            "ResponseStatus": {"Code": "1", "Description": "Success"},
            "TransactionReference": {"CustomerContext": "Carrier Rates Request"},
        },
        "RatedShipment": _rated_shipment("03", "Ground", "12.35", "12.35", "5"),
    }
}

SHOP_RATE_RESPONSE = {
    "RateResponse": {
        "Response": {"ResponseStatus": {"Code": "1", "Description": "Success"}},
        "RatedShipment": [
            _rated_shipment("03", "Ground", "12.35", "12.35", "5"),
            _rated_shipment("02", "2nd Day Air", "24.50", "24.50", "2"),
            _rated_shipment("01", "Next Day Air", "45.80", "48.30", "1", service_options="2.50"),
        ],
    }
}

NEGOTIATED_RATE_RESPONSE = {
    "RateResponse": {
        "Response": {"ResponseStatus": {"Code": "1", "Description": "Success"}},
        "RatedShipment": dict(
            _rated_shipment("03", "Ground", "12.35", "12.35", "5"),
            NegotiatedRateCharges={"TotalCharge": _charge("9.99")},
        ),
    }
}

INVALID_ADDRESS_ERROR = {
    "response": {
        "errors": [
            {"code": "111210", "message": "The requested service is unavailable between the selected locations."}
        ]
    }
}

WEIGHT_LIMIT_ERROR = {
    "response": {
        "errors": [
            {"code": "111035", "message": "The shipment weight exceeds the maximum limit"},
            {"code": "111036", "message": "Additional validation error"},
        ]
    }
}


@pytest.fixture
def single_rate_response() -> Dict[str, Any]:
    return copy.deepcopy(SINGLE_RATE_RESPONSE)


@pytest.fixture
def shop_rate_response() -> Dict[str, Any]:
    return copy.deepcopy(SHOP_RATE_RESPONSE)


@pytest.fixture
def negotiated_rate_response() -> Dict[str, Any]:
    return copy.deepcopy(NEGOTIATED_RATE_RESPONSE)


@pytest.fixture
def invalid_address_error() -> Dict[str, Any]:
    return copy.deepcopy(INVALID_ADDRESS_ERROR)


@pytest.fixture
def weight_limit_error() -> Dict[str, Any]:
    return copy.deepcopy(WEIGHT_LIMIT_ERROR)


# ==================== Domain Fixtures ====================


@pytest.fixture
def origin_address() -> Address:
    return Address(
        name="Cybership Warehouse",
        street_lines=("123 Sender St",),
        city="Atlanta",
        state_code="GA",
        postal_code="30301",
        country_code="US",
    )


@pytest.fixture
def destination_address() -> Address:
    return Address(
        name="John Doe",
        street_lines=("456 Receiver Ave", "Suite 100"),
        city="New York",
        state_code="NY",
        postal_code="10001",
        country_code="US",
    )


@pytest.fixture
def sample_package() -> PackageSpec:
    return PackageSpec(
        dimensions=PackageDimensions(length=12, width=8, height=6, unit=DimensionUnit.IN),
        weight=PackageWeight(value=5, unit=WeightUnit.LBS),
    )


@pytest.fixture
def sample_rate_request(origin_address, destination_address, sample_package) -> RateRequest:
    """Rate shop request (no service code)."""
    return RateRequest(
        origin=origin_address,
        destination=destination_address,
        packages=(sample_package,),
    )


@pytest.fixture
def ground_rate_request(sample_rate_request) -> RateRequest:
    """Single-service request for UPS Ground."""
    return RateRequest(
        origin=sample_rate_request.origin,
        destination=sample_rate_request.destination,
        packages=sample_rate_request.packages,
        service_code="03",
    )


@pytest.fixture
def sample_rate_request_data() -> Dict[str, Any]:
    """JSON body equivalent of sample_rate_request."""
    return {
        "origin": {
            "name": "Cybership Warehouse",
            "street_lines": ["123 Sender St"],
            "city": "Atlanta",
            "state_code": "GA",
            "postal_code": "30301",
            "country_code": "US",
        },
        "destination": {
            "name": "John Doe",
            "street_lines": ["456 Receiver Ave", "Suite 100"],
            "city": "New York",
            "state_code": "NY",
            "postal_code": "10001",
            "country_code": "US",
        },
        "packages": [
            {
                "dimensions": {"length": 12, "width": 8, "height": 6, "unit": "IN"},
                "weight": {"value": 5, "unit": "LBS"},
            }
        ],
    }


# ==================== Fake UPS ====================


CannedResponse = Union[Tuple[int, Any], Callable[[httpx.Request], httpx.Response], Exception]


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUPS:
    """
    In-memory UPS endpoint for httpx.MockTransport.

    Token and rating responses are queues of (status, json) tuples, raw
    handlers or exceptions to raise; the last entry repeats once the queue
    is down to one.
    """

    def __init__(self):
        self.token_responses: List[CannedResponse] = [(200, TOKEN_RESPONSE)]
        self.rate_responses: List[CannedResponse] = [(200, SINGLE_RATE_RESPONSE)]
        self.token_requests: List[httpx.Request] = []
        self.rate_requests: List[httpx.Request] = []

    @property
    def token_calls(self) -> int:
        return len(self.token_requests)

    @property
    def rate_calls(self) -> int:
        return len(self.rate_requests)

    @property
    def total_calls(self) -> int:
        return self.token_calls + self.rate_calls

    def rate_body(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.rate_requests[index].content)

    @staticmethod
    def _next(queue: List[CannedResponse]) -> CannedResponse:
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def _respond(self, outcome: CannedResponse, request: httpx.Request) -> httpx.Response:
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(request)
        status, body = outcome
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/security/v1/oauth/token":
            self.token_requests.append(request)
            return self._respond(self._next(self.token_responses), request)
        if request.url.path.startswith("/api/rating/"):
            self.rate_requests.append(request)
            return self._respond(self._next(self.rate_responses), request)
        return httpx.Response(404, json={"response": {"errors": [{"message": "Not found"}]}})


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_ups() -> FakeUPS:
    return FakeUPS()


@pytest.fixture
def ups_credentials() -> UPSCredentials:
    return UPSCredentials(
        client_id="test-client-id",
        client_secret="test-client-secret",
        account_number="A1B2C3",
        base_url_override=UPS_TEST_BASE_URL,
    )


@pytest.fixture
def make_transport():
    """Build an HTTPTransport served by a handler."""
    def _make(handler: Callable[[httpx.Request], httpx.Response], timeout: float = 5.0) -> HTTPTransport:
        return HTTPTransport(timeout=timeout, transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def make_ups_carrier(ups_credentials, fake_ups, fake_clock, make_transport):
    """Build a UPSCarrier wired to fake_ups and fake_clock."""
    def _make(ups: Optional[FakeUPS] = None, **kwargs) -> UPSCarrier:
        ups = ups or fake_ups
        kwargs.setdefault("clock", fake_clock)
        return UPSCarrier(ups_credentials, transport=make_transport(ups.handler), **kwargs)
    return _make


@pytest.fixture
def ups_carrier(make_ups_carrier):
    return make_ups_carrier()
