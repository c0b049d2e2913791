import pytest

from carrier_rates.core.exceptions import RETRYABLE_KINDS, CarrierError, CarrierErrorKind


def test_kinds_are_closed_set():
    assert {k.value for k in CarrierErrorKind} == {
        "VALIDATION_ERROR",
        "AUTH_FAILED",
        "RATE_LIMIT",
        "CARRIER_API_ERROR",
        "NETWORK_ERROR",
        "TIMEOUT",
        "MALFORMED_RESPONSE",
        "CARRIER_NOT_FOUND",
        "UNKNOWN",
    }


def test_kind_accepts_string_value():
    err = CarrierError("TIMEOUT", "too slow")

    assert err.kind is CarrierErrorKind.TIMEOUT
    assert err.code == "TIMEOUT"


def test_unknown_kind_string_rejected():
    with pytest.raises(ValueError):
        CarrierError("EXPLODED", "nope")


def test_fields_and_str():
    cause = ValueError("bad")
    err = CarrierError(
        CarrierErrorKind.CARRIER_API_ERROR,
        "The shipment weight exceeds the maximum limit",
        carrier="UPS",
        status_code=422,
        details={"errors": [{"code": "111035"}]},
        cause=cause,
    )

    assert err.message == "The shipment weight exceeds the maximum limit"
    assert err.cause is cause
    assert str(err) == "[UPS] CARRIER_API_ERROR: The shipment weight exceeds the maximum limit"
    assert "status_code=422" in repr(err)
    assert isinstance(err, Exception)


def test_str_without_carrier():
    assert str(CarrierError(CarrierErrorKind.CARRIER_NOT_FOUND, "missing")) == "CARRIER_NOT_FOUND: missing"


def test_details_default_to_empty_dict():
    assert CarrierError(CarrierErrorKind.UNKNOWN, "x").details == {}


def test_to_dict():
    err = CarrierError(CarrierErrorKind.RATE_LIMIT, "slow down", carrier="UPS", status_code=429, details={"a": 1})

    assert err.to_dict() == {
        "kind": "RATE_LIMIT",
        "message": "slow down",
        "carrier": "UPS",
        "status_code": 429,
        "details": {"a": 1},
    }
    assert "details" not in err.to_dict(include_details=False)


@pytest.mark.parametrize("kind", list(CarrierErrorKind))
def test_retryable(kind):
    assert CarrierError(kind, "x").retryable == (kind in RETRYABLE_KINDS)


def test_retryable_kinds():
    assert RETRYABLE_KINDS == {
        CarrierErrorKind.RATE_LIMIT,
        CarrierErrorKind.NETWORK_ERROR,
        CarrierErrorKind.TIMEOUT,
    }
