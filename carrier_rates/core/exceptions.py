"""
Carrier Error Taxonomy

Every failure that leaves a component is a CarrierError carrying one kind from
a closed set, so callers branch on `kind` instead of parsing messages.

Propagation:
    Transport      -> TIMEOUT, NETWORK_ERROR, MALFORMED_RESPONSE
    Token cache    -> AUTH_FAILED (wraps anything unclassified)
    Carrier adapter-> VALIDATION_ERROR, AUTH_FAILED, RATE_LIMIT,
                      CARRIER_API_ERROR, MALFORMED_RESPONSE, UNKNOWN
    Registry       -> CARRIER_NOT_FOUND
"""
import enum
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class CarrierErrorKind(str, enum.Enum):
    """Closed set of machine-readable failure kinds."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_FAILED = "AUTH_FAILED"
    RATE_LIMIT = "RATE_LIMIT"
    CARRIER_API_ERROR = "CARRIER_API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    CARRIER_NOT_FOUND = "CARRIER_NOT_FOUND"
    UNKNOWN = "UNKNOWN"


# Kinds a caller may reasonably retry later. Nothing in this package retries.
RETRYABLE_KINDS = frozenset({
    CarrierErrorKind.RATE_LIMIT,
    CarrierErrorKind.NETWORK_ERROR,
    CarrierErrorKind.TIMEOUT,
})


class CarrierError(Exception):
    """
    The single error type crossing component boundaries.

    Attributes:
        kind: CarrierErrorKind for programmatic handling
        message: Human-readable description
        carrier: Carrier code that produced the error, if any
        status_code: HTTP status from the carrier, if any
        details: Structured context (carrier error list, raw body, violations)
        cause: Underlying exception, also chained as __cause__ when raised with `from`
    """

    def __init__(
        self,
        kind: CarrierErrorKind,
        message: str,
        carrier: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.kind = CarrierErrorKind(kind)
        self.message = message
        self.carrier = carrier
        self.status_code = status_code
        self.details = details or {}
        self.cause = cause
        super().__init__(message)

    @property
    def code(self) -> str:
        """String value of the kind."""
        return self.kind.value

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def to_dict(self, include_details: bool = True) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        data: Dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
            "carrier": self.carrier,
            "status_code": self.status_code,
        }
        if include_details:
            data["details"] = self.details
        return data

    def __str__(self) -> str:
        prefix = f"[{self.carrier}] " if self.carrier else ""
        return f"{prefix}{self.kind.value}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(kind={self.kind.value!r}, message={self.message!r}, "
            f"carrier={self.carrier!r}, status_code={self.status_code!r})"
        )
