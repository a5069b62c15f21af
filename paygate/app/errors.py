"""Domain errors raised by the checkout, webhook and verification flows."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, status


class PaygateError(Exception):
    """Represents an actionable failure surfaced to API callers."""

    code = "paygate_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Request could not be completed"

    def __init__(self, message: Optional[str] = None, *, detail: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.default_message
        self.detail = dict(detail) if detail else {}
        super().__init__(self.message)

    @property
    def payload(self) -> Mapping[str, Any]:
        """Serialized representation suitable for JSON responses."""

        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        body.update(self.detail)
        return body

    def to_http_exception(self) -> HTTPException:
        """Convert the domain error into a FastAPI HTTPException."""

        return HTTPException(status_code=self.status_code, detail=dict(self.payload))


class InvalidPlan(PaygateError):
    code = "invalid_plan"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid plan selected"


class SignatureInvalid(PaygateError):
    code = "signature_invalid"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid webhook signature"


class MalformedPayload(PaygateError):
    code = "malformed_payload"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid webhook payload"


class IncompleteMetadata(PaygateError):
    code = "incomplete_metadata"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing or incomplete metadata"


class MissingIdentity(PaygateError):
    code = "missing_identity"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing email or device_id"


class PaymentInitiationFailed(PaygateError):
    code = "payment_initiation_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to initiate payment"


class StoreUnavailable(PaygateError):
    code = "store_unavailable"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to verify access"


class StoreWriteFailed(PaygateError):
    """Raised by stores on write failure; the webhook path logs it instead of surfacing it."""

    code = "store_write_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to persist entitlement"


__all__ = [
    "IncompleteMetadata",
    "InvalidPlan",
    "MalformedPayload",
    "MissingIdentity",
    "PaygateError",
    "PaymentInitiationFailed",
    "SignatureInvalid",
    "StoreUnavailable",
    "StoreWriteFailed",
]
