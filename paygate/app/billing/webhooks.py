"""Authentication and parsing of payment processor webhooks."""
from __future__ import annotations

import hashlib
import hmac
import json
from typing import Optional, Tuple

from pydantic import ValidationError

from ..entitlements.models import EntitlementKey
from ..errors import IncompleteMetadata, MalformedPayload, SignatureInvalid
from .models import PaymentEvent

METADATA_FIELDS = ("email", "device_id", "plan_id")


class WebhookSignatureVerifier:
    """HMAC-SHA512 verification over the exact bytes the processor sent."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("secret must be provided")
        self._secret = secret.encode("utf-8")

    def sign(self, body: bytes) -> str:
        return hmac.new(self._secret, body, hashlib.sha512).hexdigest()

    def verify(self, body: bytes, signature: Optional[str]) -> None:
        if not signature:
            raise SignatureInvalid()
        expected = self.sign(body).encode("ascii")
        if not hmac.compare_digest(expected, signature.encode("utf-8")):
            raise SignatureInvalid()


def parse_event(body: bytes) -> PaymentEvent:
    """Parse an authenticated body. Anything but a JSON object is malformed."""

    try:
        decoded = json.loads(body)
    except (ValueError, RecursionError) as exc:
        raise MalformedPayload() from exc
    if not isinstance(decoded, dict):
        raise MalformedPayload()

    event = decoded.get("event")
    data = decoded.get("data")
    try:
        return PaymentEvent(
            event=event if isinstance(event, str) else None,
            data=data if isinstance(data, dict) else {},
        )
    except ValidationError as exc:  # pragma: no cover - inputs are pre-checked
        raise MalformedPayload() from exc


def extract_metadata(event: PaymentEvent) -> Tuple[EntitlementKey, str]:
    """Return the identity and plan echoed back in the event metadata."""

    metadata = event.metadata
    missing = [
        field
        for field in METADATA_FIELDS
        if not isinstance(metadata.get(field), str) or not metadata[field]
    ]
    if missing:
        raise IncompleteMetadata(detail={"missing": missing})
    key = EntitlementKey(email=metadata["email"], device_id=metadata["device_id"])
    return key, metadata["plan_id"]


__all__ = [
    "METADATA_FIELDS",
    "WebhookSignatureVerifier",
    "extract_metadata",
    "parse_event",
]
