"""Billing domain package: checkouts and payment confirmation webhooks."""

from .models import (
    CheckoutSession,
    PaymentEvent,
    PaymentEventType,
    ProviderSession,
    WebhookOutcome,
)
from .provider import LocalSandboxPaymentProvider, PaymentProvider, PaystackProvider
from .service import CheckoutService, GrantFailureReporter, WebhookProcessor
from .webhooks import WebhookSignatureVerifier, extract_metadata, parse_event

__all__ = [
    "CheckoutService",
    "CheckoutSession",
    "GrantFailureReporter",
    "LocalSandboxPaymentProvider",
    "PaymentEvent",
    "PaymentEventType",
    "PaymentProvider",
    "PaystackProvider",
    "ProviderSession",
    "WebhookOutcome",
    "WebhookProcessor",
    "WebhookSignatureVerifier",
    "extract_metadata",
    "parse_event",
]
