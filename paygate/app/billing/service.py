"""Core services coordinating checkouts and payment confirmations."""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..entitlements.catalog import PlanCatalog
from ..entitlements.models import EntitlementKey
from ..entitlements.service import EntitlementGranter, resolve_identity
from ..errors import (
    IncompleteMetadata,
    InvalidPlan,
    MalformedPayload,
    PaymentInitiationFailed,
    SignatureInvalid,
    StoreWriteFailed,
)
from .models import CheckoutSession, WebhookOutcome
from .provider import PaymentProvider
from .webhooks import WebhookSignatureVerifier, extract_metadata, parse_event

logger = logging.getLogger("billing")


class GrantFailureReporter(Protocol):
    """Receives grants that were acknowledged to the processor but not persisted."""

    def report_grant_failure(
        self,
        key: EntitlementKey,
        plan_id: str,
        reference: Optional[str],
        error: StoreWriteFailed,
    ) -> None:
        ...


class CheckoutService:
    """Starts a processor checkout for an identity and plan."""

    def __init__(self, catalog: PlanCatalog, provider: PaymentProvider) -> None:
        self._catalog = catalog
        self._provider = provider

    def initiate(
        self,
        email: Optional[str],
        device_id: Optional[str],
        plan_id: Optional[str],
    ) -> CheckoutSession:
        plan = self._catalog.require(plan_id)
        key = resolve_identity(email, device_id)
        metadata = {
            "email": key.email,
            "device_id": key.device_id,
            "plan_id": plan.plan_id.value,
        }

        logger.info("Initiating payment plan=%s amount=%s", plan.plan_id.value, plan.price)
        try:
            session = self._provider.initialize_transaction(
                email=key.email,
                amount=plan.price,
                metadata=metadata,
            )
        except PaymentInitiationFailed:
            raise
        except Exception as exc:
            logger.exception("Payment provider %s failed to initiate checkout", self._provider.name)
            raise PaymentInitiationFailed() from exc

        return CheckoutSession(
            payment_url=session.authorization_url,
            plan_id=plan.plan_id.value,
            amount=plan.price,
            reference=session.reference,
        )


class WebhookProcessor:
    """Authenticates payment events and turns confirmed charges into grants."""

    def __init__(
        self,
        signature_verifier: WebhookSignatureVerifier,
        granter: EntitlementGranter,
        failure_reporter: GrantFailureReporter,
    ) -> None:
        self._signature_verifier = signature_verifier
        self._granter = granter
        self._failure_reporter = failure_reporter

    def process(self, body: bytes, signature: Optional[str]) -> WebhookOutcome:
        """Handle one delivery.

        Raises ``SignatureInvalid``, ``MalformedPayload``, ``IncompleteMetadata``
        or ``InvalidPlan``; each is raised before any store write. A failed
        store write is reported and returned as ``NOT_PERSISTED`` so the
        delivery is still acknowledged.
        """

        try:
            self._signature_verifier.verify(body, signature)
        except SignatureInvalid:
            logger.warning("Webhook signature mismatch")
            raise

        try:
            event = parse_event(body)
        except MalformedPayload:
            logger.warning("Invalid webhook JSON")
            raise

        if not event.is_charge_success:
            logger.info("Ignoring webhook event type=%s", event.event)
            return WebhookOutcome.IGNORED

        try:
            key, plan_id = extract_metadata(event)
        except IncompleteMetadata as exc:
            logger.warning(
                "Missing or incomplete metadata reference=%s missing=%s",
                event.reference,
                exc.detail.get("missing"),
            )
            raise

        try:
            record = self._granter.grant(key, plan_id)
        except InvalidPlan:
            logger.warning("Invalid plan in webhook reference=%s plan=%s", event.reference, plan_id)
            raise
        except StoreWriteFailed as exc:
            logger.error(
                "Entitlement write failed reference=%s plan=%s",
                event.reference,
                plan_id,
                exc_info=exc,
            )
            self._failure_reporter.report_grant_failure(key, plan_id, event.reference, exc)
            return WebhookOutcome.NOT_PERSISTED

        logger.info(
            "Access granted plan=%s reference=%s expires_at=%s",
            record.plan_id,
            event.reference,
            record.expires_at,
        )
        return WebhookOutcome.GRANTED


__all__ = ["CheckoutService", "GrantFailureReporter", "WebhookProcessor"]
