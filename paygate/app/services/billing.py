"""Application wiring for the billing and entitlement services."""
from __future__ import annotations

import logging
from typing import Optional

from ..billing import (
    CheckoutService,
    GrantFailureReporter,
    LocalSandboxPaymentProvider,
    PaymentProvider,
    PaystackProvider,
    WebhookProcessor,
    WebhookSignatureVerifier,
)
from ..config import PaygateConfig
from ..entitlements import (
    Clock,
    EntitlementGranter,
    EntitlementKey,
    EntitlementStore,
    EntitlementVerifier,
    InMemoryEntitlementStore,
    PlanCatalog,
    PostgresEntitlementStore,
)
from ..errors import StoreWriteFailed
from ...app_context import AppServices


logger = logging.getLogger("billing")


class LoggingGrantFailureReporter(GrantFailureReporter):
    """Reporter that records unpersisted grants to the application logger."""

    def report_grant_failure(
        self,
        key: EntitlementKey,
        plan_id: str,
        reference: Optional[str],
        error: StoreWriteFailed,
    ) -> None:
        logger.error(
            "Entitlement not persisted after acknowledged payment; reconcile manually "
            "reference=%s plan=%s device_id=%s error=%s",
            reference,
            plan_id,
            key.device_id,
            error.message,
            extra={"billing_event": "grant.not_persisted", "charge_reference": reference},
        )


def build_payment_provider(config: PaygateConfig) -> PaymentProvider:
    if config.payment_provider == "sandbox":
        return LocalSandboxPaymentProvider()
    return PaystackProvider(
        secret_key=config.paystack_secret_key,
        base_url=config.paystack_base_url,
        timeout=config.provider_timeout_seconds,
        callback_url=config.paystack_callback_url,
    )


def build_entitlement_store(config: PaygateConfig) -> EntitlementStore:
    if config.store_backend == "memory":
        logger.warning("Using in-memory entitlement store; grants will not survive a restart")
        return InMemoryEntitlementStore()
    store = PostgresEntitlementStore.from_settings(
        host=config.db_host,
        port=config.db_port,
        dbname=config.db_name,
        user=config.db_user,
        password=config.db_password,
        connect_timeout=config.db_connect_timeout,
        statement_timeout_ms=config.db_statement_timeout_ms,
    )
    if config.db_create_schema:
        store.ensure_schema()
    return store


def build_services(
    config: PaygateConfig,
    catalog: PlanCatalog,
    *,
    store: Optional[EntitlementStore] = None,
    provider: Optional[PaymentProvider] = None,
    clock: Optional[Clock] = None,
    failure_reporter: Optional[GrantFailureReporter] = None,
) -> AppServices:
    """Assemble every request-facing service around one catalog and store."""

    store = store if store is not None else build_entitlement_store(config)
    provider = provider if provider is not None else build_payment_provider(config)
    granter = EntitlementGranter(catalog, store, clock=clock)
    return AppServices(
        catalog=catalog,
        checkout=CheckoutService(catalog, provider),
        webhooks=WebhookProcessor(
            signature_verifier=WebhookSignatureVerifier(config.webhook_secret),
            granter=granter,
            failure_reporter=failure_reporter or LoggingGrantFailureReporter(),
        ),
        verifier=EntitlementVerifier(store, clock=clock),
    )


__all__ = [
    "LoggingGrantFailureReporter",
    "build_entitlement_store",
    "build_payment_provider",
    "build_services",
]
