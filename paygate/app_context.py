"""Shared application context exposing services to modular routers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Request

from .app.billing.service import CheckoutService, WebhookProcessor
from .app.entitlements.catalog import PlanCatalog
from .app.entitlements.service import EntitlementVerifier


@dataclass(frozen=True)
class AppServices:
    """Services built once at startup and shared by every request."""

    catalog: PlanCatalog
    checkout: CheckoutService
    webhooks: WebhookProcessor
    verifier: EntitlementVerifier


def _require(value: Any, name: str) -> Any:
    if value is None:
        raise RuntimeError(f"Application context has not been configured yet: {name}")
    return value


def get_services(request: Request) -> AppServices:
    return _require(getattr(request.app.state, "services", None), "services")


def get_plan_catalog(request: Request) -> PlanCatalog:
    return get_services(request).catalog


def get_checkout_service(request: Request) -> CheckoutService:
    return get_services(request).checkout


def get_webhook_processor(request: Request) -> WebhookProcessor:
    return get_services(request).webhooks


def get_entitlement_verifier(request: Request) -> EntitlementVerifier:
    return get_services(request).verifier
