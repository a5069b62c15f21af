"""Entitlements domain models and services."""

from .catalog import DEFAULT_PLANS, PlanCatalog, build_default_catalog
from .models import (
    AccessDecision,
    EntitlementKey,
    EntitlementRecord,
    EntitlementStatus,
    Plan,
    PlanId,
)
from .repository import EntitlementStore, InMemoryEntitlementStore, PostgresEntitlementStore
from .service import (
    Clock,
    EntitlementGranter,
    EntitlementVerifier,
    epoch_millis,
    resolve_identity,
)

__all__ = [
    "DEFAULT_PLANS",
    "PlanCatalog",
    "build_default_catalog",
    "AccessDecision",
    "EntitlementKey",
    "EntitlementRecord",
    "EntitlementStatus",
    "Plan",
    "PlanId",
    "EntitlementStore",
    "InMemoryEntitlementStore",
    "PostgresEntitlementStore",
    "Clock",
    "EntitlementGranter",
    "EntitlementVerifier",
    "epoch_millis",
    "resolve_identity",
]
