from __future__ import annotations

import pytest

from paygate.app.config import PaygateConfig
from paygate.app.entitlements import InMemoryEntitlementStore, PlanCatalog, build_default_catalog

WEBHOOK_SECRET = "sk_test_webhook_secret"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, milliseconds: int) -> None:
        self.now += milliseconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog() -> PlanCatalog:
    return build_default_catalog()


@pytest.fixture
def store() -> InMemoryEntitlementStore:
    return InMemoryEntitlementStore()


@pytest.fixture
def config() -> PaygateConfig:
    return PaygateConfig(
        paystack_secret_key=WEBHOOK_SECRET,
        webhook_secret=WEBHOOK_SECRET,
        payment_provider="sandbox",
        store_backend="memory",
    )
