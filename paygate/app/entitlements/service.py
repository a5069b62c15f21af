"""Services that grant and verify entitlement windows."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..errors import MissingIdentity
from .catalog import PlanCatalog
from .models import AccessDecision, EntitlementKey, EntitlementRecord
from .repository import EntitlementStore

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def epoch_millis() -> int:
    return int(time.time() * 1000)


def resolve_identity(email: Optional[str], device_id: Optional[str]) -> EntitlementKey:
    """Build an identity key, raising ``MissingIdentity`` if either part is blank."""

    if not email or not device_id:
        raise MissingIdentity()
    return EntitlementKey(email=email, device_id=device_id)


class EntitlementGranter:
    """Writes a fresh entitlement window for an identity."""

    def __init__(
        self,
        catalog: PlanCatalog,
        store: EntitlementStore,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._clock = clock or epoch_millis

    def grant(self, key: EntitlementKey, plan_id: str) -> EntitlementRecord:
        """Overwrite the record at ``key`` with a window starting now.

        Any earlier window, including an unexpired one or a disabled status, is
        replaced rather than extended. Raises ``InvalidPlan`` before touching
        the store and lets ``StoreWriteFailed`` propagate to the caller.
        """

        plan = self._catalog.require(plan_id)
        now = self._clock()
        record = EntitlementRecord(
            email=key.email,
            device_id=key.device_id,
            plan_id=plan.plan_id.value,
            updated_at=now,
            expires_at=now + plan.duration_ms,
        )
        self._store.put(record)
        return record


class EntitlementVerifier:
    """Answers whether an identity currently holds a valid entitlement."""

    def __init__(self, store: EntitlementStore, *, clock: Optional[Clock] = None) -> None:
        self._store = store
        self._clock = clock or epoch_millis

    def verify(self, email: Optional[str], device_id: Optional[str]) -> AccessDecision:
        key = resolve_identity(email, device_id)
        record = self._store.get(key)
        if record is None:
            return AccessDecision.never_granted()
        decision = AccessDecision.from_record(record, self._clock())
        logger.debug(
            "Access check plan=%s access=%s disabled=%s",
            decision.plan_id,
            decision.access,
            decision.disabled,
        )
        return decision


__all__ = [
    "Clock",
    "EntitlementGranter",
    "EntitlementVerifier",
    "epoch_millis",
    "resolve_identity",
]
