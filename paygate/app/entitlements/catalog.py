"""Static catalog of purchasable plans."""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional

from ..errors import InvalidPlan
from .models import DAY_MS, HOUR_MS, Plan, PlanId

DEFAULT_PLANS = (
    Plan(plan_id=PlanId.SIX_HOURS, price=2000, duration_ms=6 * HOUR_MS),
    Plan(plan_id=PlanId.ONE_DAY, price=3500, duration_ms=24 * HOUR_MS),
    Plan(plan_id=PlanId.ONE_WEEK, price=5000, duration_ms=7 * DAY_MS),
    Plan(plan_id=PlanId.TWO_WEEKS, price=10000, duration_ms=14 * DAY_MS),
    Plan(plan_id=PlanId.THREE_WEEKS, price=12000, duration_ms=21 * DAY_MS),
    Plan(plan_id=PlanId.ONE_MONTH, price=15000, duration_ms=30 * DAY_MS),
    Plan(plan_id=PlanId.TWO_MONTHS, price=25000, duration_ms=60 * DAY_MS),
    Plan(plan_id=PlanId.SIX_MONTHS, price=65000, duration_ms=180 * DAY_MS),
    Plan(plan_id=PlanId.ONE_YEAR, price=120000, duration_ms=365 * DAY_MS),
)


class PlanCatalog:
    """Immutable lookup table shared by checkout and webhook processing.

    Price and duration are only ever read from here, so a checkout and the
    grant that follows it always agree on the plan.
    """

    def __init__(self, plans: Iterable[Plan]) -> None:
        entries: Dict[PlanId, Plan] = {}
        for plan in plans:
            if plan.plan_id in entries:
                raise ValueError(f"Duplicate plan id: {plan.plan_id.value}")
            entries[plan.plan_id] = plan
        self._plans: Mapping[PlanId, Plan] = MappingProxyType(entries)

    def get(self, plan_id: Optional[str]) -> Optional[Plan]:
        """Return the plan for ``plan_id`` or ``None`` when it is not offered."""

        if not isinstance(plan_id, str):
            return None
        try:
            return self._plans.get(PlanId(plan_id))
        except ValueError:
            return None

    def require(self, plan_id: Optional[str]) -> Plan:
        """Return a plan definition, raising ``InvalidPlan`` if unsupported."""

        plan = self.get(plan_id)
        if plan is None:
            raise InvalidPlan(detail={"plan_id": plan_id})
        return plan

    def to_listing(self) -> Dict[str, Dict[str, int]]:
        return {plan.plan_id.value: plan.to_listing() for plan in self}

    def __contains__(self, plan_id: object) -> bool:
        return isinstance(plan_id, str) and self.get(plan_id) is not None

    def __iter__(self) -> Iterator[Plan]:
        return iter(self._plans.values())

    def __len__(self) -> int:
        return len(self._plans)


def build_default_catalog() -> PlanCatalog:
    return PlanCatalog(DEFAULT_PLANS)
