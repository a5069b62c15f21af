from __future__ import annotations

import pytest

from paygate.app.entitlements import DEFAULT_PLANS, Plan, PlanCatalog, PlanId
from paygate.app.errors import InvalidPlan


def test_default_catalog_prices_and_durations(catalog):
    six_hours = catalog.get("6hrs")
    one_day = catalog.get("24hrs")
    one_year = catalog.get("1year")

    assert six_hours is not None and six_hours.duration_ms == 21_600_000
    assert six_hours.price == 2000
    assert one_day is not None and one_day.duration_ms == 86_400_000
    assert one_year is not None and one_year.duration_ms == 365 * 86_400_000
    assert len(catalog) == len(DEFAULT_PLANS) == 9


@pytest.mark.parametrize("plan_id", ["", "7hrs", "6HRS", None, " 6hrs"])
def test_unknown_plan_ids_are_not_found(catalog, plan_id):
    assert catalog.get(plan_id) is None
    assert plan_id not in catalog
    with pytest.raises(InvalidPlan) as exc_info:
        catalog.require(plan_id)
    assert exc_info.value.status_code == 400


def test_listing_uses_wire_names(catalog):
    listing = catalog.to_listing()

    assert listing["1week"] == {"price": 5000, "duration": 7 * 86_400_000}
    assert set(listing) == {plan_id.value for plan_id in PlanId}


def test_catalog_is_read_only(catalog):
    with pytest.raises(TypeError):
        catalog._plans[PlanId.SIX_HOURS] = Plan(plan_id=PlanId.SIX_HOURS, price=1, duration_ms=1)


def test_duplicate_plan_ids_rejected():
    plan = Plan(plan_id=PlanId.SIX_HOURS, price=100, duration_ms=1000)
    with pytest.raises(ValueError):
        PlanCatalog([plan, plan])


@pytest.mark.parametrize("price,duration", [(0, 1000), (100, 0), (-5, 1000)])
def test_plan_requires_positive_price_and_duration(price, duration):
    with pytest.raises(ValueError):
        Plan(plan_id=PlanId.ONE_DAY, price=price, duration_ms=duration)
