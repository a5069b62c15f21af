"""API routes for access verification and the plan catalog."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...app_context import get_entitlement_verifier, get_plan_catalog
from ..entitlements import EntitlementVerifier, PlanCatalog
from ..errors import PaygateError
from ..schemas.entitlements import PlanListResponse, VerifyAccessResponse

router = APIRouter(tags=["entitlements"])


@router.get("/verify-access", response_model=VerifyAccessResponse)
def verify_access(
    email: Optional[str] = Query(None),
    device_id: Optional[str] = Query(None),
    *,
    verifier: EntitlementVerifier = Depends(get_entitlement_verifier),
) -> VerifyAccessResponse:
    try:
        decision = verifier.verify(email, device_id)
    except PaygateError as exc:
        raise exc.to_http_exception() from exc
    return VerifyAccessResponse.from_decision(decision)


@router.get("/plans", response_model=PlanListResponse)
def list_plans(catalog: PlanCatalog = Depends(get_plan_catalog)) -> PlanListResponse:
    return PlanListResponse.from_catalog(catalog)
