"""API schemas for access verification and plan listing."""
from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel

from ..entitlements import AccessDecision, PlanCatalog


class VerifyAccessResponse(BaseModel):
    access: bool
    plan_id: Optional[str] = None
    expires_at: Optional[int] = Field(default=None, alias="expiresAt")
    disabled: bool = False

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_decision(cls, decision: AccessDecision) -> "VerifyAccessResponse":
        return cls(
            access=decision.access,
            plan_id=decision.plan_id,
            expires_at=decision.expires_at,
            disabled=decision.disabled,
        )


class PlanSummary(BaseModel):
    price: int
    duration: int


class PlanListResponse(RootModel[Dict[str, PlanSummary]]):
    @classmethod
    def from_catalog(cls, catalog: PlanCatalog) -> "PlanListResponse":
        return cls({plan_id: PlanSummary(**listing) for plan_id, listing in catalog.to_listing().items()})
