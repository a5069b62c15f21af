"""Domain models for plans and time-bounded entitlements."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


class PlanId(str, Enum):
    """Canonical identifiers for purchasable access plans."""

    SIX_HOURS = "6hrs"
    ONE_DAY = "24hrs"
    ONE_WEEK = "1week"
    TWO_WEEKS = "2weeks"
    THREE_WEEKS = "3weeks"
    ONE_MONTH = "1month"
    TWO_MONTHS = "2months"
    SIX_MONTHS = "6months"
    ONE_YEAR = "1year"


class EntitlementStatus(str, Enum):
    """Administrative state of an entitlement record. Unset means active."""

    ACTIVE = "active"
    DISABLED = "disabled"


@dataclass(frozen=True)
class Plan:
    """A plan's price in minor currency units and the access window it buys."""

    plan_id: PlanId
    price: int
    duration_ms: int

    def __post_init__(self) -> None:
        if self.price <= 0:
            raise ValueError(f"price must be positive for plan {self.plan_id.value}")
        if self.duration_ms <= 0:
            raise ValueError(f"duration_ms must be positive for plan {self.plan_id.value}")

    def to_listing(self) -> Dict[str, int]:
        return {"price": self.price, "duration": self.duration_ms}


@dataclass(frozen=True)
class EntitlementKey:
    """Identity addressing exactly one entitlement record.

    Components are compared exactly: no case folding or trimming. Stores
    address records by the ``(email, device_id)`` tuple rather than a joined
    string, so separator characters inside either value cannot collide.
    """

    email: str
    device_id: str

    def as_tuple(self) -> Tuple[str, str]:
        return (self.email, self.device_id)


class EntitlementRecord(BaseModel):
    """Persisted entitlement window for an identity."""

    email: str
    device_id: str
    plan_id: str
    updated_at: int = Field(alias="updatedAt")
    expires_at: int = Field(alias="expiresAt")
    status: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def key(self) -> EntitlementKey:
        return EntitlementKey(email=self.email, device_id=self.device_id)

    @property
    def is_disabled(self) -> bool:
        return self.status == EntitlementStatus.DISABLED.value

    def is_active_at(self, now_ms: int) -> bool:
        """Return ``True`` while unexpired and not administratively disabled."""

        return now_ms < self.expires_at and not self.is_disabled


class AccessDecision(BaseModel):
    """Answer to "is this identity currently entitled?"."""

    access: bool
    plan_id: Optional[str] = None
    expires_at: Optional[int] = Field(default=None, alias="expiresAt")
    disabled: bool = False

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def never_granted(cls) -> "AccessDecision":
        return cls(access=False)

    @classmethod
    def from_record(cls, record: EntitlementRecord, now_ms: int) -> "AccessDecision":
        return cls(
            access=record.is_active_at(now_ms),
            plan_id=record.plan_id,
            expires_at=record.expires_at,
            disabled=record.is_disabled,
        )
