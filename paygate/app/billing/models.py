"""Domain models for checkout and payment events."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentEventType(str, Enum):
    """Processor event types that the application reacts to."""

    CHARGE_SUCCESS = "charge.success"


class WebhookOutcome(str, Enum):
    """Result of processing an authenticated webhook delivery."""

    GRANTED = "granted"
    IGNORED = "ignored"
    NOT_PERSISTED = "not_persisted"


class ProviderSession(BaseModel):
    """Checkout session returned by the payment processor."""

    authorization_url: str
    reference: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class CheckoutSession(BaseModel):
    """Return value of a checkout initiation request."""

    payment_url: str
    plan_id: str
    amount: int = Field(gt=0)
    reference: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class PaymentEvent(BaseModel):
    """Parsed webhook body, after its signature has been accepted."""

    event: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def is_charge_success(self) -> bool:
        return self.event == PaymentEventType.CHARGE_SUCCESS.value

    @property
    def reference(self) -> Optional[str]:
        value = self.data.get("reference")
        return str(value) if value is not None else None

    @property
    def metadata(self) -> Dict[str, Any]:
        value = self.data.get("metadata")
        return value if isinstance(value, dict) else {}
