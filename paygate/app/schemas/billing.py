"""API schemas for checkout and webhook endpoints."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..billing import CheckoutSession


class InitiatePaymentRequest(BaseModel):
    email: Optional[str] = None
    device_id: Optional[str] = None
    plan_id: Optional[str] = None


class InitiatePaymentResponse(BaseModel):
    payment_url: str

    @classmethod
    def from_checkout(cls, session: CheckoutSession) -> "InitiatePaymentResponse":
        return cls(payment_url=session.payment_url)


class WebhookAck(BaseModel):
    received: bool = True
