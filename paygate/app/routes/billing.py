"""API routes exposing checkout and payment webhook handling."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from starlette.concurrency import run_in_threadpool

from ...app_context import get_checkout_service, get_webhook_processor
from ..billing import CheckoutService, WebhookProcessor
from ..errors import PaygateError
from ..schemas.billing import InitiatePaymentRequest, InitiatePaymentResponse, WebhookAck

router = APIRouter(tags=["billing"])


@router.post("/initiate-payment", response_model=InitiatePaymentResponse)
def initiate_payment(
    payload: InitiatePaymentRequest,
    *,
    service: CheckoutService = Depends(get_checkout_service),
) -> InitiatePaymentResponse:
    try:
        session = service.initiate(payload.email, payload.device_id, payload.plan_id)
    except PaygateError as exc:
        raise exc.to_http_exception() from exc
    return InitiatePaymentResponse.from_checkout(session)


@router.post("/paystack-webhook", response_model=WebhookAck)
async def receive_paystack_webhook(
    request: Request,
    x_paystack_signature: Optional[str] = Header(None),
    *,
    processor: WebhookProcessor = Depends(get_webhook_processor),
) -> WebhookAck:
    # The signature covers the bytes as sent, so the body is never re-serialized.
    body = await request.body()
    try:
        await run_in_threadpool(processor.process, body, x_paystack_signature)
    except PaygateError as exc:
        raise exc.to_http_exception() from exc
    return WebhookAck()
