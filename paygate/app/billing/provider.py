"""Payment processor integrations used to start checkouts."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol
from urllib import error as urllib_error, request as urllib_request
from uuid import uuid4

from ..errors import PaymentInitiationFailed
from .models import ProviderSession

logger = logging.getLogger(__name__)

PAYSTACK_API_URL = "https://api.paystack.co"


class PaymentProvider(Protocol):
    """External payment processor integration."""

    name: str

    def initialize_transaction(
        self,
        *,
        email: str,
        amount: int,
        metadata: Dict[str, str],
    ) -> ProviderSession:
        """Create a processor checkout carrying ``metadata`` for the completion event."""


class PaystackProvider:
    """Starts Paystack transactions through the ``/transaction/initialize`` API."""

    name = "paystack"

    def __init__(
        self,
        *,
        secret_key: str,
        base_url: str = PAYSTACK_API_URL,
        timeout: float = 10.0,
        callback_url: Optional[str] = None,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must be provided")
        self._secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.callback_url = callback_url

    def _build_request(self, payload: Dict[str, Any]) -> urllib_request.Request:
        return urllib_request.Request(
            f"{self.base_url}/transaction/initialize",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self._secret_key}",
                "Content-Type": "application/json",
            },
            method="POST",
        )

    def initialize_transaction(
        self,
        *,
        email: str,
        amount: int,
        metadata: Dict[str, str],
    ) -> ProviderSession:
        payload: Dict[str, Any] = {"email": email, "amount": amount, "metadata": metadata}
        if self.callback_url:
            payload["callback_url"] = self.callback_url

        try:
            with urllib_request.urlopen(self._build_request(payload), timeout=self.timeout) as response:
                body = json.loads(response.read().decode("utf-8"))
        except urllib_error.HTTPError as exc:
            logger.error("Paystack rejected transaction initialize status=%s reason=%s", exc.code, exc.reason)
            raise PaymentInitiationFailed() from exc
        except (urllib_error.URLError, OSError) as exc:
            logger.error("Paystack transaction initialize unreachable: %s", exc)
            raise PaymentInitiationFailed() from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.error("Paystack returned an unreadable response")
            raise PaymentInitiationFailed() from exc

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict) or not body.get("status") or not data.get("authorization_url"):
            message = body.get("message") if isinstance(body, dict) else None
            logger.error("Paystack transaction initialize failed: %s", message)
            raise PaymentInitiationFailed()

        reference = data.get("reference")
        return ProviderSession(
            authorization_url=str(data["authorization_url"]),
            reference=str(reference) if reference is not None else None,
        )


class LocalSandboxPaymentProvider:
    """Minimal provider implementation for local development and tests."""

    name = "sandbox"

    def __init__(self, *, base_url: str = "https://checkout.sandbox.local") -> None:
        self.base_url = base_url.rstrip("/")

    def initialize_transaction(
        self,
        *,
        email: str,
        amount: int,
        metadata: Dict[str, str],
    ) -> ProviderSession:
        reference = f"sbx_{uuid4().hex}"
        logger.info("Sandbox checkout reference=%s amount=%s", reference, amount)
        return ProviderSession(authorization_url=f"{self.base_url}/{reference}", reference=reference)


__all__ = [
    "LocalSandboxPaymentProvider",
    "PAYSTACK_API_URL",
    "PaymentProvider",
    "PaystackProvider",
]
