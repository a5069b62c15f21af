from __future__ import annotations

import io
import json
from typing import Dict, List
from urllib import error as urllib_error

import pytest

from paygate.app.billing import provider as provider_module
from paygate.app.billing.provider import PaystackProvider
from paygate.app.errors import PaymentInitiationFailed

METADATA = {"email": "a@x.com", "device_id": "d1", "plan_id": "6hrs"}


def _install_urlopen(monkeypatch, response_body: object, captured: List[Dict[str, object]]) -> None:
    def fake_urlopen(request, timeout=None):
        captured.append(
            {
                "url": request.full_url,
                "method": request.get_method(),
                "headers": dict(request.header_items()),
                "body": json.loads(request.data.decode("utf-8")),
                "timeout": timeout,
            }
        )
        raw = response_body if isinstance(response_body, bytes) else json.dumps(response_body).encode("utf-8")
        return io.BytesIO(raw)

    monkeypatch.setattr(provider_module.urllib_request, "urlopen", fake_urlopen)


def test_initialize_posts_to_paystack(monkeypatch):
    captured: List[Dict[str, object]] = []
    _install_urlopen(
        monkeypatch,
        {
            "status": True,
            "message": "Authorization URL created",
            "data": {"authorization_url": "https://checkout.paystack.com/xyz", "reference": "ref_xyz"},
        },
        captured,
    )
    provider = PaystackProvider(secret_key="sk_test_key", timeout=3.5, callback_url="https://app.example/done")

    session = provider.initialize_transaction(email="a@x.com", amount=2000, metadata=METADATA)

    assert session.authorization_url == "https://checkout.paystack.com/xyz"
    assert session.reference == "ref_xyz"
    [call] = captured
    assert call["url"] == "https://api.paystack.co/transaction/initialize"
    assert call["method"] == "POST"
    assert call["timeout"] == 3.5
    assert call["headers"]["Authorization"] == "Bearer sk_test_key"
    assert call["headers"]["Content-type"] == "application/json"
    assert call["body"] == {
        "email": "a@x.com",
        "amount": 2000,
        "metadata": METADATA,
        "callback_url": "https://app.example/done",
    }


def test_callback_url_omitted_when_unset(monkeypatch):
    captured: List[Dict[str, object]] = []
    _install_urlopen(
        monkeypatch,
        {"status": True, "data": {"authorization_url": "https://checkout.paystack.com/xyz"}},
        captured,
    )

    session = PaystackProvider(secret_key="sk").initialize_transaction(email="a@x.com", amount=1, metadata=METADATA)

    assert "callback_url" not in captured[0]["body"]
    assert session.reference is None


@pytest.mark.parametrize(
    "response_body",
    [
        {"status": False, "message": "Invalid key"},
        {"status": True, "data": {}},
        {"status": True},
        ["unexpected"],
        b"<html>bad gateway</html>",
    ],
)
def test_unusable_responses_fail(monkeypatch, response_body):
    _install_urlopen(monkeypatch, response_body, [])

    with pytest.raises(PaymentInitiationFailed):
        PaystackProvider(secret_key="sk").initialize_transaction(email="a@x.com", amount=1, metadata=METADATA)


@pytest.mark.parametrize(
    "error",
    [
        urllib_error.HTTPError("https://api.paystack.co", 401, "Unauthorized", None, None),
        urllib_error.URLError("name resolution failed"),
        TimeoutError("timed out"),
    ],
)
def test_transport_errors_fail(monkeypatch, error):
    def fake_urlopen(request, timeout=None):
        raise error

    monkeypatch.setattr(provider_module.urllib_request, "urlopen", fake_urlopen)

    with pytest.raises(PaymentInitiationFailed) as exc_info:
        PaystackProvider(secret_key="sk").initialize_transaction(email="a@x.com", amount=1, metadata=METADATA)

    assert exc_info.value.__cause__ is error


def test_secret_key_required():
    with pytest.raises(ValueError):
        PaystackProvider(secret_key="")
