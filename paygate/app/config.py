"""Process configuration for the paygate service."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

PAYMENT_PROVIDERS = ("paystack", "sandbox")
STORE_BACKENDS = ("postgres", "memory")
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


class ConfigurationError(ValueError):
    """Raised at startup when required configuration is missing or invalid."""


@dataclass(frozen=True)
class PaygateConfig:
    """Settings for the payment processor, entitlement store and HTTP layer."""

    paystack_secret_key: str = field(repr=False)
    webhook_secret: str = field(repr=False)
    payment_provider: str = "paystack"
    paystack_base_url: str = "https://api.paystack.co"
    paystack_callback_url: Optional[str] = None
    provider_timeout_seconds: float = 10.0
    store_backend: str = "postgres"
    db_host: str = "127.0.0.1"
    db_port: int = 5432
    db_name: str = "paygate"
    db_user: str = "paygate"
    db_password: str = field(default="", repr=False)
    db_connect_timeout: int = 5
    db_statement_timeout_ms: int = 5000
    db_create_schema: bool = False
    cors_allow_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"


def _to_bool(value: Optional[str], *, default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return default


def _to_int(name: str, value: Optional[str], *, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def _to_float(name: str, value: Optional[str], *, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


def _choice(name: str, value: Optional[str], *, choices: Tuple[str, ...], default: str) -> str:
    selected = (value or default).strip().lower() or default
    if selected not in choices:
        raise ConfigurationError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return selected


def _parse_connect_timeout(value: Optional[str]) -> int:
    timeout = _to_float("DB_CONNECT_TIMEOUT", value, default=5.0)
    if timeout <= 0:
        raise ConfigurationError("DB_CONNECT_TIMEOUT must be positive")
    return int(math.ceil(timeout))


def _parse_origins(value: Optional[str]) -> Tuple[str, ...]:
    if value is None or not value.strip():
        return ("*",)
    return tuple(origin.strip() for origin in value.split(",") if origin.strip())


def load_config(env: Optional[Mapping[str, str]] = None) -> PaygateConfig:
    """Load :class:`PaygateConfig` from environment variables.

    ``PAYSTACK_SECRET_KEY`` is mandatory. Paystack signs webhooks with the
    account secret key, so ``PAYSTACK_WEBHOOK_SECRET`` only needs setting when
    a different signing secret is in use.
    """

    env_mapping = os.environ if env is None else env

    secret_key = (env_mapping.get("PAYSTACK_SECRET_KEY") or "").strip()
    if not secret_key:
        raise ConfigurationError("PAYSTACK_SECRET_KEY must be set")
    webhook_secret = (env_mapping.get("PAYSTACK_WEBHOOK_SECRET") or "").strip() or secret_key

    provider_timeout = _to_float(
        "PAYMENT_PROVIDER_TIMEOUT", env_mapping.get("PAYMENT_PROVIDER_TIMEOUT"), default=10.0
    )
    if provider_timeout <= 0:
        raise ConfigurationError("PAYMENT_PROVIDER_TIMEOUT must be positive")

    statement_timeout_ms = _to_int(
        "DB_STATEMENT_TIMEOUT_MS", env_mapping.get("DB_STATEMENT_TIMEOUT_MS"), default=5000
    )
    if statement_timeout_ms <= 0:
        raise ConfigurationError("DB_STATEMENT_TIMEOUT_MS must be positive")

    return PaygateConfig(
        paystack_secret_key=secret_key,
        webhook_secret=webhook_secret,
        payment_provider=_choice(
            "PAYMENT_PROVIDER",
            env_mapping.get("PAYMENT_PROVIDER"),
            choices=PAYMENT_PROVIDERS,
            default="paystack",
        ),
        paystack_base_url=(env_mapping.get("PAYSTACK_BASE_URL") or "https://api.paystack.co").rstrip("/"),
        paystack_callback_url=env_mapping.get("PAYSTACK_CALLBACK_URL") or None,
        provider_timeout_seconds=provider_timeout,
        store_backend=_choice(
            "ENTITLEMENT_STORE",
            env_mapping.get("ENTITLEMENT_STORE"),
            choices=STORE_BACKENDS,
            default="postgres",
        ),
        db_host=env_mapping.get("DB_HOST", "127.0.0.1"),
        db_port=_to_int("DB_PORT", env_mapping.get("DB_PORT"), default=5432),
        db_name=env_mapping.get("DB_NAME", "paygate"),
        db_user=env_mapping.get("DB_USER", "paygate"),
        db_password=env_mapping.get("DB_PASSWORD", ""),
        db_connect_timeout=_parse_connect_timeout(env_mapping.get("DB_CONNECT_TIMEOUT")),
        db_statement_timeout_ms=statement_timeout_ms,
        db_create_schema=_to_bool(env_mapping.get("DB_CREATE_SCHEMA"), default=False),
        cors_allow_origins=_parse_origins(env_mapping.get("CORS_ALLOW_ORIGINS")),
        log_level=_choice(
            "LOG_LEVEL",
            env_mapping.get("LOG_LEVEL"),
            choices=LOG_LEVELS,
            default="info",
        ).upper(),
    )


__all__ = ["ConfigurationError", "PaygateConfig", "load_config"]
