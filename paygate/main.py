"""HTTP entry point for the paygate access service.

Run with ``uvicorn paygate.main:create_app --factory``. Building the app
loads configuration and fails immediately if required secrets are missing.
"""
import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .app.billing import GrantFailureReporter, PaymentProvider
from .app.config import PaygateConfig, load_config
from .app.entitlements import Clock, EntitlementStore, build_default_catalog
from .app.routes.billing import router as billing_router
from .app.routes.entitlements import router as entitlements_router
from .app.services.billing import build_services

logger = logging.getLogger("paygate")

LIVENESS_MESSAGE = "Paygate backend is live"


def create_app(
    config: Optional[PaygateConfig] = None,
    *,
    store: Optional[EntitlementStore] = None,
    provider: Optional[PaymentProvider] = None,
    clock: Optional[Clock] = None,
    failure_reporter: Optional[GrantFailureReporter] = None,
) -> FastAPI:
    if config is None:
        load_dotenv()
        config = load_config()

    for name in ("paygate", "billing"):
        logging.getLogger(name).setLevel(config.log_level)

    app = FastAPI(title="Paygate Access API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = build_services(
        config,
        build_default_catalog(),
        store=store,
        provider=provider,
        clock=clock,
        failure_reporter=failure_reporter,
    )

    app.include_router(billing_router)
    app.include_router(entitlements_router)

    @app.get("/", response_class=PlainTextResponse)
    def liveness() -> str:
        return LIVENESS_MESSAGE

    logger.info(
        "Paygate configured provider=%s store=%s",
        config.payment_provider,
        config.store_backend,
    )
    return app
