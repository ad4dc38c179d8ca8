"""Application factory and entry point.

Run with:
    uvicorn app:app --reload

Set ``CALC_DEBUG=true`` to mount the debug routes.
"""
from __future__ import annotations

from fastapi import FastAPI

from api import (
    calculator_router,
    debug_router,
    entitlement_router,
    plans_router,
    purchase_router,
)
from config import Settings
from logging_config import configure_logging
from session import CalculatorSession


def create_app(
    session: CalculatorSession | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Accepts an optional session and settings for testing; both are built
    fresh if omitted.
    """
    if settings is None:
        settings = Settings()
    if session is None:
        session = CalculatorSession.from_settings(settings)

    configure_logging(settings.log_level)

    app = FastAPI(
        title="Calculator Paywall API",
        description=(
            "Four-function calculator whose equals key is gated behind a "
            "mock subscription. Buttons are pressed one at a time; the "
            "purchase wizard unlocks evaluation."
        ),
        version="0.1.0",
    )
    app.state.session = session
    app.state.settings = settings

    app.include_router(calculator_router)
    app.include_router(plans_router)
    app.include_router(purchase_router)
    app.include_router(entitlement_router)
    if settings.debug:
        app.include_router(debug_router)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
