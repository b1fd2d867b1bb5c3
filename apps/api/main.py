from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

try:
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
except Exception:  # pragma: no cover - optional dependency resolution
    FastAPIInstrumentor = None

from apps.api import state
from apps.api.observability import init_observability
from apps.api.routes.alerts import router as alerts_router
from apps.api.routes.debug import router as debug_router
from apps.api.routes.reminders import router as reminders_router
from apps.api.routes.settings import router as settings_router
from apps.api.routes.timers import router as timers_router
from apps.api.ticker import start_ticker
from packages.core.logging_config import configure_logging


configure_logging()

init_observability()
app = FastAPI(title="Breaktime API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
if FastAPIInstrumentor is not None:
    FastAPIInstrumentor.instrument_app(app)
else:
    logging.getLogger("breaktime.api").warning(
        "OpenTelemetry instrumentation not available. "
        "Install observability dependencies to enable tracing."
    )
app.include_router(alerts_router)
app.include_router(debug_router)
app.include_router(reminders_router)
app.include_router(settings_router)
app.include_router(timers_router)

_TICKER = None


@app.on_event("startup")
def _start_ticker() -> None:
    global _TICKER
    if os.getenv("BREAKTIME_TICKER_ENABLED", "true").lower() != "true":
        return
    if _TICKER is not None:
        return
    _TICKER = start_ticker(state.get_engine())


@app.on_event("shutdown")
def _stop_ticker() -> None:
    global _TICKER
    if _TICKER is None:
        return
    _TICKER.shutdown(wait=False)
    _TICKER = None
    state.persist(state.get_engine())
