from __future__ import annotations

from fastapi import FastAPI

from . import __version__
from .middleware.logging import StructuredLoggingMiddleware
from .routers import cron

app = FastAPI(title="scorigami-notifier", version=__version__)

app.add_middleware(StructuredLoggingMiddleware)

app.include_router(cron.router)


@app.get("/healthz")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
