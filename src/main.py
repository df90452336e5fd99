"""Entry point for the WhatsApp calling orchestrator.

The orchestrator is the control plane between the WhatsApp Cloud API calling
webhooks and the WebRTC media edge; it never touches media itself.
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from api.routes import router as calling_router
from calls.errors import CallError
from config.settings import get_settings

LOGGER = logging.getLogger(__name__)

# Fails fast (pydantic ValidationError) when WABA_TOKEN, WABA_PHONE_ID or
# EDGE_API is missing.
settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="WhatsApp Calling Orchestrator",
    description="Bridges WhatsApp calling webhooks to a WebRTC media edge.",
)
app.include_router(calling_router)


@app.exception_handler(CallError)
async def _call_error(_: Request, exc: CallError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/", response_class=PlainTextResponse)
async def health() -> str:
    return "WhatsApp calling orchestrator is running"


def main() -> None:
    LOGGER.info("Orchestrator listening on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
