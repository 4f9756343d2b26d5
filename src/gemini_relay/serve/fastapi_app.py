"""FastAPI surface for the Gemini prompt relay.

Endpoints:
- GET /health
- POST /api/gemini  { "prompt": "..." } or { "action": "generate_summary", ... }
  (every other method on /api/gemini is answered by the handler: OPTIONS
  pre-flight or 405)
"""
from __future__ import annotations
import json
import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from gemini_relay.common.config import load_settings
from gemini_relay.common.logging_setup import setup_logging
from gemini_relay.common.templates import load_template, missing_placeholders
from gemini_relay.relay.handler import PromptRelayHandler, UnavailableHandler, build_handler

LOGGER = logging.getLogger("gemini_relay.serve.app")
setup_logging()

RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]

app = FastAPI(title="gemini-relay")


@lru_cache(maxsize=1)
def get_handler() -> PromptRelayHandler | UnavailableHandler:
    return build_handler()


@app.on_event("startup")
def _validate_template_on_startup() -> None:
    """Validate the summary template on startup and warn if malformed."""
    try:
        template = load_template(load_settings().summary_template_path)
        missing = missing_placeholders(template)
        if missing:
            LOGGER.warning("Summary template missing placeholders: %s", ", ".join(missing))
    except Exception as e:
        LOGGER.warning("Failed to read summary template: %s", e)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "model": load_settings().model}


@app.api_route("/api/gemini", methods=RELAY_METHODS)
async def relay(
    request: Request,
    handler: PromptRelayHandler | UnavailableHandler = Depends(get_handler),
) -> Response:
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else None
    except ValueError:
        LOGGER.warning("Request body is not valid JSON (%d bytes)", len(raw))
        body = None

    # The upstream call blocks; keep it off the event loop.
    result = await run_in_threadpool(handler.handle, request.method, body)
    if result.body is None:
        return Response(status_code=result.status_code, headers=result.headers)
    return JSONResponse(result.body, status_code=result.status_code, headers=result.headers)
