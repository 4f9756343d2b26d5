"""Prompt relay handler.

Turns one inbound request into one envelope:
validate method -> derive prompt -> call Gemini -> map response.

The handler holds only immutable configuration, so a single instance can
serve concurrent requests.
"""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from gemini_relay.common.config import RelaySettings, cors_headers, load_settings
from gemini_relay.common.errors import (
    ConfigurationError,
    InputValidationError,
    MethodNotAllowedError,
    RelayError,
    UnknownFault,
)
from gemini_relay.common.schema import (
    SUMMARY_ACTION,
    ContentEnvelope,
    ErrorEnvelope,
    RelayRequestBody,
    RelayResponse,
    SummaryEnvelope,
    utc_timestamp,
)
from gemini_relay.common.templates import load_template, render_prompt
from gemini_relay.relay.gemini_client import GeminiClient

LOGGER = logging.getLogger("gemini_relay.relay.handler")

DEFAULT_PROGRAM = "Current Program"
DEFAULT_INSTITUTION = "Current Institution"


def human_timestamp(now: datetime) -> str:
    """Local time in the form 5/1/2024, 1:05:09 PM."""
    hour = now.hour % 12 or 12
    suffix = "AM" if now.hour < 12 else "PM"
    return f"{now.month}/{now.day}/{now.year}, {hour}:{now.minute:02d}:{now.second:02d} {suffix}"


class PromptRelayHandler:
    """
    Relay a prompt to Gemini and return a normalized envelope.

    Args:
        settings: Injected relay settings (API key, model, CORS policy, ...).
        transport: Optional httpx transport, used by tests to stub the upstream.
        clock: Returns the current local time; used for the summary prompt.
    """

    def __init__(
        self,
        settings: RelaySettings,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings
        self.client = GeminiClient(settings, transport=transport)
        self.clock = clock or datetime.now
        self.headers = cors_headers(settings.cors_policy)
        self.summary_template = load_template(settings.summary_template_path)

    def derive_prompt(self, req: RelayRequestBody) -> str:
        if self.settings.enable_summary and req.action == SUMMARY_ACTION:
            LOGGER.info(
                "Summary request: program=%r institution=%r context=%r",
                req.program,
                req.institution,
                req.context,
            )
            return render_prompt(
                self.summary_template,
                {
                    "program": req.program or DEFAULT_PROGRAM,
                    "institution": req.institution or DEFAULT_INSTITUTION,
                    "timestamp": human_timestamp(self.clock()),
                },
            )
        if req.prompt:
            LOGGER.info("Prompt request, prompt length: %d", len(req.prompt))
            return req.prompt
        raise InputValidationError("Missing prompt or action in request body")

    def handle(self, method: str, body: Any) -> RelayResponse:
        """
        Handle one inbound call. Never raises.

        Args:
            method: HTTP method of the inbound request.
            body: Decoded JSON body (None when absent or unparseable).
        """
        method = (method or "").upper()
        LOGGER.info("Request received: %s", method)
        if method == "OPTIONS":
            return RelayResponse(status_code=200, headers=dict(self.headers), body=None)

        try:
            if method != "POST":
                raise MethodNotAllowedError("Method not allowed. Use POST.")
            req = self._parse(body)
            prompt = self.derive_prompt(req)
            text = self.client.generate(prompt)
            return RelayResponse(status_code=200, headers=dict(self.headers), body=self._success(req, text))
        except RelayError as e:
            return self._failure(e)
        except Exception as e:
            LOGGER.exception("Unhandled relay fault")
            return self._failure(UnknownFault(str(e) or "Internal server error"))

    def _parse(self, body: Any) -> RelayRequestBody:
        if not isinstance(body, dict):
            raise InputValidationError("Missing prompt or action in request body")
        try:
            return RelayRequestBody.model_validate(body)
        except ValidationError as e:
            raise InputValidationError(f"Invalid request body: {e.error_count()} invalid field(s)") from e

    def _success(self, req: RelayRequestBody, text: str) -> dict[str, Any]:
        if self.settings.enable_summary and req.action == SUMMARY_ACTION:
            LOGGER.info("Summary generation completed")
            env = SummaryEnvelope(
                summary=text,
                program=req.program,
                institution=req.institution,
                timestamp=utc_timestamp(),
            )
            return env.model_dump(exclude_none=True)
        return ContentEnvelope(content=text, model=self.client.model, timestamp=utc_timestamp()).model_dump()

    def _failure(self, err: RelayError) -> RelayResponse:
        return error_response(err, self.headers)


def error_response(err: RelayError, headers: dict[str, str]) -> RelayResponse:
    LOGGER.error("Relay failed (%s, %s): %s", err.kind, err.status_code, err.message)
    env = ErrorEnvelope(error=err.message, timestamp=utc_timestamp())
    return RelayResponse(
        status_code=err.status_code,
        headers=dict(headers),
        body=env.model_dump(),
        error=err,
    )


class UnavailableHandler:
    """Stands in for a relay that could not be built.

    Pre-flight still succeeds; every other request gets a ConfigurationError
    envelope.
    """

    def __init__(self, err: ConfigurationError, headers: dict[str, str]) -> None:
        self.err = err
        self.headers = headers

    def handle(self, method: str, body: Any) -> RelayResponse:
        if (method or "").upper() == "OPTIONS":
            return RelayResponse(status_code=200, headers=dict(self.headers), body=None)
        return error_response(self.err, self.headers)


def build_handler(cfg_path: str | None = None) -> PromptRelayHandler | UnavailableHandler:
    """
    Build the relay from process configuration.

    Settings or template failures are logged and turned into an
    UnavailableHandler instead of raising.

    Args:
        cfg_path: Optional YAML config path.
    """
    settings = None
    try:
        settings = load_settings(cfg_path)
        return PromptRelayHandler(settings)
    except Exception as e:
        LOGGER.exception("Failed to build relay handler")
        # Settings that loaded carry a valid policy.
        headers = cors_headers(settings.cors_policy if settings else "minimal")
        return UnavailableHandler(ConfigurationError(f"Relay misconfigured: {e}"), headers)
