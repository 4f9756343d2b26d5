"""Outbound call to the Gemini generateContent endpoint."""
from __future__ import annotations
import logging
import time
from typing import Any

import httpx

from gemini_relay.common.config import RelaySettings
from gemini_relay.common.errors import (
    ConfigurationError,
    UpstreamContractError,
    UpstreamTransportError,
)

LOGGER = logging.getLogger("gemini_relay.relay.gemini")

GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 8192,
}

SAFETY_SETTINGS: list[dict[str, str]] = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


def build_generation_request(prompt: str) -> dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": dict(GENERATION_CONFIG),
        "safetySettings": [dict(s) for s in SAFETY_SETTINGS],
    }


def extract_text(data: Any) -> str:
    """
    Pull the generated text out of a generateContent payload.

    Only the first candidate and its first part are used.

    Raises:
        UpstreamContractError: if the payload carries no usable text.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None
    if not isinstance(text, str) or not text:
        raise UpstreamContractError("Unexpected response format from Gemini API")
    return text


class GeminiClient:
    """Single-shot client for text generation. No retries."""

    def __init__(self, settings: RelaySettings, transport: httpx.BaseTransport | None = None) -> None:
        self.settings = settings
        self.transport = transport

    @property
    def model(self) -> str:
        return self.settings.model

    def generate(self, prompt: str) -> str:
        # Checked before any network activity.
        if not self.settings.api_key:
            raise ConfigurationError("GEMINI_API_KEY environment variable not set")

        payload = build_generation_request(prompt)
        LOGGER.info("Calling Gemini API model=%s", self.settings.model)
        start = time.time()
        try:
            with httpx.Client(timeout=self.settings.timeout_s, transport=self.transport) as client:
                r = client.post(
                    self.settings.endpoint,
                    params={"key": self.settings.api_key},
                    headers={"Content-Type": "application/json"},
                    json=payload,
                )
        except httpx.TimeoutException as e:
            LOGGER.error("Gemini API request timed out after %ss: %s", self.settings.timeout_s, e)
            raise UpstreamTransportError(f"Gemini API request timed out after {self.settings.timeout_s}s") from e
        except httpx.RequestError as e:
            LOGGER.error("Gemini API request failed: %s", e)
            raise UpstreamTransportError(f"Gemini API request failed: {e}") from e

        latency = int((time.time() - start) * 1000)
        if not r.is_success:
            LOGGER.error("Gemini API error: %s %s", r.status_code, r.text)
            raise UpstreamTransportError(
                f"Gemini API error: {r.status_code} - {r.text}",
                upstream_status=r.status_code,
                upstream_body=r.text,
            )

        try:
            data = r.json()
        except ValueError as e:
            LOGGER.error("Gemini API returned non-JSON body: %s", e)
            raise UpstreamContractError("Unexpected response format from Gemini API") from e

        LOGGER.info("Gemini API response received in %sms", latency)
        try:
            return extract_text(data)
        except UpstreamContractError:
            LOGGER.error("Unexpected Gemini response format: %s", data)
            raise
