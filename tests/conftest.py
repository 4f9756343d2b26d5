from __future__ import annotations

import dataclasses
import json
from datetime import datetime
from typing import Any

import httpx
import pytest

from gemini_relay.common.config import RelaySettings
from gemini_relay.relay.handler import PromptRelayHandler


def gemini_payload(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


class _Upstream:
    """Records outbound requests and answers with a canned response."""

    def __init__(self, status: int = 200, json_data: Any = None, text: str | None = None) -> None:
        self.status = status
        self.json_data = gemini_payload("Hello test") if json_data is None and text is None else json_data
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status, text=self.text)
        return httpx.Response(self.status, json=self.json_data)

    @property
    def sent_payload(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings() -> RelaySettings:
    return RelaySettings(api_key="test-key")


@pytest.fixture
def upstream() -> _Upstream:
    return _Upstream()


@pytest.fixture
def make_upstream():
    return _Upstream


@pytest.fixture
def make_handler(settings):
    def _make(upstream: _Upstream, **overrides: Any) -> PromptRelayHandler:
        cfg = dataclasses.replace(settings, **overrides)
        return PromptRelayHandler(
            cfg,
            transport=httpx.MockTransport(upstream),
            clock=lambda: datetime(2024, 5, 1, 13, 5, 9),
        )
    return _make
