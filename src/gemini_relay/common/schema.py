"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from gemini_relay.common.errors import RelayError

SUMMARY_ACTION = "generate_summary"


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RelayRequestBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt: str | None = None
    action: str | None = None
    program: str | None = None
    institution: str | None = None
    context: Any = None


class ContentEnvelope(BaseModel):
    success: Literal[True] = True
    content: str
    model: str
    timestamp: str


class SummaryEnvelope(BaseModel):
    success: Literal[True] = True
    message: str = "AI Summary generated successfully"
    summary: str
    program: str | None = None
    institution: str | None = None
    type: str = "trigger_response"
    timestamp: str


class ErrorEnvelope(BaseModel):
    success: Literal[False] = False
    error: str
    timestamp: str


@dataclass
class RelayResponse:
    """Platform-neutral handler result."""
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] | None = None
    error: RelayError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
