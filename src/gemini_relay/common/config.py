"""Relay configuration: optional YAML file overridden by environment variables."""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

DEFAULT_MODEL = "gemini-2.0-flash-exp"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT_S = 60.0

# Allowed methods advertised per CORS policy; origin and headers are shared.
CORS_POLICIES: dict[str, str] = {
    "minimal": "POST, OPTIONS",
    "verbose": "GET, POST, OPTIONS",
}


def cors_headers(policy: str) -> dict[str, str]:
    """
    Build the cross-origin headers attached to every relay response.

    Args:
        policy: One of CORS_POLICIES.
    """
    if policy not in CORS_POLICIES:
        raise ValueError(f"Unknown CORS policy {policy!r}; expected one of {sorted(CORS_POLICIES)}")
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": CORS_POLICIES[policy],
        "Access-Control-Allow-Headers": "Content-Type",
    }


@dataclass(frozen=True)
class RelaySettings:
    """Immutable per-process settings injected into the handler."""
    api_key: str = field(default="", repr=False)
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = DEFAULT_TIMEOUT_S
    cors_policy: str = "minimal"
    enable_summary: bool = True
    summary_template_path: str | None = None

    def __post_init__(self) -> None:
        # Fail at load time rather than on the first request.
        cors_headers(self.cors_policy)
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be positive")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def load_cfg(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(cfg_path: str | None = None) -> RelaySettings:
    """
    Load relay settings.

    Values from the YAML file (``cfg_path`` or ``RELAY_CONFIG``) are applied
    first; environment variables win over the file.

    Args:
        cfg_path: Optional YAML config path.
    """
    cfg_path = cfg_path or os.getenv("RELAY_CONFIG")
    cfg = load_cfg(cfg_path) if cfg_path else {}

    env_map = {
        "api_key": "GEMINI_API_KEY",
        "model": "GEMINI_MODEL",
        "base_url": "GEMINI_BASE_URL",
        "timeout_s": "RELAY_TIMEOUT_S",
        "cors_policy": "RELAY_CORS_POLICY",
        "enable_summary": "RELAY_ENABLE_SUMMARY",
        "summary_template_path": "RELAY_SUMMARY_TEMPLATE",
    }
    for key, var in env_map.items():
        value = os.getenv(var)
        if value is not None and value != "":
            cfg[key] = value

    return RelaySettings(
        api_key=str(cfg.get("api_key", "") or ""),
        model=str(cfg.get("model", DEFAULT_MODEL)),
        base_url=str(cfg.get("base_url", DEFAULT_BASE_URL)),
        timeout_s=float(cfg.get("timeout_s", DEFAULT_TIMEOUT_S)),
        cors_policy=str(cfg.get("cors_policy", "minimal")).lower(),
        enable_summary=_as_bool(cfg.get("enable_summary", True)),
        summary_template_path=cfg.get("summary_template_path") or None,
    )
