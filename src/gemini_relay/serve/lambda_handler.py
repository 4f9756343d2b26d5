"""AWS Lambda entry point for the prompt relay.

Supports API Gateway proxy events (REST and HTTP API shapes) and direct
invocation, where the event itself is the request body.
"""
from __future__ import annotations
import base64
import json
import logging
from functools import lru_cache
from typing import Any

from gemini_relay.relay.handler import PromptRelayHandler, UnavailableHandler, build_handler

LOGGER = logging.getLogger("gemini_relay.serve.lambda")


@lru_cache(maxsize=1)
def _get_handler() -> PromptRelayHandler | UnavailableHandler:
    # Built once per container; settings come from the Lambda environment.
    return build_handler()


def _method(event: dict[str, Any]) -> str:
    if "httpMethod" in event:
        return str(event["httpMethod"])
    http = (event.get("requestContext") or {}).get("http") or {}
    return str(http.get("method", "POST"))


def _is_proxy_event(event: Any) -> bool:
    return isinstance(event, dict) and (
        "httpMethod" in event or "requestContext" in event or "body" in event
    )


def _decode_body(event: dict[str, Any]) -> Any:
    raw = event.get("body")
    if raw is None or raw == "":
        return None
    if isinstance(raw, (dict, list)):
        return raw
    if event.get("isBase64Encoded"):
        try:
            raw = base64.b64decode(raw).decode("utf-8")
        except ValueError:
            LOGGER.warning("Could not base64-decode request body")
            return None
    try:
        return json.loads(raw)
    except ValueError:
        LOGGER.warning("Request body is not valid JSON")
        return None


def lambda_handler(event, context):
    """Lambda-compatible handler.

    Returns {"statusCode", "headers", "body"} with a JSON string body
    (empty string for the pre-flight response).
    """
    if _is_proxy_event(event):
        method, body = _method(event), _decode_body(event)
    else:
        method, body = "POST", event

    result = _get_handler().handle(method, body)
    headers = dict(result.headers)
    if result.body is not None:
        headers["Content-Type"] = "application/json"
    return {
        "statusCode": result.status_code,
        "headers": headers,
        "body": "" if result.body is None else json.dumps(result.body),
    }
