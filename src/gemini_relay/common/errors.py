"""Error taxonomy for the relay.

Every failure the handler can report is one of these; the handler turns
them into the error envelope at a single boundary.
"""
from __future__ import annotations


class RelayError(Exception):
    """Base class for relay failures."""

    status_code = 500
    kind = "relay_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputValidationError(RelayError):
    """Bad method or missing/invalid request input."""

    status_code = 400
    kind = "input_validation"


class MethodNotAllowedError(InputValidationError):
    status_code = 405
    kind = "method_not_allowed"


class ConfigurationError(RelayError):
    """Server-side configuration is missing (e.g. the API key)."""

    kind = "configuration"


class UpstreamTransportError(RelayError):
    """The Gemini API answered with a non-2xx status, or could not be reached."""

    kind = "upstream_transport"

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        upstream_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body


class UpstreamContractError(RelayError):
    """The Gemini API answered 2xx but without usable generated text."""

    kind = "upstream_contract"


class UnknownFault(RelayError):
    kind = "unknown"
