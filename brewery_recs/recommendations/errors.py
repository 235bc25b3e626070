from __future__ import annotations

from typing import Any

from ..upstream.client import UpstreamError

DEFAULT_ERROR_MESSAGE = "Error fetching recommendations"


class RecommendationError(Exception):
    """A failed recommendation request, already shaped for the HTTP response."""

    def __init__(self, status_code: int, message: str, error: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error


def normalize_upstream_error(exc: UpstreamError) -> RecommendationError:
    """
    Map an upstream failure onto the outward ``{message, error}`` shape.

    Status is the upstream's own when it answered, 500 otherwise. The body's
    ``message`` (when it is a non-empty string) and ``errors`` fields win over
    the generic message and the raw failure text respectively.
    """
    body = exc.response_body if isinstance(exc.response_body, dict) else {}

    status_code = exc.status_code if exc.has_response else 500
    message = body.get("message")
    if not isinstance(message, str) or not message:
        message = DEFAULT_ERROR_MESSAGE
    error = body.get("errors") or exc.message

    return RecommendationError(status_code=status_code, message=message, error=error)
