"""Exception taxonomy for the Cribl management API client.

Transport failures (DNS, TLS, connection refused, timeouts) are *not* wrapped:
they surface as the original ``httpx.TransportError`` raised by httpx.
"""

from __future__ import annotations


class CriblError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(CriblError):
    """Raised when the provider cannot build a usable client."""

    def __init__(self, message: str, *, attribute: str | None = None) -> None:
        super().__init__(message)
        self.attribute = attribute


class DecodeError(CriblError):
    """Raised when a success response body is not the expected JSON shape."""


class StatusError(CriblError):
    """Raised when the API answers with an unexpected HTTP status."""

    def __init__(
        self,
        status_code: int,
        *,
        method: str | None = None,
        url: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.detail = detail
        msg = f"status code: {status_code}"
        if method and url:
            msg = f"{method} {url} returned {msg}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class NotFoundError(StatusError):
    """The requested object does not exist on the remote side (HTTP 404)."""
