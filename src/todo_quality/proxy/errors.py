"""Exceptions raised at the quality-proxy boundary."""

from __future__ import annotations

from ..exceptions import TodoQualityError


class ProxyError(TodoQualityError):
    """Base error for quality-proxy failures.

    Attributes:
        status_code: HTTP status code, if the proxy answered at all.
        message: A human-readable error description.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        prefix = f"HTTP {status_code}: " if status_code is not None else ""
        super().__init__(f"{prefix}{message}")


class ProxyUnavailableError(ProxyError):
    """Raised when the proxy cannot be reached or answers with a 5xx."""


class ProxyTimeoutError(ProxyError):
    """Raised when the proxy does not answer within the configured timeout.

    Attributes:
        timeout: The timeout that elapsed, in seconds.
    """

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Quality proxy timed out after {timeout:g}s")
