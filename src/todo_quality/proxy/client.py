"""Clients for the external quality proxy.

The proxy is an outside service that measures generated content and may
rewrite it. Only its boundary lives here: a Protocol the enforcer depends
on, an httpx-based client with a timeout, and a static stand-in that
accepts everything for offline use.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from ..gates import QualityMetrics
from .errors import ProxyError, ProxyTimeoutError, ProxyUnavailableError
from .models import ProxyMetrics, ProxyRequest, ProxyResponse

logger = logging.getLogger(__name__)

DEFAULT_PROXY_TIMEOUT = 30.0


class QualityProxy(Protocol):
    """Anything that can judge a piece of content."""

    async def validate(self, content: str, file_path: str) -> ProxyResponse:
        """Validate ``content`` and return the proxy's verdict."""
        ...


class HttpQualityProxy:
    """Async client for a quality proxy reachable over HTTP.

    Usage::

        async with HttpQualityProxy("http://127.0.0.1:8421") as proxy:
            response = await proxy.validate(code, "src/app.py")

    Args:
        base_url: Base URL of the proxy service.
        timeout: Request timeout in seconds.
        mode: Processing mode sent with each request.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_PROXY_TIMEOUT,
        mode: str = "strict",
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._mode = mode
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> HttpQualityProxy:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def validate(self, content: str, file_path: str) -> ProxyResponse:
        """Send ``content`` to the proxy for validation.

        Args:
            content: Text to validate.
            file_path: Path the content belongs to, for reporting.

        Returns:
            The parsed ProxyResponse.

        Raises:
            ProxyTimeoutError: If the proxy does not answer in time.
            ProxyUnavailableError: On connection failures or 5xx responses.
            ProxyError: On other non-2xx responses or an unparseable body.
        """
        request = ProxyRequest(file_path=file_path, content=content, mode=self._mode)

        try:
            response = await self._client.post("/validate", json=request.model_dump())
        except httpx.TimeoutException as exc:
            raise ProxyTimeoutError(self._timeout) from exc
        except httpx.TransportError as exc:
            raise ProxyUnavailableError(f"Cannot reach quality proxy at {self._base_url}: {exc}") from exc

        if response.status_code >= 500:
            raise ProxyUnavailableError(response.text, status_code=response.status_code)
        if response.status_code >= 400:
            raise ProxyError(response.text, status_code=response.status_code)

        try:
            return ProxyResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ProxyError(f"Invalid quality proxy response: {exc}") from exc


class StaticQualityProxy:
    """Proxy stand-in that accepts all content unchanged.

    Reports the metrics it was built with, so gate evaluation still has
    data to work on when no real proxy is available. Without metrics it
    reports none, and the content is accepted ungated.
    """

    def __init__(self, metrics: QualityMetrics | None = None) -> None:
        self._metrics = metrics

    async def validate(self, content: str, file_path: str) -> ProxyResponse:
        logger.debug(f"Static quality proxy accepting {file_path}")
        metrics = ProxyMetrics(**self._metrics.as_dict()) if self._metrics is not None else None
        return ProxyResponse(status="accepted", final_content=content, metrics=metrics)
