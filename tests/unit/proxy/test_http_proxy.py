"""Tests for the async quality-proxy clients."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from todo_quality.gates import QualityMetrics
from todo_quality.proxy import (
    HttpQualityProxy,
    ProxyError,
    ProxyTimeoutError,
    ProxyUnavailableError,
    StaticQualityProxy,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_proxy(handler: Any, timeout: float = 5.0) -> HttpQualityProxy:
    """Build an HttpQualityProxy wired to an httpx.MockTransport."""
    transport = httpx.MockTransport(handler)
    proxy = HttpQualityProxy(base_url="http://test", timeout=timeout)
    proxy._client = httpx.AsyncClient(transport=transport, base_url="http://test")
    return proxy


def _accepted(content: str = "def f():\n    return 1\n") -> dict[str, Any]:
    return {
        "status": "accepted",
        "final_content": content,
        "metrics": {"coverage": 91.0, "complexity": 3, "doctest_count": 2},
    }


# ---------------------------------------------------------------------------
# HttpQualityProxy
# ---------------------------------------------------------------------------


async def test_validate_posts_request() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_accepted())

    proxy = _make_proxy(handler)
    response = await proxy.validate("def f():\n    return 1\n", "src/f.py")
    await proxy.close()

    assert seen["path"] == "/validate"
    assert seen["body"]["file_path"] == "src/f.py"
    assert seen["body"]["operation"] == "validate"
    assert seen["body"]["mode"] == "strict"
    assert response.status == "accepted"
    assert response.metrics.coverage == 91.0
    assert response.metrics.property_test_count == 0


async def test_context_manager_enter_exit() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_accepted())

    async with HttpQualityProxy(base_url="http://test") as proxy:
        proxy._client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="http://test"
        )
        response = await proxy.validate("x = 1\n", "a.py")

    assert response.status == "accepted"


async def test_rejected_response_parsed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "status": "rejected",
                "quality_report": {
                    "passed": False,
                    "violations": [
                        {
                            "violation_type": "satd",
                            "severity": "error",
                            "location": "src/f.py:12:4",
                            "message": "TODO comment found",
                        }
                    ],
                    "suggestions": ["Remove TODO comments"],
                },
            },
        )

    proxy = _make_proxy(handler)
    response = await proxy.validate("# TODO\n", "src/f.py")
    await proxy.close()

    assert response.status == "rejected"
    violation = response.quality_report.violations[0]
    assert violation.line_number == 12
    assert response.quality_report.suggestions == ["Remove TODO comments"]


async def test_server_error_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="overloaded")

    proxy = _make_proxy(handler)
    with pytest.raises(ProxyUnavailableError) as exc_info:
        await proxy.validate("x = 1\n", "a.py")
    await proxy.close()

    assert exc_info.value.status_code == 503
    assert "overloaded" in str(exc_info.value)


async def test_client_error_is_proxy_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, text="bad request")

    proxy = _make_proxy(handler)
    with pytest.raises(ProxyError) as exc_info:
        await proxy.validate("x = 1\n", "a.py")
    await proxy.close()

    assert not isinstance(exc_info.value, ProxyUnavailableError)
    assert exc_info.value.status_code == 422


async def test_timeout_maps_to_timeout_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    proxy = _make_proxy(handler, timeout=2.5)
    with pytest.raises(ProxyTimeoutError) as exc_info:
        await proxy.validate("x = 1\n", "a.py")
    await proxy.close()

    assert exc_info.value.timeout == 2.5
    assert "2.5s" in str(exc_info.value)


async def test_connection_failure_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    proxy = _make_proxy(handler)
    with pytest.raises(ProxyUnavailableError):
        await proxy.validate("x = 1\n", "a.py")
    await proxy.close()


async def test_malformed_body_is_proxy_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "maybe"})

    proxy = _make_proxy(handler)
    with pytest.raises(ProxyError, match="Invalid quality proxy response"):
        await proxy.validate("x = 1\n", "a.py")
    await proxy.close()


async def test_non_json_body_is_proxy_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    proxy = _make_proxy(handler)
    with pytest.raises(ProxyError):
        await proxy.validate("x = 1\n", "a.py")
    await proxy.close()


# ---------------------------------------------------------------------------
# StaticQualityProxy
# ---------------------------------------------------------------------------


async def test_static_proxy_accepts_unchanged() -> None:
    proxy = StaticQualityProxy(QualityMetrics(coverage=85.0, complexity=2))

    response = await proxy.validate("x = 1\n", "a.py")

    assert response.status == "accepted"
    assert response.final_content == "x = 1\n"
    assert response.metrics is not None
    assert response.metrics.to_quality_metrics() == QualityMetrics(coverage=85.0, complexity=2)


async def test_static_proxy_without_metrics_reports_none() -> None:
    response = await StaticQualityProxy().validate("x = 1\n", "a.py")

    assert response.status == "accepted"
    assert response.metrics is None
