"""Boundary to the external quality proxy."""

from .client import DEFAULT_PROXY_TIMEOUT, HttpQualityProxy, QualityProxy, StaticQualityProxy
from .errors import ProxyError, ProxyTimeoutError, ProxyUnavailableError
from .models import ProxyMetrics, ProxyRequest, ProxyResponse, QualityReport, QualityViolation

__all__ = [
    "DEFAULT_PROXY_TIMEOUT",
    "HttpQualityProxy",
    "ProxyError",
    "ProxyMetrics",
    "ProxyRequest",
    "ProxyResponse",
    "ProxyTimeoutError",
    "ProxyUnavailableError",
    "QualityProxy",
    "QualityReport",
    "QualityViolation",
    "StaticQualityProxy",
]
