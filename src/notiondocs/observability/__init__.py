"""Observability: structured logging and metrics hooks for notiondocs."""

from __future__ import annotations

from .logger import StructuredFormatter, configure_logging, get_logger
from .metrics import MetricsHook, NoopMetricsHook

__all__ = [
    "MetricsHook",
    "NoopMetricsHook",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
]
