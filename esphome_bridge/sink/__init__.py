"""Sink: forwarder de la cola y writer de import Prometheus."""

from .base import MetricWriter
from .forwarder import SinkForwarder
from .prometheus_writer import PrometheusImportWriter, render_batch
from .retry import RetryConfig, RetryExecutor

__all__ = [
    "MetricWriter",
    "PrometheusImportWriter",
    "RetryConfig",
    "RetryExecutor",
    "SinkForwarder",
    "render_batch",
]
