"""Writer de métricas a un endpoint de import Prometheus.

Buffer en memoria con flush periódico, similar a un remote-write client:
- Flush automático por tiempo (max_batch_duration) o por cantidad
  (max_batch_length)
- El batch se serializa en formato de exposición de texto Prometheus con
  timestamps en milisegundos (p.ej. VictoriaMetrics
  /api/v1/import/prometheus)
- Reintentos con backoff exponencial; un batch agotado se descarta
- Thread-safe para uso concurrente
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Dict, Iterable, List, Optional

import requests
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_client.metrics_core import Metric as MetricFamily

from ..core.domain import Metric
from ..errors import SinkWriteError
from .retry import RetryConfig, RetryExecutor

logger = logging.getLogger(__name__)

METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class _BatchCollector:
    """Adapta un batch de Metric a la interfaz collect() de prometheus_client."""

    def __init__(self, batch: Iterable[Metric]):
        self._batch = batch

    def collect(self) -> Iterable[MetricFamily]:
        families: Dict[str, MetricFamily] = {}
        for metric in self._batch:
            family = families.get(metric.name)
            if family is None:
                family = families[metric.name] = MetricFamily(metric.name, "", "gauge")
            family.add_sample(
                metric.name,
                dict(metric.labels),
                metric.value,
                timestamp=metric.utc_timestamp.timestamp(),
            )
        return list(families.values())


def render_batch(batch: Iterable[Metric]) -> bytes:
    """Serializa un batch en formato de texto Prometheus."""
    return generate_latest(_BatchCollector(batch))


def validate_metric(metric: Metric) -> None:
    """Raises SinkWriteError si el nombre o alguna label no es válido."""
    if not METRIC_NAME_RE.match(metric.name):
        raise SinkWriteError(f"invalid metric name {metric.name!r}")
    for key in metric.labels:
        if not LABEL_NAME_RE.match(key) or key.startswith("__"):
            raise SinkWriteError(f"invalid label name {key!r} on {metric.name}")


class PrometheusImportWriter:
    """MetricWriter que empuja batches por HTTP."""

    DEFAULT_MAX_BATCH_LENGTH = 10
    DEFAULT_MAX_BATCH_DURATION = 1.0  # segundos
    DEFAULT_REQUEST_TIMEOUT = 10.0
    PENDING_LIMIT_FACTOR = 100

    def __init__(
        self,
        url: str,
        max_batch_length: int = DEFAULT_MAX_BATCH_LENGTH,
        max_batch_duration: float = DEFAULT_MAX_BATCH_DURATION,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        retry_config: Optional[RetryConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """Inicializa el writer.

        Args:
            url: Endpoint de import (acepta texto Prometheus por POST)
            max_batch_length: Métricas por request; alcanzarlo dispara un flush
            max_batch_duration: Intervalo en segundos del flush periódico
            request_timeout: Timeout de cada POST
            retry_config: Política de reintentos por batch
            session: requests.Session opcional (tests, pooling compartido)
        """
        if not url:
            raise ValueError("prometheus write url is required")

        self._url = url
        self._max_batch_length = max_batch_length
        self._max_batch_duration = max_batch_duration
        self._request_timeout = request_timeout
        self._max_pending = max_batch_length * self.PENDING_LIMIT_FACTOR
        self._session = session or requests.Session()

        self._buffer: List[Metric] = []
        self._lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self._flush_requested = threading.Event()
        self._stop_event = threading.Event()
        self._flush_thread: Optional[threading.Thread] = None
        self._closed = False

        self._retry = RetryExecutor(
            retry_config or RetryConfig(
                max_attempts=3,
                base_delay=0.5,
                max_delay=5.0,
                retryable_exceptions=(requests.RequestException,),
            ),
            sleep=self._stop_event.wait,
            should_abort=self._stop_event.is_set,
        )

        # Métricas
        self._total_written = 0
        self._total_flushed = 0
        self._total_dropped = 0
        self._total_batches_failed = 0

    def start(self) -> None:
        """Inicia el thread de flush periódico."""
        if self._flush_thread is not None and self._flush_thread.is_alive():
            return

        self._flush_thread = threading.Thread(
            target=self._flush_loop, daemon=True, name="prometheus-writer",
        )
        self._flush_thread.start()
        logger.info(
            "[SINK] Writer started url=%s batch_length=%d batch_duration=%.1fs",
            self._url, self._max_batch_length, self._max_batch_duration,
        )

    def write_metric(self, metric: Metric) -> None:
        """Agrega una métrica al buffer.

        Raises:
            SinkWriteError: writer cerrado, métrica inválida o buffer lleno
        """
        if self._closed:
            raise SinkWriteError("writer is closed")
        validate_metric(metric)

        with self._lock:
            if len(self._buffer) >= self._max_pending:
                self._total_dropped += 1
                raise SinkWriteError(
                    f"sink buffer full ({self._max_pending} pending), dropping {metric.name}"
                )
            self._buffer.append(metric)
            self._total_written += 1
            full = len(self._buffer) >= self._max_batch_length

        if full:
            self._flush_requested.set()

    def flush(self) -> None:
        """Envía todo lo pendiente en batches de max_batch_length."""
        # un solo flush a la vez para no reordenar batches
        with self._flush_lock:
            while True:
                with self._lock:
                    batch = self._buffer[:self._max_batch_length]
                    self._buffer = self._buffer[self._max_batch_length:]
                if not batch:
                    return
                self._send_batch(batch)

    def close(self) -> None:
        """Detiene el thread, hace flush final y cierra la sesión HTTP."""
        if self._closed:
            return
        self._closed = True
        self._flush_thread_stop()
        self.flush()
        self._session.close()
        logger.info("[SINK] Writer closed. %s", self.get_stats())

    def _flush_thread_stop(self) -> None:
        self._stop_event.set()
        self._flush_requested.set()
        if self._flush_thread is not None:
            self._flush_thread.join(timeout=5.0)
            self._flush_thread = None
        # flush final sin abortar reintentos
        self._stop_event.clear()

    def _flush_loop(self) -> None:
        """Loop principal del thread de flush."""
        while not self._closed:
            self._flush_requested.wait(self._max_batch_duration)
            self._flush_requested.clear()
            if self._closed:
                break
            self.flush()

    def _send_batch(self, batch: List[Metric]) -> None:
        body = render_batch(batch)
        try:
            self._retry.execute(self._post, body)
        except requests.RequestException as e:
            with self._lock:
                self._total_batches_failed += 1
                self._total_dropped += len(batch)
            logger.error("[SINK] dropping batch of %d metrics: %s", len(batch), e)
            return

        with self._lock:
            self._total_flushed += len(batch)
        logger.debug("[SINK] flushed %d metrics", len(batch))

    def _post(self, body: bytes) -> None:
        response = self._session.post(
            self._url,
            data=body,
            headers={"Content-Type": CONTENT_TYPE_LATEST},
            timeout=self._request_timeout,
        )
        response.raise_for_status()

    def get_stats(self) -> dict:
        """Retorna estadísticas del writer."""
        with self._lock:
            stats = {
                "pending": len(self._buffer),
                "total_written": self._total_written,
                "total_flushed": self._total_flushed,
                "total_dropped": self._total_dropped,
                "total_batches_failed": self._total_batches_failed,
            }
        stats.update(self._retry.stats)
        return stats
