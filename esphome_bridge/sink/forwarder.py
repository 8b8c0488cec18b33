"""Sink forwarder: consumidor único de la cola de métricas.

Aplica el prefijo de nombre y las labels globales y entrega cada métrica al
writer. Un write fallido se loguea y se descarta; el loop nunca se detiene
por una métrica mala.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from ..core.backpressure import BackpressureQueue
from ..core.domain import Metric
from ..errors import SinkWriteError
from .base import MetricWriter

logger = logging.getLogger(__name__)

POLL_TIMEOUT = 1.0


class SinkForwarder:
    """Thread que drena la cola hacia el MetricWriter."""

    def __init__(
        self,
        queue: BackpressureQueue[Metric],
        writer: MetricWriter,
        prefix: str = "",
        extra_labels: Optional[Dict[str, str]] = None,
    ):
        self._queue = queue
        self._writer = writer
        self._prefix = prefix
        self._extra_labels = dict(extra_labels or {})
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._lock = threading.Lock()
        self._forwarded = 0
        self._failed = 0

    def enrich(self, metric: Metric) -> Metric:
        """Prefijo + labels extra (las extra ganan) + timestamp UTC."""
        enriched = metric.with_name_prefix(self._prefix).with_labels(self._extra_labels)
        return Metric(
            name=enriched.name,
            value=enriched.value,
            timestamp=enriched.utc_timestamp,
            labels=enriched.labels,
        )

    def forward(self, metric: Metric) -> bool:
        """Entrega una métrica al writer. Nunca propaga errores del sink."""
        enriched = self.enrich(metric)
        try:
            self._writer.write_metric(enriched)
        except SinkWriteError as e:
            logger.warning("[SINK] error writing metric %s%s: %s", enriched.name, enriched.labels, e)
        except Exception as e:
            logger.warning(
                "[SINK] unexpected error writing metric %s: %s", enriched.name, e, exc_info=True,
            )
        else:
            with self._lock:
                self._forwarded += 1
            return True

        with self._lock:
            self._failed += 1
        return False

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="sink-forwarder")
        self._thread.start()
        logger.info(
            "[SINK] Forwarder started prefix=%r extra_labels=%s",
            self._prefix, self._extra_labels,
        )

    def stop(self, drain: bool = True) -> None:
        """Detiene el loop. Con drain=True entrega lo que quede en la cola."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

        if drain:
            while True:
                metric = self._queue.get(timeout=0)
                if metric is None:
                    break
                self.forward(metric)

        logger.info("[SINK] Forwarder stopped. %s", self.metrics)

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            metric = self._queue.get(timeout=POLL_TIMEOUT)
            if metric is None:
                continue
            self.forward(metric)

    @property
    def metrics(self) -> dict:
        with self._lock:
            return {
                "forwarded": self._forwarded,
                "failed": self._failed,
                "queue": self._queue.get_stats(),
            }
