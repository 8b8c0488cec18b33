"""Cola acotada entre los handlers (N productores) y el forwarder (1 consumidor).

Un productor que no puede encolar dentro del timeout descarta la métrica:
espera acotada, sin crecer sin límite y sin bloquear el thread de paho.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Generic, Optional, TypeVar

from ..errors import QueueTimeoutError
from .backpressure_config import BackpressureConfig, BackpressureStats

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackpressureQueue(Generic[T]):
    """FIFO acotada y thread-safe con timeout en put.

    Uso:
        queue = BackpressureQueue[Metric](BackpressureConfig(max_queue_size=128))

        # Productor
        queue.put(metric)            # QueueTimeoutError si sigue llena

        # Consumidor
        metric = queue.get(timeout=1.0)
    """

    def __init__(self, config: Optional[BackpressureConfig] = None):
        self._config = config or BackpressureConfig.from_env()
        if self._config.max_queue_size <= 0:
            raise ValueError("max_queue_size must be positive")

        self._queue: deque[T] = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

        self._stats = BackpressureStats(max_size=self._config.max_queue_size)

        logger.debug(
            "BackpressureQueue initialized: max_size=%d, put_timeout=%.1fs",
            self._config.max_queue_size,
            self._config.put_timeout,
        )

    def put(self, item: T, timeout: Optional[float] = None) -> None:
        """Encola un item esperando como mucho `timeout` segundos.

        Raises:
            QueueTimeoutError: la cola siguió llena durante todo el timeout
        """
        if timeout is None:
            timeout = self._config.put_timeout
        deadline = time.monotonic() + timeout

        with self._not_full:
            while len(self._queue) >= self._config.max_queue_size:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    self._stats.dropped += 1
                    raise QueueTimeoutError(timeout)
                self._not_full.wait(remaining)

            self._queue.append(item)
            self._stats.enqueued += 1
            self._stats.current_size = len(self._queue)
            self._not_empty.notify()

    def get(self, timeout: Optional[float] = None) -> Optional[T]:
        """Obtiene un item.

        Args:
            timeout: Segundos a esperar (None = bloquear indefinidamente)

        Returns:
            Item o None si timeout
        """
        with self._not_empty:
            if timeout is None:
                while not self._queue:
                    self._not_empty.wait()
            elif not self._queue:
                self._not_empty.wait(timeout)

            if not self._queue:
                return None

            item = self._queue.popleft()
            self._stats.dequeued += 1
            self._stats.current_size = len(self._queue)
            self._not_full.notify()
            return item

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._queue)

    @property
    def maxsize(self) -> int:
        return self._config.max_queue_size

    @property
    def is_full(self) -> bool:
        with self._lock:
            return len(self._queue) >= self._config.max_queue_size

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return len(self._queue) == 0

    def get_stats(self) -> dict:
        """Estadísticas de la cola."""
        with self._lock:
            return {
                "enqueued": self._stats.enqueued,
                "dequeued": self._stats.dequeued,
                "dropped": self._stats.dropped,
                "current_size": len(self._queue),
                "max_size": self._config.max_queue_size,
                "utilization_pct": len(self._queue) / self._config.max_queue_size * 100,
            }
