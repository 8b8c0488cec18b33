"""Configuración y estadísticas de la cola de métricas."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class BackpressureConfig:
    """Configuración de backpressure."""
    max_queue_size: int = 128
    put_timeout: float = 1.0  # segundos que espera un productor con la cola llena

    @classmethod
    def from_env(cls) -> "BackpressureConfig":
        return cls(
            max_queue_size=int(os.getenv("METRIC_QUEUE_SIZE", "128")),
            put_timeout=float(os.getenv("METRIC_QUEUE_TIMEOUT", "1.0")),
        )


@dataclass
class BackpressureStats:
    """Estadísticas de backpressure."""
    enqueued: int = 0
    dequeued: int = 0
    dropped: int = 0
    current_size: int = 0
    max_size: int = 0
