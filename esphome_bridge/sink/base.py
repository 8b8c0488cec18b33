"""Contrato del sink de series temporales.

El sink es dueño de su política de batching, flush y reintentos; el bridge
sólo le entrega una métrica por llamada.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..core.domain import Metric


@runtime_checkable
class MetricWriter(Protocol):
    """Interfaz mínima de un sink de métricas."""

    def start(self) -> None:
        """Arranca los threads de flush, si los hay."""
        ...

    def write_metric(self, metric: Metric) -> None:
        """Acepta una métrica con nombre, labels, valor y timestamp UTC.

        Raises:
            SinkWriteError: el sink rechazó la métrica
        """
        ...

    def flush(self) -> None:
        """Fuerza el envío de lo pendiente."""
        ...

    def close(self) -> None:
        """Envía lo pendiente y libera recursos."""
        ...
