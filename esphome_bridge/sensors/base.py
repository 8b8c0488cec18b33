"""SensorHandler - contrato común de todos los sensores.

Un handler por state topic descubierto. Inmutable tras la construcción; se
destruye sólo al ser reemplazado por un nuevo discovery en el mismo topic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from ..core.backpressure import BackpressureQueue
from ..core.domain import DiscoveryAnnouncement, Metric
from ..errors import ParseError
from .units import Conversion, identity

DEFAULT_SEND_TIMEOUT = 1.0


def parse_reading(payload: bytes) -> float:
    """Parsea el payload de estado (un decimal UTF-8 como payload completo).

    Raises:
        ParseError: payload no decodificable o no numérico
    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(payload, str(e)) from e

    # float() acepta "1_000" y espacios alrededor; un payload de estado no
    if "_" in text or text != text.strip():
        raise ParseError(payload, "invalid syntax")

    try:
        return float(text)
    except ValueError as e:
        raise ParseError(payload, str(e)) from e


class SensorHandler(ABC):
    """Handler de un sensor: payload crudo → Metric normalizada en la cola."""

    metric_name: str = ""

    def __init__(
        self,
        announcement: DiscoveryAnnouncement,
        queue: BackpressureQueue[Metric],
        send_timeout: float = DEFAULT_SEND_TIMEOUT,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.device = announcement.device_name
        self.sensor = announcement.name
        self._queue = queue
        self._send_timeout = send_timeout
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._conversion: Conversion = self._select_conversion(announcement.unit)

    @abstractmethod
    def _select_conversion(self, unit: str) -> Conversion:
        """Elige la conversión para la unidad declarada (una sola vez)."""

    def labels(self) -> Dict[str, str]:
        return {"device": self.device, "sensor": self.sensor}

    def convert(self, value: float) -> float:
        return self._conversion(value)

    def process_message(self, payload: bytes) -> Metric:
        """Convierte el payload y lo entrega a la cola compartida.

        Raises:
            ParseError: payload no numérico (no se intenta encolar)
            QueueTimeoutError: la cola siguió llena; la métrica se descarta
        """
        value = parse_reading(payload)
        metric = Metric(
            name=self.metric_name,
            value=self.convert(value),
            timestamp=self._clock(),
            labels=self.labels(),
        )
        self._queue.put(metric, timeout=self._send_timeout)
        return metric

    def __repr__(self) -> str:
        return f"{type(self).__name__}(device={self.device!r}, sensor={self.sensor!r})"


class IdentitySensorHandler(SensorHandler):
    """Handler cuya unidad declarada ya es la canónica."""

    def _select_conversion(self, unit: str) -> Conversion:
        return identity
