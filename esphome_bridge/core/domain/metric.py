"""Metric - unidad que viaja de los handlers al sink."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict


@dataclass(frozen=True)
class Metric:
    """Muestra normalizada lista para el sink.

    La propiedad pasa al consumidor cuando el productor la encola.
    """

    name: str
    value: float
    timestamp: datetime
    labels: Dict[str, str] = field(default_factory=dict)

    def with_name_prefix(self, prefix: str) -> "Metric":
        return Metric(
            name=prefix + self.name,
            value=self.value,
            timestamp=self.timestamp,
            labels=dict(self.labels),
        )

    def with_labels(self, extra: Dict[str, str]) -> "Metric":
        """Copia con labels extra mezcladas. Las extra ganan en colisión."""
        merged = dict(self.labels)
        merged.update(extra)
        return Metric(
            name=self.name,
            value=self.value,
            timestamp=self.timestamp,
            labels=merged,
        )

    @property
    def utc_timestamp(self) -> datetime:
        if self.timestamp.tzinfo is None:
            return self.timestamp.replace(tzinfo=timezone.utc)
        return self.timestamp.astimezone(timezone.utc)
