"""Registro topic → SensorHandler.

Fuente única de verdad para "¿conozco este topic y cómo interpreto sus
payloads?". El lock cubre sólo el lookup o la mutación del dict, nunca el
procesamiento del mensaje.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Dict, Iterator, Optional

if TYPE_CHECKING:
    from ..sensors.base import SensorHandler

logger = logging.getLogger(__name__)


class SensorRegistry:
    """Mapa concurrente state topic → handler. Último discovery gana."""

    def __init__(self):
        self._handlers: Dict[str, "SensorHandler"] = {}
        self._lock = threading.Lock()

    def install(self, topic: str, handler: "SensorHandler") -> Optional["SensorHandler"]:
        """Instala el handler, reemplazando el anterior si existe.

        Returns:
            El handler reemplazado o None
        """
        with self._lock:
            previous = self._handlers.get(topic)
            self._handlers[topic] = handler
        if previous is not None:
            logger.debug("[REGISTRY] replaced %r under %s", previous, topic)
        return previous

    def lookup(self, topic: str) -> Optional["SensorHandler"]:
        with self._lock:
            return self._handlers.get(topic)

    def snapshot(self) -> Dict[str, "SensorHandler"]:
        """Copia del mapa en este instante."""
        with self._lock:
            return dict(self._handlers)

    def __contains__(self, topic: object) -> bool:
        with self._lock:
            return topic in self._handlers

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())
