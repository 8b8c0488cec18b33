"""Message handling: punto de entrada único (topic, payload) del broker.

Cada invocación es independiente; no se asume en qué thread llega.

Topic routing:
- <prefix>/…/config      → DiscoveryProcessor
- +/sensor/+/state        → StateDispatcher
- cualquier otro topic    → ignorado
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from ..core.domain import Metric
from ..core.registry import SensorRegistry
from ..errors import ParseError, QueueTimeoutError
from .discovery_processor import DiscoveryProcessor
from .receiver_stats import ReceiverStats
from .topics import TopicKind, TopicMatcher

logger = logging.getLogger(__name__)


class StateDispatcher:
    """Enruta state updates al handler registrado para el topic."""

    def __init__(
        self,
        registry: SensorRegistry,
        stats: Optional[ReceiverStats] = None,
        debug: bool = False,
    ):
        self._registry = registry
        self._stats = stats or ReceiverStats()
        self._debug = debug

    def dispatch(self, topic: str, payload: bytes) -> Optional[Metric]:
        """Procesa un state update.

        El lookup es la única sección bajo lock; el handler corre fuera de él
        para que un sensor lento no bloquee discovery ni otros dispatches.

        Returns:
            La métrica encolada, o None si el mensaje se descartó
        """
        handler = self._registry.lookup(topic)
        if handler is None:
            logger.debug("[DISPATCH] unhandled sensor: %s: %r", topic, payload[:64])
            self._stats.incr("unhandled")
            return None

        if self._debug:
            logger.debug("[DISPATCH] sensor %s: %r", topic, payload)

        try:
            metric = handler.process_message(payload)
        except ParseError as e:
            logger.warning("[DISPATCH] could not process message %s: %s", topic, e)
            self._stats.incr("failed")
            return None
        except QueueTimeoutError as e:
            logger.warning("[DISPATCH] dropped metric from %s: %s", topic, e)
            self._stats.incr("failed")
            return None

        self._stats.incr("dispatched")
        return metric


class MessageRouter:
    """Clasifica cada mensaje y lo entrega a discovery o dispatch."""

    def __init__(
        self,
        matcher: TopicMatcher,
        discovery: DiscoveryProcessor,
        dispatcher: StateDispatcher,
        stats: Optional[ReceiverStats] = None,
    ):
        self._matcher = matcher
        self._discovery = discovery
        self._dispatcher = dispatcher
        self._stats = stats or ReceiverStats()

    def handle_message(self, topic: str, payload: bytes) -> None:
        """Procesa un mensaje MQTT recibido. Nunca propaga excepciones."""
        self._stats.incr("received")
        self._stats.last_message_at = time.time()

        try:
            kind = self._matcher.classify(topic)
            if kind is TopicKind.DISCOVERY:
                self._stats.incr("discovery")
                self._discovery.on_discovery(topic, payload)
            elif kind is TopicKind.STATE:
                self._stats.incr("state")
                self._dispatcher.dispatch(topic, payload)
        except Exception as e:
            # el thread de red de paho tiene que sobrevivir
            logger.exception("[MQTT] Processing error on %s: %s", topic, e)
            self._stats.incr("failed")

        if self._stats.received % 1000 == 0:
            logger.info("[MQTT] %s", self._stats)
