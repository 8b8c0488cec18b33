"""Procesador de anuncios de discovery.

Parsea el anuncio, elige el handler por device class y lo instala en el
registro. Fire-and-forget: nunca propaga errores al callback de MQTT.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.domain import parse_announcement
from ..core.registry import SensorRegistry
from ..errors import DecodeError, UnknownDeviceClass
from ..sensors import SensorFactory, SensorHandler
from .receiver_stats import ReceiverStats
from .topics import IGNORE_SENTINEL, TopicMatcher

logger = logging.getLogger(__name__)


class DiscoveryProcessor:
    """Consume anuncios y mantiene el registro al día."""

    def __init__(
        self,
        registry: SensorRegistry,
        factory: SensorFactory,
        matcher: Optional[TopicMatcher] = None,
        stats: Optional[ReceiverStats] = None,
        debug: bool = False,
    ):
        self._registry = registry
        self._factory = factory
        self._matcher = matcher or TopicMatcher()
        self._stats = stats or ReceiverStats()
        self._debug = debug

    def on_discovery(self, topic: str, payload: bytes) -> Optional[SensorHandler]:
        """Procesa un anuncio.

        Returns:
            El handler instalado, o None si el anuncio se descartó
        """
        if not self._matcher.is_discovery(topic):
            return None

        try:
            announcement = parse_announcement(topic, payload)
        except DecodeError as e:
            logger.warning("[DISCOVERY] %s: %s", e, payload[:512])
            self._stats.incr("failed")
            return None

        if self._debug:
            logger.debug("[DISCOVERY] received %s: %r", topic, announcement)

        if announcement.device_name == IGNORE_SENTINEL:
            logger.info("[DISCOVERY] ignoring %s", topic)
            return None

        if not announcement.state_topic:
            # entidad sin estado (botones, switches...), no es un sensor
            return None

        if not announcement.device_class:
            return None

        try:
            handler = self._factory.create(announcement)
        except UnknownDeviceClass as e:
            logger.info("[DISCOVERY] [%s] %s", topic, e)
            return None

        self._registry.install(announcement.state_topic, handler)
        self._stats.incr("installed")
        logger.info(
            "[DISCOVERY] adding %s sensor under %s",
            announcement.device_class, announcement.state_topic,
        )
        return handler
