"""Clasificación de topics: discovery vs. state update.

Las dos clases no se solapan: discovery lleva prefijo y sufijo fijos; state
usa un patrón de dos wildcards y excluye explícitamente el prefijo de
discovery y cualquier topic con el segmento centinela "ignoreme".
"""

from __future__ import annotations

from enum import Enum

import paho.mqtt.client as mqtt

DEFAULT_DISCOVERY_PREFIX = "homeassistant"
DISCOVERY_SUFFIX = "/config"
STATE_SUBSCRIPTION = "+/sensor/+/state"
IGNORE_SENTINEL = "ignoreme"


class TopicKind(Enum):
    DISCOVERY = "discovery"
    STATE = "state"
    OTHER = "other"


class TopicMatcher:
    """Decide a qué ruta pertenece un topic."""

    def __init__(self, discovery_prefix: str = DEFAULT_DISCOVERY_PREFIX):
        self.discovery_prefix = discovery_prefix.strip("/")

    @property
    def discovery_subscription(self) -> str:
        # el wildcard multinivel tiene que ir al final; "/config" se filtra aparte
        return f"{self.discovery_prefix}/#"

    @property
    def subscriptions(self) -> list[str]:
        return [self.discovery_subscription, STATE_SUBSCRIPTION]

    def _under_discovery_prefix(self, topic: str) -> bool:
        return topic.startswith(self.discovery_prefix + "/")

    def is_discovery(self, topic: str) -> bool:
        return self._under_discovery_prefix(topic) and topic.endswith(DISCOVERY_SUFFIX)

    def is_state(self, topic: str) -> bool:
        if self._under_discovery_prefix(topic):
            return False
        if IGNORE_SENTINEL in topic.split("/")[:-1]:
            return False
        return mqtt.topic_matches_sub(STATE_SUBSCRIPTION, topic)

    def classify(self, topic: str) -> TopicKind:
        if self.is_discovery(topic):
            return TopicKind.DISCOVERY
        if self.is_state(topic):
            return TopicKind.STATE
        return TopicKind.OTHER
