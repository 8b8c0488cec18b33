"""MQTT: receptor, clasificación de topics, discovery y dispatch.

Estructura modular:
- topics.py: qué topic va a qué ruta
- discovery_processor.py: anuncios → handlers en el registro
- message_handler.py: punto de entrada único y dispatch de state updates
- receiver.py: cliente paho
"""

from .discovery_processor import DiscoveryProcessor
from .message_handler import MessageRouter, StateDispatcher
from .receiver import BrokerAddress, MQTTReceiver, parse_broker_url
from .receiver_stats import ReceiverStats
from .topics import TopicKind, TopicMatcher

__all__ = [
    "BrokerAddress",
    "DiscoveryProcessor",
    "MQTTReceiver",
    "MessageRouter",
    "ReceiverStats",
    "StateDispatcher",
    "TopicKind",
    "TopicMatcher",
    "parse_broker_url",
]
