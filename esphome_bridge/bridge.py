"""Composición del bridge: receptor MQTT → registro → cola → sink.

El registro y la cola se crean aquí y se pasan por referencia; no hay estado
global a nivel de módulo.
"""

from __future__ import annotations

import logging
from typing import Optional

from common.config import Settings

from .core.backpressure import BackpressureQueue
from .core.backpressure_config import BackpressureConfig
from .core.domain import Metric
from .core.monitoring import LivenessWatchdog
from .core.registry import SensorRegistry
from .mqtt import (
    DiscoveryProcessor,
    MessageRouter,
    MQTTReceiver,
    ReceiverStats,
    StateDispatcher,
    TopicMatcher,
    parse_broker_url,
)
from .sensors import SensorFactory
from .sink import MetricWriter, PrometheusImportWriter, SinkForwarder

logger = logging.getLogger(__name__)


class Bridge:
    """Dueño de todos los componentes y de su ciclo de vida."""

    def __init__(self, settings: Settings, writer: Optional[MetricWriter] = None):
        self.settings = settings
        self.stats = ReceiverStats()
        self.registry = SensorRegistry()
        self.queue: BackpressureQueue[Metric] = BackpressureQueue(
            BackpressureConfig(
                max_queue_size=settings.metric_queue_size,
                put_timeout=settings.metric_queue_timeout,
            )
        )
        self.matcher = TopicMatcher(settings.discovery_prefix)

        factory = SensorFactory(self.queue, send_timeout=settings.metric_queue_timeout)
        self.discovery = DiscoveryProcessor(
            self.registry, factory, self.matcher, self.stats, debug=settings.debug,
        )
        self.dispatcher = StateDispatcher(self.registry, self.stats, debug=settings.debug)
        self.router = MessageRouter(self.matcher, self.discovery, self.dispatcher, self.stats)

        self.writer = writer or PrometheusImportWriter(
            settings.prometheus_write_url,
            max_batch_length=settings.sink_max_batch_length,
            max_batch_duration=settings.sink_max_batch_duration,
        )
        self.forwarder = SinkForwarder(
            self.queue,
            self.writer,
            prefix=settings.prometheus_prefix,
            extra_labels=settings.extra_labels,
        )
        self.receiver = MQTTReceiver(
            parse_broker_url(settings.mqtt_addr),
            on_message=self.router.handle_message,
            matcher=self.matcher,
            stats=self.stats,
        )
        self.watchdog = LivenessWatchdog(
            lambda: self.receiver.is_connected,
            interval=settings.liveness_interval,
            threshold=settings.liveness_threshold,
        )

    def start(self) -> None:
        # consumidores primero: los mensajes retenidos llegan apenas hay suscripción
        self.writer.start()
        self.forwarder.start()
        self.receiver.start()
        self.watchdog.start()

    def stop(self) -> None:
        self.watchdog.stop()
        self.receiver.stop()
        self.forwarder.stop(drain=True)
        self.writer.close()
        logger.info("Bridge stopped. sensors=%d %s", len(self.registry), self.stats)
