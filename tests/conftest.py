"""Fixtures compartidas."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from esphome_bridge.core.backpressure import BackpressureQueue
from esphome_bridge.core.backpressure_config import BackpressureConfig
from esphome_bridge.core.domain import DiscoveryAnnouncement, Metric
from esphome_bridge.core.registry import SensorRegistry
from esphome_bridge.errors import SinkWriteError
from esphome_bridge.sensors import SensorFactory

FIXED_TS = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def discovery_dict(**overrides: Any) -> Dict[str, Any]:
    """Anuncio tal como lo publica ESPHome."""
    data = {
        "dev_cla": "temperature",
        "unit_of_meas": "°C",
        "stat_cla": "measurement",
        "name": "Living Temperature",
        "stat_t": "livingroom/sensor/living_temperature/state",
        "avty_t": "livingroom/status",
        "uniq_id": "livingroomsensorliving_temperature",
        "dev": {
            "ids": "a0b1c2d3e4f5",
            "name": "livingroom",
            "sw": "esphome v2024.6.1",
            "mdl": "esp32dev",
            "mf": "espressif",
            "cns": [["mac", "a0b1c2d3e4f5"]],
        },
    }
    data.update(overrides)
    return data


def discovery_payload(**overrides: Any) -> bytes:
    return json.dumps(discovery_dict(**overrides)).encode("utf-8")


def announcement(**overrides: Any) -> DiscoveryAnnouncement:
    return DiscoveryAnnouncement.model_validate(discovery_dict(**overrides))


class FakeWriter:
    """MetricWriter en memoria."""

    def __init__(self, fail_names: tuple = ()):
        self.metrics: List[Metric] = []
        self.fail_names = fail_names
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True

    def write_metric(self, metric: Metric) -> None:
        if metric.name in self.fail_names:
            raise SinkWriteError(f"rejected {metric.name}")
        self.metrics.append(metric)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def metric_queue() -> BackpressureQueue[Metric]:
    return BackpressureQueue(BackpressureConfig(max_queue_size=128, put_timeout=1.0))


@pytest.fixture
def tiny_queue() -> BackpressureQueue[Metric]:
    """Cola de capacidad 1 con timeout corto para probar backpressure."""
    return BackpressureQueue(BackpressureConfig(max_queue_size=1, put_timeout=0.05))


@pytest.fixture
def registry() -> SensorRegistry:
    return SensorRegistry()


@pytest.fixture
def factory(metric_queue) -> SensorFactory:
    return SensorFactory(metric_queue)


@pytest.fixture
def fake_writer() -> FakeWriter:
    return FakeWriter()
