"""Tests de composición del bridge y del CLI.

Ejecutar:
    pytest tests/test_bridge.py -v
"""

import time
from unittest.mock import patch

import pytest

from common.config import Settings
from conftest import FakeWriter, discovery_payload
from esphome_bridge.bridge import Bridge
from esphome_bridge.cli import build_parser, main

CONFIG_TOPIC = "homeassistant/sensor/livingroom/living_temperature/config"
STATE_TOPIC = "livingroom/sensor/living_temperature/state"


def make_settings(**overrides):
    values = dict(
        mqtt_addr="tcp://broker.lan:1883",
        prometheus_write_url="http://vm:8428/api/v1/import/prometheus",
        prometheus_prefix="esphome_",
        extra_labels={"host": "pi"},
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def bridge():
    with patch("esphome_bridge.mqtt.receiver.mqtt.Client"):
        writer = FakeWriter()
        b = Bridge(make_settings(), writer=writer)
        yield b


class TestBridge:

    def test_message_flow_to_writer(self, bridge):
        bridge.router.handle_message(CONFIG_TOPIC, discovery_payload())
        bridge.router.handle_message(STATE_TOPIC, b"21.5")

        bridge.forwarder.stop(drain=True)

        [metric] = bridge.writer.metrics
        assert metric.name == "esphome_temperature"
        assert metric.value == 21.5
        assert metric.labels == {
            "device": "livingroom", "sensor": "Living Temperature", "host": "pi",
        }

    def test_lifecycle(self, bridge):
        bridge.receiver.start = lambda: True
        bridge.start()
        try:
            assert bridge.writer.started
            bridge.router.handle_message(CONFIG_TOPIC, discovery_payload())
            bridge.router.handle_message(STATE_TOPIC, b"20")

            deadline = time.monotonic() + 2.0
            while not bridge.writer.metrics and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            bridge.stop()

        assert len(bridge.writer.metrics) == 1
        assert bridge.writer.closed
        assert len(bridge.registry) == 1

    def test_watchdog_follows_receiver(self, bridge):
        assert bridge.receiver.is_connected is False
        bridge.watchdog.check()
        assert bridge.watchdog.score == 2


class TestCli:

    def test_parser_flags(self):
        args = build_parser().parse_args([
            "-d", "--mqtt-addr", "tcp://b:1883", "--extra-labels", "host=pi,room=x",
        ])
        assert args.debug is True
        assert args.mqtt_addr == "tcp://b:1883"
        assert args.extra_labels == {"host": "pi", "room": "x"}

    def test_debug_unset_is_none(self):
        assert build_parser().parse_args([]).debug is None

    def test_invalid_extra_labels(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--extra-labels", "nokey"])

    def test_missing_mqtt_addr(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MQTT_ADDR", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            main(["-c", str(tmp_path / "none.env"), "--prometheus-write-url", "http://vm"])
        assert exc_info.value.code == 2

    def test_missing_write_url(self, monkeypatch, tmp_path):
        monkeypatch.delenv("PROMETHEUS_WRITE_URL", raising=False)
        with pytest.raises(SystemExit):
            main(["-c", str(tmp_path / "none.env"), "--mqtt-addr", "tcp://b:1883"])

    @pytest.mark.parametrize("name,value", [
        ("EXTRA_LABELS", "nokey"),
        ("METRIC_QUEUE_SIZE", "many"),
    ])
    def test_invalid_environment_is_a_usage_error(self, monkeypatch, tmp_path, capsys, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(SystemExit) as exc_info:
            main(["-c", str(tmp_path / "none.env"),
                  "--mqtt-addr", "tcp://b:1883", "--prometheus-write-url", "http://vm"])
        assert exc_info.value.code == 2
        assert "invalid configuration" in capsys.readouterr().err
