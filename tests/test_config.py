"""Tests de configuración (entorno, .env y overrides).

Ejecutar:
    pytest tests/test_config.py -v
"""

import socket

import pytest

from common.config import Settings, get_settings, parse_extra_labels

ENV_VARS = (
    "MQTT_ADDR",
    "PROMETHEUS_WRITE_URL",
    "PROMETHEUS_PREFIX",
    "EXTRA_LABELS",
    "DISCOVERY_PREFIX",
    "METRIC_QUEUE_SIZE",
    "METRIC_QUEUE_TIMEOUT",
    "SINK_MAX_BATCH_LENGTH",
    "SINK_MAX_BATCH_DURATION",
    "LIVENESS_INTERVAL",
    "LIVENESS_THRESHOLD",
    "DEBUG",
    "BRIDGE_ENV_FILE",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # setenv antes de delenv: monkeypatch también deshace lo que cargue dotenv
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return tmp_path / "missing.env"


class TestParseExtraLabels:

    def test_pairs(self):
        assert parse_extra_labels("host=pi, room = kitchen") == {"host": "pi", "room": "kitchen"}

    def test_empty_entries_skipped(self):
        assert parse_extra_labels("") == {}
        assert parse_extra_labels("a=1,,") == {"a": "1"}

    def test_value_may_contain_equals(self):
        assert parse_extra_labels("q=a=b") == {"q": "a=b"}

    @pytest.mark.parametrize("raw", ["novalue", "=x", "a=1,b"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_extra_labels(raw)


class TestGetSettings:

    def test_defaults(self, clean_env):
        settings = get_settings(env_file=str(clean_env))

        assert settings.mqtt_addr == ""
        assert settings.prometheus_prefix == ""
        assert settings.discovery_prefix == "homeassistant"
        assert settings.extra_labels == {"host": socket.gethostname()}
        assert settings.metric_queue_size == 128
        assert settings.metric_queue_timeout == 1.0
        assert settings.sink_max_batch_length == 10
        assert settings.sink_max_batch_duration == 1.0
        assert settings.liveness_interval == 30.0
        assert settings.liveness_threshold == 10
        assert settings.debug is False

    def test_from_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("MQTT_ADDR", "tcp://broker:1883")
        monkeypatch.setenv("PROMETHEUS_PREFIX", "esphome_")
        monkeypatch.setenv("EXTRA_LABELS", "site=home")
        monkeypatch.setenv("DEBUG", "true")

        settings = get_settings(env_file=str(clean_env))

        assert settings.mqtt_addr == "tcp://broker:1883"
        assert settings.prometheus_prefix == "esphome_"
        assert settings.extra_labels == {"site": "home"}
        assert settings.debug is True

    def test_empty_extra_labels_disables_host(self, clean_env, monkeypatch):
        monkeypatch.setenv("EXTRA_LABELS", "")
        assert get_settings(env_file=str(clean_env)).extra_labels == {}

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / "bridge.env"
        env_file.write_text(
            "MQTT_ADDR=tcp://from-file:1883\n"
            "PROMETHEUS_WRITE_URL=http://vm:8428/api/v1/import/prometheus\n"
        )

        settings = get_settings(env_file=str(env_file))

        assert settings.mqtt_addr == "tcp://from-file:1883"
        assert settings.prometheus_write_url.endswith("/import/prometheus")

    def test_real_environment_wins_over_env_file(self, clean_env, monkeypatch, tmp_path):
        env_file = tmp_path / "bridge.env"
        env_file.write_text("MQTT_ADDR=tcp://from-file:1883\n")
        monkeypatch.setenv("MQTT_ADDR", "tcp://from-env:1883")

        assert get_settings(env_file=str(env_file)).mqtt_addr == "tcp://from-env:1883"

    def test_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv("PROMETHEUS_PREFIX", "env_")

        settings = get_settings(
            env_file=str(clean_env), prometheus_prefix="cli_", mqtt_addr=None,
        )

        assert settings.prometheus_prefix == "cli_"
        assert settings.mqtt_addr == ""

    def test_settings_are_frozen(self):
        settings = Settings(mqtt_addr="a", prometheus_write_url="b")
        with pytest.raises(AttributeError):
            settings.mqtt_addr = "c"
