"""ESPHome MQTT discovery → Prometheus bridge."""

__version__ = "0.1.0"
