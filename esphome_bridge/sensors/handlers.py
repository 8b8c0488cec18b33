"""Variantes de SensorHandler, una por familia de device class."""

from __future__ import annotations

import logging
from typing import Dict

from ..core.domain import DeviceClass
from .base import IdentitySensorHandler, SensorHandler
from .units import (
    Conversion,
    current_conversion,
    identity,
    is_hpa,
    normalize_signal_unit,
    temperature_conversion,
    voltage_conversion,
)

logger = logging.getLogger(__name__)


class TemperatureSensor(SensorHandler):
    """Normaliza a °C (K y °F se convierten)."""

    metric_name = "temperature"

    def _select_conversion(self, unit: str) -> Conversion:
        return temperature_conversion(unit)


class PressureSensor(SensorHandler):
    """Siempre en hPa; otras unidades sólo generan un warning."""

    metric_name = "pressure"

    def _select_conversion(self, unit: str) -> Conversion:
        if not is_hpa(unit):
            logger.warning(
                "[SENSOR] %s/%s unit %r is not hPa, add conversion",
                self.device, self.sensor, unit,
            )
        return identity


class HumiditySensor(IdentitySensorHandler):
    metric_name = "humidity"


class CO2Sensor(IdentitySensorHandler):
    metric_name = "co2"


class VoltageSensor(SensorHandler):
    """Normaliza a V."""

    metric_name = "voltage"

    def _select_conversion(self, unit: str) -> Conversion:
        return voltage_conversion(unit)


class CurrentSensor(SensorHandler):
    """Normaliza a A."""

    metric_name = "current"

    def _select_conversion(self, unit: str) -> Conversion:
        return current_conversion(unit)


class SignalStrengthSensor(IdentitySensorHandler):
    """Sin conversión; la unidad (dBm/dB) viaja como label."""

    metric_name = "signal_strength"

    def _select_conversion(self, unit: str) -> Conversion:
        self.unit = normalize_signal_unit(unit)
        return identity

    def labels(self) -> Dict[str, str]:
        labels = super().labels()
        labels["unit"] = self.unit
        return labels


class ParticulateSensor(IdentitySensorHandler):
    """PM1/PM2.5/PM4/PM10/AQI. La unidad declarada viaja como label."""

    metric_name = "air_quality"

    def __init__(self, announcement, queue, size_class: DeviceClass, **kwargs):
        self.size_class = size_class
        super().__init__(announcement, queue, **kwargs)

    def _select_conversion(self, unit: str) -> Conversion:
        self.unit = unit
        return identity

    def labels(self) -> Dict[str, str]:
        labels = super().labels()
        labels["unit"] = self.unit
        return labels

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(device={self.device!r}, sensor={self.sensor!r}, "
            f"size_class={self.size_class.value!r})"
        )
