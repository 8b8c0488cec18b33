"""Handlers de sensores y conversión de unidades."""

from .base import SensorHandler, parse_reading
from .factory import HANDLERS, SensorFactory
from .handlers import (
    CO2Sensor,
    CurrentSensor,
    HumiditySensor,
    ParticulateSensor,
    PressureSensor,
    SignalStrengthSensor,
    TemperatureSensor,
    VoltageSensor,
)

__all__ = [
    "SensorHandler",
    "SensorFactory",
    "HANDLERS",
    "parse_reading",
    "TemperatureSensor",
    "PressureSensor",
    "HumiditySensor",
    "SignalStrengthSensor",
    "VoltageSensor",
    "CurrentSensor",
    "CO2Sensor",
    "ParticulateSensor",
]
