"""Factory de handlers por device class."""

from __future__ import annotations

from functools import partial
from typing import Callable, Dict, Optional

from ..core.backpressure import BackpressureQueue
from ..core.domain import DeviceClass, DiscoveryAnnouncement, Metric
from ..errors import UnknownDeviceClass
from .base import DEFAULT_SEND_TIMEOUT, SensorHandler
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

HandlerBuilder = Callable[..., SensorHandler]

HANDLERS: Dict[DeviceClass, HandlerBuilder] = {
    DeviceClass.TEMPERATURE: TemperatureSensor,
    DeviceClass.PRESSURE: PressureSensor,
    DeviceClass.HUMIDITY: HumiditySensor,
    DeviceClass.SIGNAL_STRENGTH: SignalStrengthSensor,
    DeviceClass.VOLTAGE: VoltageSensor,
    DeviceClass.CURRENT: CurrentSensor,
    DeviceClass.CO2: CO2Sensor,
    DeviceClass.PM1: partial(ParticulateSensor, size_class=DeviceClass.PM1),
    DeviceClass.PM25: partial(ParticulateSensor, size_class=DeviceClass.PM25),
    DeviceClass.PM4: partial(ParticulateSensor, size_class=DeviceClass.PM4),
    DeviceClass.PM10: partial(ParticulateSensor, size_class=DeviceClass.PM10),
    DeviceClass.AQI: partial(ParticulateSensor, size_class=DeviceClass.AQI),
}


class SensorFactory:
    """Construye el handler correcto para un anuncio."""

    def __init__(
        self,
        queue: BackpressureQueue[Metric],
        send_timeout: float = DEFAULT_SEND_TIMEOUT,
    ):
        self._queue = queue
        self._send_timeout = send_timeout

    def supports(self, device_class: str) -> bool:
        return DeviceClass.lookup(device_class) in HANDLERS

    def create(self, announcement: DiscoveryAnnouncement) -> SensorHandler:
        """Crea el handler para el device class del anuncio.

        Raises:
            UnknownDeviceClass: device class sin handler
        """
        device_class: Optional[DeviceClass] = DeviceClass.lookup(announcement.device_class)
        builder = HANDLERS.get(device_class) if device_class is not None else None
        if builder is None:
            raise UnknownDeviceClass(announcement.device_class)
        return builder(announcement, self._queue, send_timeout=self._send_timeout)
