"""Modelos del anuncio de discovery (formato abreviado de Home Assistant).

Formato esperado (publicado retenido por ESPHome en
homeassistant/sensor/<node>/<object>/config):
{
    "dev_cla": "temperature",
    "unit_of_meas": "°C",
    "stat_cla": "measurement",
    "name": "Living room temperature",
    "stat_t": "livingroom/sensor/temperature/state",
    "avty_t": "livingroom/status",
    "uniq_id": "livingroomsensortemperature",
    "dev": {
        "ids": "a0b1c2d3e4f5",
        "name": "livingroom",
        "sw": "esphome v2024.6.1",
        "mdl": "esp32dev",
        "mf": "espressif",
        "cns": [["mac", "a0b1c2d3e4f5"]]
    }
}
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...errors import DecodeError


class DeviceClass(str, Enum):
    """Device classes con handler.

    https://www.home-assistant.io/integrations/sensor/#device-class
    """

    TEMPERATURE = "temperature"
    PRESSURE = "pressure"
    HUMIDITY = "humidity"
    SIGNAL_STRENGTH = "signal_strength"
    VOLTAGE = "voltage"
    CURRENT = "current"
    CO2 = "carbon_dioxide"
    PM1 = "pm1"
    PM25 = "pm25"
    PM4 = "pm4"
    PM10 = "pm10"
    AQI = "aqi"

    @classmethod
    def lookup(cls, value: str) -> Optional["DeviceClass"]:
        try:
            return cls(value)
        except ValueError:
            return None


class DeviceDescriptor(BaseModel):
    """Dispositivo dueño del sensor. Sólo existe embebido en el anuncio."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ids: Union[str, List[str]] = ""
    name: str = ""
    sw_version: str = Field(default="", alias="sw")
    model: str = Field(default="", alias="mdl")
    manufacturer: str = Field(default="", alias="mf")
    connections: List[List[str]] = Field(default_factory=list, alias="cns")

    @field_validator("ids", "name", "sw_version", "model", "manufacturer", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("connections", mode="before")
    @classmethod
    def _null_as_no_connections(cls, value):
        return [] if value is None else value


class DiscoveryAnnouncement(BaseModel):
    """Anuncio de un sensor. Inmutable una vez parseado."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    device_class: str = Field(default="", alias="dev_cla")
    unit: str = Field(default="", alias="unit_of_meas")
    # https://developers.home-assistant.io/docs/core/entity/sensor/#available-state-classes
    state_class: str = Field(default="", alias="stat_cla")
    name: str = ""
    state_topic: str = Field(default="", alias="stat_t")
    command_topic: str = Field(default="", alias="cmd_t")
    availability_topic: str = Field(default="", alias="avty_t")
    unique_id: str = Field(default="", alias="uniq_id")
    device: DeviceDescriptor = Field(default_factory=DeviceDescriptor, alias="dev")

    # ESPHome publica null en campos opcionales; se leen como ""
    @field_validator(
        "device_class", "unit", "state_class", "name", "state_topic",
        "command_topic", "availability_topic", "unique_id",
        mode="before",
    )
    @classmethod
    def _null_as_empty(cls, value):
        return "" if value is None else value

    @property
    def device_name(self) -> str:
        return self.device.name


def parse_announcement(topic: str, payload: bytes) -> DiscoveryAnnouncement:
    """Decodifica y valida un anuncio.

    Raises:
        DecodeError: JSON inválido, no es un objeto o tipos incorrectos
    """
    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise DecodeError(topic, str(e)) from e

    if not isinstance(data, dict):
        raise DecodeError(topic, f"expected JSON object, got {type(data).__name__}")

    # HA permite "dev": null en anuncios sin dispositivo
    if data.get("dev") is None:
        data.pop("dev", None)

    try:
        return DiscoveryAnnouncement.model_validate(data)
    except ValidationError as e:
        raise DecodeError(topic, f"{e.error_count()} invalid field(s): {e.errors()[0]['loc']}") from e
