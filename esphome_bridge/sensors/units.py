"""Conversión de unidades a la unidad canónica de cada tipo de sensor.

Funciones puras. La selección se hace una vez al construir el handler, no por
mensaje. Unidades desconocidas caen en identidad: ESPHome no distingue
"unidad omitida" de "unidad no reconocida".
"""

from __future__ import annotations

import math
from typing import Callable, Dict

Conversion = Callable[[float], float]

KELVIN_OFFSET = 273.15

# micro: "u", micro sign U+00B5, greek mu U+03BC
_MICRO_PREFIXES = ("u", "µ", "μ")


def identity(value: float) -> float:
    return value


def round_half_away(value: float, digits: int = 1) -> float:
    """Redondeo "half away from zero"; round() de Python es bancario."""
    scale = 10 ** digits
    return math.copysign(math.floor(abs(value) * scale + 0.5), value) / scale


def kelvin_to_celsius(kelvin: float) -> float:
    return kelvin - KELVIN_OFFSET


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    return round_half_away((fahrenheit - 32.0) * (5.0 / 9.0), 1)


def temperature_conversion(unit: str) -> Conversion:
    """Conversión a °C. "K" tiene prioridad sobre "F"."""
    upper = unit.upper()
    if "K" in upper:
        return kelvin_to_celsius
    if "F" in upper:
        return fahrenheit_to_celsius
    return identity


def _milli(value: float) -> float:
    return value / 1000


def _micro(value: float) -> float:
    return value / (1000 * 1000)


def _kilo(value: float) -> float:
    return value * 1000


def si_prefix_table(base: str) -> Dict[str, Conversion]:
    """Tabla unidad (lower-case) → conversión a la unidad base."""
    table: Dict[str, Conversion] = {
        base: identity,
        "m" + base: _milli,
        "k" + base: _kilo,
    }
    for micro in _MICRO_PREFIXES:
        table[micro + base] = _micro
    return table


_VOLTAGE_TABLE = si_prefix_table("v")
_CURRENT_TABLE = si_prefix_table("a")


def voltage_conversion(unit: str) -> Conversion:
    """Conversión a voltios (V, mV, uV/µV, kV)."""
    return _VOLTAGE_TABLE.get(unit.strip().lower(), identity)


def current_conversion(unit: str) -> Conversion:
    """Conversión a amperios (A, mA, uA/µA, kA)."""
    return _CURRENT_TABLE.get(unit.strip().lower(), identity)


def is_hpa(unit: str) -> bool:
    return "hpa" in unit.lower()


def normalize_signal_unit(unit: str) -> str:
    """Normaliza el casing de dBm/dB; cualquier otra unidad queda igual."""
    lower = unit.lower()
    if lower == "dbm":
        return "dBm"
    if lower == "db":
        return "dB"
    return unit
