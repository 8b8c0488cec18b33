"""Taxonomía de errores del bridge.

Todos los errores por-mensaje se recuperan localmente (log + drop). Sólo
ConnectionLivenessExhausted es fatal.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base de todos los errores del bridge."""


class DecodeError(BridgeError):
    """Payload de discovery que no es un anuncio JSON válido."""

    def __init__(self, topic: str, reason: str):
        self.topic = topic
        self.reason = reason
        super().__init__(f"could not decode discovery {topic}: {reason}")


class UnknownDeviceClass(BridgeError):
    """Device class sin handler registrado. Política, no fallo."""

    def __init__(self, device_class: str):
        self.device_class = device_class
        super().__init__(f"unknown device class [{device_class}]")


class ParseError(BridgeError):
    """Payload de estado que no es un número decimal."""

    def __init__(self, payload: bytes, reason: str):
        self.payload = payload
        self.reason = reason
        super().__init__(f"error parsing[{payload!r}]: {reason}")


class QueueTimeoutError(BridgeError):
    """La cola de métricas siguió llena durante todo el timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"timeout on send queue after {timeout:.1f}s")


class SinkWriteError(BridgeError):
    """El sink externo rechazó una métrica."""


class ConnectionLivenessExhausted(BridgeError):
    """El broker estuvo desconectado demasiado tiempo."""

    def __init__(self, score: int, threshold: int):
        self.score = score
        self.threshold = threshold
        super().__init__(
            f"not connected for a while (score={score} > threshold={threshold}), exiting"
        )
