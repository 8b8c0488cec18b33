"""Statistics for MQTT receiver."""

from __future__ import annotations

import threading


class ReceiverStats:
    """Estadísticas del receptor MQTT."""

    def __init__(self):
        self._lock = threading.Lock()
        self.received = 0
        self.discovery = 0
        self.installed = 0
        self.state = 0
        self.dispatched = 0
        self.unhandled = 0
        self.failed = 0
        self.last_message_at: float = 0

    def incr(self, field: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, field, getattr(self, field) + amount)

    def __str__(self) -> str:
        return (
            f"Stats: received={self.received} discovery={self.discovery} "
            f"installed={self.installed} state={self.state} dispatched={self.dispatched} "
            f"unhandled={self.unhandled} failed={self.failed}"
        )

    def to_dict(self) -> dict:
        """Convert stats to dictionary."""
        with self._lock:
            return {
                "received": self.received,
                "discovery": self.discovery,
                "installed": self.installed,
                "state": self.state,
                "dispatched": self.dispatched,
                "unhandled": self.unhandled,
                "failed": self.failed,
                "last_message_at": self.last_message_at,
            }
