"""Watchdog de conexión al broker.

Única acción correctiva del proceso: si el broker sigue desconectado durante
demasiados chequeos, el proceso termina de forma fatal para que el supervisor
(systemd, docker, k8s) lo reinicie. No hay shutdown limpio.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable, Optional

from ...errors import ConnectionLivenessExhausted

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0
DEFAULT_THRESHOLD = 10
FAILURE_WEIGHT = 2  # un chequeo fallido pesa el doble que uno exitoso


def _fatal_exit(code: int) -> None:
    os._exit(code)


class LivenessWatchdog:
    """Chequeo periódico de `is_connected`.

    Desconectado → score += 2; conectado con score > 0 → score -= 1.
    Score > threshold → log CRITICAL y exit(1).
    """

    def __init__(
        self,
        is_connected: Callable[[], bool],
        interval: float = DEFAULT_INTERVAL,
        threshold: int = DEFAULT_THRESHOLD,
        exit_func: Callable[[int], None] = _fatal_exit,
    ):
        self._is_connected = is_connected
        self._interval = interval
        self._threshold = threshold
        self._exit = exit_func

        self._score = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def score(self) -> int:
        return self._score

    def check(self) -> None:
        """Un chequeo.

        Raises:
            ConnectionLivenessExhausted: se superó el umbral
        """
        if not self._is_connected():
            self._score += FAILURE_WEIGHT
            logger.warning(
                "[WATCHDOG] broker disconnected (score=%d/%d)",
                self._score, self._threshold,
            )
        elif self._score > 0:
            self._score -= 1

        if self._score > self._threshold:
            raise ConnectionLivenessExhausted(self._score, self._threshold)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="liveness-watchdog")
        self._thread.start()
        logger.info(
            "[WATCHDOG] Started interval=%.1fs threshold=%d",
            self._interval, self._threshold,
        )

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self.check()
            except ConnectionLivenessExhausted as e:
                logger.critical("[WATCHDOG] %s", e)
                # os._exit no vacía los handlers
                for handler in logging.getLogger().handlers:
                    handler.flush()
                self._exit(1)
                return
