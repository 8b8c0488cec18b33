from __future__ import annotations

import os
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env next to the working directory, same convention as docker-compose.
    return str(Path.cwd() / ".env")


def parse_extra_labels(raw: str) -> Dict[str, str]:
    """Parsea "k1=v1,k2=v2" a un dict.

    Entradas vacías se ignoran; una entrada sin "=" es un error.
    """
    labels: Dict[str, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        if "=" not in item:
            raise ValueError(f"invalid extra label {item!r}, expected key=value")
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"invalid extra label {item!r}, empty key")
        labels[key] = value.strip()
    return labels


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    mqtt_addr: str
    prometheus_write_url: str

    prometheus_prefix: str = ""
    extra_labels: Dict[str, str] = field(default_factory=dict)
    discovery_prefix: str = "homeassistant"

    metric_queue_size: int = 128
    metric_queue_timeout: float = 1.0

    sink_max_batch_length: int = 10
    sink_max_batch_duration: float = 1.0

    liveness_interval: float = 30.0
    liveness_threshold: int = 10

    debug: bool = False


def get_settings(env_file: Optional[str] = None, **overrides) -> Settings:
    """Construye Settings desde el entorno.

    El archivo .env se carga si existe, sin pisar variables ya definidas en el
    entorno real. Los overrides con valor None se ignoran (flags de CLI no
    especificados).
    """
    env_file = env_file or os.getenv("BRIDGE_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    extra_raw = os.getenv("EXTRA_LABELS")
    extra_labels = (
        parse_extra_labels(extra_raw)
        if extra_raw is not None
        else {"host": socket.gethostname()}
    )

    values = dict(
        mqtt_addr=os.getenv("MQTT_ADDR", ""),
        prometheus_write_url=os.getenv("PROMETHEUS_WRITE_URL", ""),
        prometheus_prefix=os.getenv("PROMETHEUS_PREFIX", ""),
        extra_labels=extra_labels,
        discovery_prefix=os.getenv("DISCOVERY_PREFIX", "homeassistant"),
        metric_queue_size=int(os.getenv("METRIC_QUEUE_SIZE", "128")),
        metric_queue_timeout=float(os.getenv("METRIC_QUEUE_TIMEOUT", "1.0")),
        sink_max_batch_length=int(os.getenv("SINK_MAX_BATCH_LENGTH", "10")),
        sink_max_batch_duration=float(os.getenv("SINK_MAX_BATCH_DURATION", "1.0")),
        liveness_interval=float(os.getenv("LIVENESS_INTERVAL", "30")),
        liveness_threshold=int(os.getenv("LIVENESS_THRESHOLD", "10")),
        debug=_env_bool("DEBUG"),
    )
    values.update({k: v for k, v in overrides.items() if v is not None})

    return Settings(**values)
