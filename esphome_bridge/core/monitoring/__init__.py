from .liveness import LivenessWatchdog

__all__ = ["LivenessWatchdog"]
