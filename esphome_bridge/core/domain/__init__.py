"""Domain layer - Modelos del bridge."""

from .discovery import DeviceClass, DeviceDescriptor, DiscoveryAnnouncement, parse_announcement
from .metric import Metric

__all__ = [
    "DeviceClass",
    "DeviceDescriptor",
    "DiscoveryAnnouncement",
    "Metric",
    "parse_announcement",
]
