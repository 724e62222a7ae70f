"""Configuration module for kv-config."""

from .settings import Settings, settings
from .support import ConfigFormat
from .topology_config import TopologyConfig

__all__ = ["ConfigFormat", "Settings", "TopologyConfig", "settings"]
