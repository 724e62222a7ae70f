"""
kv-config: Client Configuration for a Key-Value Store

Describes how a client connects to a key/value store deployed as a
standalone server, a primary/replica set, a sentinel-monitored set, a
cluster, or a managed-cache replication group, and stores that
description as JSON or YAML.
"""

from .config import ConfigFormat, TopologyConfig
from .exceptions import ConfigParseError, KVConfigError, TopologyConflict
from .servers import TopologyKind

__version__ = "1.0.0"

__all__ = [
    "ConfigFormat",
    "ConfigParseError",
    "KVConfigError",
    "TopologyConfig",
    "TopologyConflict",
    "TopologyKind",
]
