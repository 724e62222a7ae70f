"""
Server configuration module for kv-config.

One attribute bag per deployment topology:
- Standalone server
- Primary/replica set
- Sentinel-monitored set
- Clustered set
- Managed-cache replication group
"""

from .base import BaseConfig, BaseMasterSlaveConfig, ReadMode, SubscriptionMode, parse_address
from .cluster import ClusterServersConfig, ElasticacheServersConfig
from .kinds import TopologyKind
from .master_slave import MasterSlaveServersConfig
from .sentinel import SentinelServersConfig
from .single import SingleServerConfig

__all__ = [
    "TopologyKind",
    "BaseConfig",
    "BaseMasterSlaveConfig",
    "ClusterServersConfig",
    "ElasticacheServersConfig",
    "MasterSlaveServersConfig",
    "ReadMode",
    "SentinelServersConfig",
    "SingleServerConfig",
    "SubscriptionMode",
    "parse_address",
]
