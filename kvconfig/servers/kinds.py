"""
Topology Kinds

Enumerates the deployment topologies a client can be configured for and
maps each to its server config class. The enum value is the key under
which the topology's parameters are persisted.
"""

from enum import Enum
from typing import Dict, Type

from .base import BaseConfig
from .cluster import ClusterServersConfig, ElasticacheServersConfig
from .master_slave import MasterSlaveServersConfig
from .sentinel import SentinelServersConfig
from .single import SingleServerConfig


class TopologyKind(Enum):
    """Supported deployment topologies."""
    SINGLE = "singleServerConfig"
    CLUSTER = "clusterServersConfig"
    SENTINEL = "sentinelServersConfig"
    MASTER_SLAVE = "masterSlaveServersConfig"
    ELASTICACHE = "elasticacheServersConfig"

    @property
    def key(self) -> str:
        """Document key holding this topology's parameters."""
        return self.value

    @property
    def config_class(self) -> Type[BaseConfig]:
        """Server config class for this topology."""
        return SERVER_CONFIG_TYPES[self]

    @property
    def label(self) -> str:
        """Human readable name used in error messages."""
        return TOPOLOGY_LABELS[self]


SERVER_CONFIG_TYPES: Dict[TopologyKind, Type[BaseConfig]] = {
    TopologyKind.SINGLE: SingleServerConfig,
    TopologyKind.CLUSTER: ClusterServersConfig,
    TopologyKind.SENTINEL: SentinelServersConfig,
    TopologyKind.MASTER_SLAVE: MasterSlaveServersConfig,
    TopologyKind.ELASTICACHE: ElasticacheServersConfig,
}

TOPOLOGY_LABELS: Dict[TopologyKind, str] = {
    TopologyKind.SINGLE: "single server",
    TopologyKind.CLUSTER: "cluster servers",
    TopologyKind.SENTINEL: "sentinel servers",
    TopologyKind.MASTER_SLAVE: "master/slave servers",
    TopologyKind.ELASTICACHE: "elasticache replication group servers",
}
