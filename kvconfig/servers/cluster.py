"""
Cluster Configuration Module

Parameters for sharded deployments: a server cluster, and a managed-cache
replication group. Both are described by a list of seed node addresses;
the rest of the topology is discovered by scanning the seeds.
"""

from dataclasses import dataclass, field
from typing import List

from .base import BaseMasterSlaveConfig, parse_address


class NodeAddressesMixin:
    """Builder shared by configs that hold a list of seed node addresses."""

    node_addresses: List[str]

    def addresses(self) -> list:
        return list(self.node_addresses)

    def add_node_address(self, *addresses: str):
        """
        Validate and add one or more seed node addresses.

        Duplicates are ignored so that repeated calls are harmless.

        Returns:
            This config, for chaining
        """
        for address in addresses:
            parse_address(address)
        for address in addresses:
            if address not in self.node_addresses:
                self.node_addresses.append(address)
        return self


@dataclass
class ClusterServersConfig(NodeAddressesMixin, BaseMasterSlaveConfig):
    """
    Parameters for a clustered set.

    Attributes:
        node_addresses: Seed node addresses
        scan_interval: Interval between cluster topology scans
    """

    node_addresses: List[str] = field(default_factory=list)
    scan_interval: int = 1000


@dataclass
class ElasticacheServersConfig(NodeAddressesMixin, BaseMasterSlaveConfig):
    """
    Parameters for a managed-cache replication group.

    Attributes:
        node_addresses: Node addresses of the replication group
        scan_interval: Interval between replication group scans
        database: Database index selected on connect
    """

    node_addresses: List[str] = field(default_factory=list)
    scan_interval: int = 1000
    database: int = 0
