"""Primary/replica set configuration."""

from dataclasses import dataclass, field
from typing import Optional, Set

from .base import BaseMasterSlaveConfig, parse_address


@dataclass
class MasterSlaveServersConfig(BaseMasterSlaveConfig):
    """
    Parameters for a fixed primary with a set of replicas.

    Attributes:
        master_address: Address of the primary
        slave_addresses: Addresses of the replicas
        database: Database index selected on connect
    """

    master_address: Optional[str] = None
    slave_addresses: Set[str] = field(default_factory=set)
    database: int = 0

    def addresses(self) -> list:
        found = [self.master_address] if self.master_address is not None else []
        return found + sorted(self.slave_addresses)

    def set_master_address(self, address: str) -> "MasterSlaveServersConfig":
        """Validate and set the primary address."""
        parse_address(address)
        self.master_address = address
        return self

    def add_slave_address(self, *addresses: str) -> "MasterSlaveServersConfig":
        """Validate and add one or more replica addresses."""
        for address in addresses:
            parse_address(address)
        self.slave_addresses.update(addresses)
        return self
