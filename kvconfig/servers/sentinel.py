"""Sentinel-monitored set configuration."""

from dataclasses import dataclass, field
from typing import List, Optional

from .base import BaseMasterSlaveConfig, parse_address


@dataclass
class SentinelServersConfig(BaseMasterSlaveConfig):
    """
    Parameters for a primary/replica set discovered through sentinels.

    Attributes:
        sentinel_addresses: Addresses of the sentinel processes
        master_name: Name of the monitored primary
        database: Database index selected on connect
        scan_interval: Interval between sentinel topology scans
    """

    sentinel_addresses: List[str] = field(default_factory=list)
    master_name: Optional[str] = None
    database: int = 0
    scan_interval: int = 1000

    def addresses(self) -> list:
        return list(self.sentinel_addresses)

    def add_sentinel_address(self, *addresses: str) -> "SentinelServersConfig":
        """Validate and add one or more sentinel addresses."""
        for address in addresses:
            parse_address(address)
        for address in addresses:
            if address not in self.sentinel_addresses:
                self.sentinel_addresses.append(address)
        return self

    def set_master_name(self, master_name: str) -> "SentinelServersConfig":
        """Set the name of the monitored primary."""
        self.master_name = master_name
        return self
