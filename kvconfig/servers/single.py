"""Standalone server configuration."""

from dataclasses import dataclass
from typing import Optional

from .base import BaseConfig, parse_address


@dataclass
class SingleServerConfig(BaseConfig):
    """
    Parameters for a single, standalone server.

    Attributes:
        address: Server address (host:port)
        subscription_connection_minimum_idle_size: Idle pub/sub connections kept open
        subscription_connection_pool_size: Maximum pub/sub connections
        connection_minimum_idle_size: Idle command connections kept open
        connection_pool_size: Maximum command connections
        database: Database index selected on connect
        dns_monitoring: Re-resolve the address and reconnect on change
        dns_monitoring_interval: Interval between DNS checks
    """

    address: Optional[str] = None
    subscription_connection_minimum_idle_size: int = 1
    subscription_connection_pool_size: int = 50
    connection_minimum_idle_size: int = 10
    connection_pool_size: int = 64
    database: int = 0
    dns_monitoring: bool = False
    dns_monitoring_interval: int = 5000

    def addresses(self) -> list:
        return [self.address] if self.address is not None else []

    def set_address(self, address: str) -> "SingleServerConfig":
        """Validate and set the server address."""
        parse_address(address)
        self.address = address
        return self
