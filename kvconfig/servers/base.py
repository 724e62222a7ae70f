"""
Shared Server Configuration

Connection parameters common to every deployment topology, plus the
address helper used to validate server endpoints.

Addresses are written as ``host:port``, optionally prefixed with the
``redis://`` or ``rediss://`` scheme. All timeouts and intervals are in
milliseconds.
"""

import dataclasses
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional, Tuple


ADDRESS_SCHEMES = ("redis://", "rediss://")


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a server address into its host and port.

    Args:
        address: Address such as ``10.0.0.1:6379`` or ``redis://cache:6379``

    Returns:
        Tuple of (host, port)

    Raises:
        ValueError: If the address is empty, has no port, or the port
            is not in range 1..65535
    """
    if not isinstance(address, str) or not address.strip():
        raise ValueError(f"Invalid address: {address!r}")

    rest = address.strip()
    for scheme in ADDRESS_SCHEMES:
        if rest.startswith(scheme):
            rest = rest[len(scheme):]
            break

    host, sep, port_text = rest.rpartition(":")
    # IPv6 literals are written as [::1]:6379
    host = host[1:-1] if host.startswith("[") and host.endswith("]") else host
    if not sep or not host or not port_text.isdigit():
        raise ValueError(f"Invalid address: {address!r}. Expected host:port")

    port = int(port_text)
    if not 1 <= port <= 65535:
        raise ValueError(f"Invalid port in address {address!r}: {port}")
    return host, port


class ReadMode(Enum):
    """Which nodes serve read operations in replicated topologies."""
    SLAVE = "SLAVE"
    MASTER = "MASTER"
    MASTER_SLAVE = "MASTER_SLAVE"


class SubscriptionMode(Enum):
    """Which nodes serve pub/sub subscriptions in replicated topologies."""
    SLAVE = "SLAVE"
    MASTER = "MASTER"


@dataclass
class BaseConfig:
    """
    Connection parameters shared by all topologies.

    Attributes:
        idle_connection_timeout: Close pooled connections idle this long
        ping_timeout: Timeout for the PING sent on new connections
        connect_timeout: Timeout while establishing a connection
        timeout: Timeout waiting for a command response
        retry_attempts: Attempts before a command is reported as failed
        retry_interval: Delay between command retry attempts
        reconnection_timeout: Delay before reconnecting a dropped node
        failed_attempts: Failed commands before a node is marked down
        password: Server password, if authentication is enabled
        subscriptions_per_connection: Subscriptions multiplexed per connection
        client_name: Name sent with CLIENT SETNAME on new connections
        ssl_enable_endpoint_identification: Verify server host names over TLS
        ping_connection_interval: Keepalive PING interval (0 = disabled)
        keep_alive: Enable TCP keepalive
        tcp_no_delay: Enable TCP_NODELAY
    """

    idle_connection_timeout: int = 10000
    ping_timeout: int = 1000
    connect_timeout: int = 10000
    timeout: int = 3000
    retry_attempts: int = 3
    retry_interval: int = 1500
    reconnection_timeout: int = 3000
    failed_attempts: int = 3
    password: Optional[str] = None
    subscriptions_per_connection: int = 5
    client_name: Optional[str] = None
    ssl_enable_endpoint_identification: bool = True
    ping_connection_interval: int = 0
    keep_alive: bool = False
    tcp_no_delay: bool = False

    def __post_init__(self):
        """Validate numeric fields and addresses after initialization.

        Address lists keep the first occurrence of each address, matching
        the builders that ignore repeated additions.
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, int) and not isinstance(value, bool) and value < 0:
                raise ValueError(f"{f.name} must be non-negative, got {value}")
            if isinstance(value, list):
                setattr(self, f.name, list(dict.fromkeys(value)))
        for address in self.addresses():
            parse_address(address)

    def addresses(self) -> list:
        """Return every server address held by this config."""
        return []

    def copy(self) -> "BaseConfig":
        """
        Return an independent duplicate of this config.

        Containers (address lists and sets) are duplicated so that adding
        an address to the copy never changes the original.
        """
        duplicate = dataclasses.replace(self)
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (list, set, dict)):
                setattr(duplicate, f.name, type(value)(value))
        return duplicate


@dataclass
class BaseMasterSlaveConfig(BaseConfig):
    """Pool sizes and read routing for topologies with primaries and replicas."""

    slave_connection_minimum_idle_size: int = 10
    slave_connection_pool_size: int = 64
    master_connection_minimum_idle_size: int = 10
    master_connection_pool_size: int = 64
    read_mode: ReadMode = ReadMode.SLAVE
    subscription_mode: SubscriptionMode = SubscriptionMode.SLAVE
    subscription_connection_minimum_idle_size: int = 1
    subscription_connection_pool_size: int = 50
