"""
Client Topology Configuration

TopologyConfig describes how a client connects to a key/value store:
which deployment topology the servers run in, the parameters for that
topology, and settings shared by every topology (value codec, thread
counts, a shared event loop, feature toggles).

A config selects exactly one topology. The first use_*() call picks it;
calling the same use_*() again returns the same server config, and calling
a different one raises TopologyConflict:

    config = TopologyConfig()
    config.use_sentinel_servers().set_master_name("mymaster").add_sentinel_address(
        "10.0.0.1:26379", "10.0.0.2:26379"
    )
    config.threads = 4
    text = config.to_yaml()
"""

import asyncio
import logging
import os
from concurrent.futures import Executor
from typing import Any, Optional, Tuple

from ..codec.codecs import Codec, JsonCodec
from ..codec.provider import CodecProvider, DefaultCodecProvider
from ..exceptions import TopologyConflict
from ..resolver import DefaultResolverProvider, ResolverProvider
from ..servers.base import BaseConfig
from ..servers.cluster import ClusterServersConfig, ElasticacheServersConfig
from ..servers.kinds import TopologyKind
from ..servers.master_slave import MasterSlaveServersConfig
from ..servers.sentinel import SentinelServersConfig
from ..servers.single import SingleServerConfig
from .settings import settings
from .support import ConfigFormat, dump_config, from_dict, load_config, to_dict

logger = logging.getLogger(__name__)


def _resolve_thread_count(threads: int) -> int:
    if threads > 0:
        return threads
    return (os.cpu_count() or 1) * settings.AUTO_THREADS_MULTIPLIER


class TopologyConfig:
    """
    Client configuration for one deployment topology.

    The selected topology and its server config are held together in a
    single slot, so a config can never describe two topologies at once.

    Attributes:
        threads: Threads shared by listeners and task execution (0 = auto)
        netty_threads: Threads for transport I/O (0 = auto)
        codec: Value codec; a JsonCodec is assigned on copy if unset
        codec_provider: Registry for looking up codecs by name
        resolver_provider: Registry for looking up reference id resolvers
        executor: Caller-owned executor for listeners and tasks
        reference_feature_enabled: Toggle for the object reference feature
        use_native_transport: Use the platform's native I/O backend
        event_loop_group: Caller-owned event loop shared between clients

    The executor and event loop are only referenced: this config never
    creates, shuts down, copies or serializes them.
    """

    def __init__(self):
        self._topology: Optional[Tuple[TopologyKind, BaseConfig]] = None
        self._threads = 0
        self._netty_threads = 0

        self.codec: Optional[Codec] = None
        self.codec_provider: CodecProvider = DefaultCodecProvider()
        self.resolver_provider: ResolverProvider = DefaultResolverProvider()
        self.executor: Optional[Executor] = None
        self.reference_feature_enabled = True
        self.use_native_transport = False
        self.event_loop_group: Optional[asyncio.AbstractEventLoop] = None

    # ------------------------------------------------------------------
    # Topology selection
    # ------------------------------------------------------------------

    def select_topology(self, kind: TopologyKind, server_config: Optional[BaseConfig] = None) -> BaseConfig:
        """
        Select a topology, or return the server config already selected for it.

        Args:
            kind: Topology to select
            server_config: Pre-built server config to store. When omitted a
                config with default parameters is created. Ignored if the
                topology is already selected.

        Returns:
            The server config for ``kind``, to be filled in by the caller

        Raises:
            TopologyConflict: If a different topology is already selected
            TypeError: If server_config is not of the topology's config class
        """
        if self._topology is not None:
            selected, current = self._topology
            if selected is not kind:
                raise TopologyConflict(selected, kind)
            return current

        if server_config is None:
            server_config = kind.config_class()
        elif not isinstance(server_config, kind.config_class):
            raise TypeError(
                f"{kind.label} expects {kind.config_class.__name__}, "
                f"got {type(server_config).__name__}"
            )

        self._topology = (kind, server_config)
        logger.debug(f"Selected {kind.label} topology")
        return server_config

    def use_single_server(self, config: Optional[SingleServerConfig] = None) -> SingleServerConfig:
        """Select the standalone server topology."""
        return self.select_topology(TopologyKind.SINGLE, config)

    def use_cluster_servers(self, config: Optional[ClusterServersConfig] = None) -> ClusterServersConfig:
        """Select the clustered topology."""
        return self.select_topology(TopologyKind.CLUSTER, config)

    def use_sentinel_servers(self, config: Optional[SentinelServersConfig] = None) -> SentinelServersConfig:
        """Select the sentinel-monitored topology."""
        return self.select_topology(TopologyKind.SENTINEL, config)

    def use_master_slave_servers(
            self,
            config: Optional[MasterSlaveServersConfig] = None,
    ) -> MasterSlaveServersConfig:
        """Select the primary/replica topology."""
        return self.select_topology(TopologyKind.MASTER_SLAVE, config)

    def use_elasticache_servers(
            self,
            config: Optional[ElasticacheServersConfig] = None,
    ) -> ElasticacheServersConfig:
        """Select the managed-cache replication group topology."""
        return self.select_topology(TopologyKind.ELASTICACHE, config)

    @property
    def topology(self) -> Optional[TopologyKind]:
        """The selected topology, or None if none is selected yet."""
        return self._topology[0] if self._topology is not None else None

    @property
    def server_config(self) -> Optional[BaseConfig]:
        """The selected topology's server config, or None."""
        return self._topology[1] if self._topology is not None else None

    def _server_config_for(self, kind: TopologyKind) -> Optional[BaseConfig]:
        if self.topology is kind:
            return self._topology[1]
        return None

    @property
    def single_server_config(self) -> Optional[SingleServerConfig]:
        return self._server_config_for(TopologyKind.SINGLE)

    @property
    def cluster_servers_config(self) -> Optional[ClusterServersConfig]:
        return self._server_config_for(TopologyKind.CLUSTER)

    @property
    def sentinel_servers_config(self) -> Optional[SentinelServersConfig]:
        return self._server_config_for(TopologyKind.SENTINEL)

    @property
    def master_slave_servers_config(self) -> Optional[MasterSlaveServersConfig]:
        return self._server_config_for(TopologyKind.MASTER_SLAVE)

    @property
    def elasticache_servers_config(self) -> Optional[ElasticacheServersConfig]:
        return self._server_config_for(TopologyKind.ELASTICACHE)

    def is_clustered(self) -> bool:
        """Check if the clustered topology is selected."""
        return self.topology is TopologyKind.CLUSTER

    # ------------------------------------------------------------------
    # Shared settings
    # ------------------------------------------------------------------

    @property
    def threads(self) -> int:
        return self._threads

    @threads.setter
    def threads(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"threads must be non-negative, got {value}")
        self._threads = value

    @property
    def netty_threads(self) -> int:
        return self._netty_threads

    @netty_threads.setter
    def netty_threads(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"netty_threads must be non-negative, got {value}")
        self._netty_threads = value

    @property
    def effective_threads(self) -> int:
        """Thread count to use, with 0 resolved to twice the CPU count."""
        return _resolve_thread_count(self._threads)

    @property
    def effective_netty_threads(self) -> int:
        """Transport thread count to use, with 0 resolved to twice the CPU count."""
        return _resolve_thread_count(self._netty_threads)

    def ensure_default_codec(self) -> Codec:
        """
        Assign a JsonCodec if no codec is set.

        Runs on the source config before it is copied, so after a copy the
        source always holds a concrete codec shared with the copy.

        Returns:
            The codec now set on this config
        """
        if self.codec is None:
            self.codec = JsonCodec()
            logger.debug("No codec set, using JsonCodec")
        return self.codec

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------

    @classmethod
    def copy_of(cls, source: "TopologyConfig") -> "TopologyConfig":
        """
        Create a config from an existing one.

        The selected server config is duplicated, so changing it on either
        config does not affect the other. Codec, providers, executor and
        event loop are shared by reference.

        Note: assigns a default codec to ``source`` first if it has none.
        """
        source.ensure_default_codec()

        config = cls()
        config.threads = source.threads
        config.netty_threads = source.netty_threads
        config.reference_feature_enabled = source.reference_feature_enabled
        config.use_native_transport = source.use_native_transport

        config.codec = source.codec
        config.codec_provider = source.codec_provider
        config.resolver_provider = source.resolver_provider
        config.executor = source.executor
        config.event_loop_group = source.event_loop_group

        if source.topology is not None:
            config.select_topology(source.topology, source.server_config.copy())

        logger.debug(f"Copied configuration (topology: {config.topology})")
        return config

    def copy(self) -> "TopologyConfig":
        """Shorthand for TopologyConfig.copy_of(self)."""
        return type(self).copy_of(self)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Convert this config into its document form."""
        return to_dict(self)

    @classmethod
    def from_dict(cls, document: Any) -> "TopologyConfig":
        """Build a config from its document form."""
        return from_dict(document, cls)

    @classmethod
    def from_json(cls, source: Any) -> "TopologyConfig":
        """
        Read a config stored in JSON format.

        Args:
            source: JSON text, bytes, a Path, a readable stream, or an
                http(s) URL

        Codec and provider class references import the module they name.
        Only load documents from trusted sources, or restrict the modules
        with ``settings.TRUSTED_MODULE_PREFIXES``.

        Raises:
            ConfigParseError: If the content is not a valid configuration
            OSError: If a file or stream cannot be read
            requests.RequestException: If a URL cannot be fetched
        """
        return load_config(source, ConfigFormat.JSON, cls)

    @classmethod
    def from_yaml(cls, source: Any) -> "TopologyConfig":
        """
        Read a config stored in YAML format.

        Accepts the same sources and raises the same errors as from_json().
        """
        return load_config(source, ConfigFormat.YAML, cls)

    def to_json(self) -> str:
        """Render this config as JSON."""
        return dump_config(self, ConfigFormat.JSON)

    def to_yaml(self) -> str:
        """Render this config as YAML."""
        return dump_config(self, ConfigFormat.YAML)

    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TopologyConfig):
            return NotImplemented
        return (
            self._topology == other._topology
            and self.threads == other.threads
            and self.netty_threads == other.netty_threads
            and self.codec == other.codec
            and self.codec_provider == other.codec_provider
            and self.resolver_provider == other.resolver_provider
            and self.reference_feature_enabled == other.reference_feature_enabled
            and self.use_native_transport == other.use_native_transport
            and self.executor is other.executor
            and self.event_loop_group is other.event_loop_group
        )

    def __repr__(self) -> str:
        return (f"TopologyConfig(topology={self.topology}, "
                f"threads={self.threads}, "
                f"netty_threads={self.netty_threads}, "
                f"codec={self.codec!r})")
