"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import pytest

from kvconfig.config.topology_config import TopologyConfig
from kvconfig.servers import (
    ClusterServersConfig,
    ElasticacheServersConfig,
    MasterSlaveServersConfig,
    SentinelServersConfig,
    SingleServerConfig,
    TopologyKind,
)


# ============================================================================
# Config Fixtures
# ============================================================================

@pytest.fixture
def config() -> TopologyConfig:
    """Create a fresh TopologyConfig with no topology selected."""
    return TopologyConfig()


@pytest.fixture
def single_config() -> TopologyConfig:
    """Create a config using a standalone server."""
    cfg = TopologyConfig()
    cfg.use_single_server().set_address("redis://127.0.0.1:6379")
    return cfg


@pytest.fixture
def sentinel_config() -> TopologyConfig:
    """
    Create a config using a sentinel-monitored set.

    Matches the round-trip scenario: threads=4, nettyThreads=0,
    reference feature disabled.
    """
    cfg = TopologyConfig()
    cfg.threads = 4
    cfg.netty_threads = 0
    cfg.reference_feature_enabled = False
    cfg.use_sentinel_servers().set_master_name("mymaster").add_sentinel_address(
        "10.0.0.1:26379",
        "10.0.0.2:26379",
        "10.0.0.3:26379",
    )
    return cfg


# ============================================================================
# Server Config Fixtures
# ============================================================================

SELECTORS = {
    TopologyKind.SINGLE: "use_single_server",
    TopologyKind.CLUSTER: "use_cluster_servers",
    TopologyKind.SENTINEL: "use_sentinel_servers",
    TopologyKind.MASTER_SLAVE: "use_master_slave_servers",
    TopologyKind.ELASTICACHE: "use_elasticache_servers",
}


def populated_server_config(kind: TopologyKind):
    """Build a server config of the given kind with non-default values."""
    if kind is TopologyKind.SINGLE:
        return SingleServerConfig(address="cache:6379", database=2, password="secret")
    if kind is TopologyKind.CLUSTER:
        return ClusterServersConfig(node_addresses=["n1:7000", "n2:7001"], scan_interval=2000)
    if kind is TopologyKind.SENTINEL:
        return SentinelServersConfig(sentinel_addresses=["s1:26379"], master_name="mymaster")
    if kind is TopologyKind.MASTER_SLAVE:
        return MasterSlaveServersConfig(master_address="m:6379", slave_addresses={"r1:6379", "r2:6379"})
    return ElasticacheServersConfig(node_addresses=["e1:6379"], database=1)


@pytest.fixture
def make_server_config():
    """Factory fixture building a populated server config for a kind."""
    return populated_server_config


@pytest.fixture(params=list(TopologyKind), ids=lambda kind: kind.name.lower())
def topology_kind(request) -> TopologyKind:
    """Parametrize a test over every topology kind."""
    return request.param


@pytest.fixture
def select():
    """
    Call the use_*() selector for a kind.

    Usage:
        def test_something(config, select):
            server_config = select(config, TopologyKind.CLUSTER)
    """
    def _select(cfg: TopologyConfig, kind: TopologyKind, server_config=None):
        return getattr(cfg, SELECTORS[kind])(server_config)
    return _select


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that touch the filesystem or CLI"
    )


# Configure asyncio mode for pytest-asyncio
pytest_plugins = ['pytest_asyncio']
