"""
kv-config Settings

Process-wide defaults for loading, rendering and logging. Values can be
overridden through environment variables.
"""

import os
from dataclasses import dataclass
from typing import Tuple


@dataclass
class Settings:
    """Package settings."""

    # Serialization settings
    DEFAULT_FORMAT: str = os.environ.get("KV_CONFIG_FORMAT", "yaml")
    ENCODING: str = "utf-8"
    JSON_INDENT: int = 2

    # Module prefixes a document may name in class references (empty = any)
    TRUSTED_MODULE_PREFIXES: Tuple[str, ...] = tuple(
        prefix.strip()
        for prefix in os.environ.get("KV_CONFIG_TRUSTED_MODULES", "").split(",")
        if prefix.strip()
    )

    # Thread pools: a configured count of 0 means cpu_count * multiplier
    AUTO_THREADS_MULTIPLIER: int = 2

    # Logging settings
    DEBUG: bool = os.environ.get("KV_CONFIG_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("KV_CONFIG_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
