"""Configuration model exports.

    from refocus_bdk.config.models import HTTPConfig, RedisCacheConfig
"""

from refocus_bdk.config.models.cache import (
    BaseCacheConfig,
    CacheConfig,
    DisabledCacheConfig,
    MemoryCacheConfig,
    RedisCacheConfig,
)
from refocus_bdk.config.models.http import HTTPConfig
from refocus_bdk.config.models.install import InstallConfig
from refocus_bdk.config.models.observability import LoggingConfig
from refocus_bdk.config.models.realtime import RealtimeConfig

__all__ = [
    "BaseCacheConfig",
    "CacheConfig",
    "DisabledCacheConfig",
    "HTTPConfig",
    "InstallConfig",
    "LoggingConfig",
    "MemoryCacheConfig",
    "RealtimeConfig",
    "RedisCacheConfig",
]
