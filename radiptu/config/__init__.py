from radiptu.config.app_config import AppConfig
from radiptu.config.env import (
    AlertConfig,
    CacheConfig,
    DbConfig,
    load_alert_config,
    load_cache_config,
    load_db_config,
)
from radiptu.config.seed import load_seed_properties

__all__ = [
    "AppConfig",
    "AlertConfig",
    "CacheConfig",
    "DbConfig",
    "load_alert_config",
    "load_cache_config",
    "load_db_config",
    "load_seed_properties",
]
