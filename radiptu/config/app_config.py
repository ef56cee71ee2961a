from __future__ import annotations

from dataclasses import dataclass

from radiptu.config.env import (
    AlertConfig,
    CacheConfig,
    DbConfig,
    load_alert_config,
    load_cache_config,
    load_db_config,
    load_offline_flag,
)


@dataclass(frozen=True)
class AppConfig:
    database: DbConfig
    cache: CacheConfig
    alerts: AlertConfig
    offline: bool

    @classmethod
    def from_env(cls) -> "AppConfig":
        alerts = load_alert_config()

        if alerts.warning_days < 0:
            raise ValueError("RADIPTU_ALERT_WARNING_DAYS must be >= 0")
        if alerts.countdown_days < 0:
            raise ValueError("RADIPTU_ALERT_COUNTDOWN_DAYS must be >= 0")

        return cls(
            database=load_db_config(),
            cache=load_cache_config(),
            alerts=alerts,
            offline=load_offline_flag(),
        )
