from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from decouple import config


@dataclass(frozen=True)
class DbConfig:
    host: str
    port: str
    name: str
    user: str
    password: str
    ssl_mode: str
    connect_timeout: int

    def conninfo_kwargs(self) -> dict:
        return {
            "host": self.host,
            "port": self.port,
            "dbname": self.name,
            "user": self.user,
            "password": self.password,
            "sslmode": self.ssl_mode,
            "connect_timeout": self.connect_timeout,
        }


@dataclass(frozen=True)
class CacheConfig:
    path: Path
    seed_yaml: Path


@dataclass(frozen=True)
class AlertConfig:
    warning_days: int
    countdown_days: int


def load_db_config() -> DbConfig:
    return DbConfig(
        host=config("DB_HOST", default="localhost"),
        port=config("DB_PORT", default="5432"),
        name=config("DB_NAME", default="radiptu_db"),
        user=config("DB_USER", default="radiptu_user"),
        password=config("DB_PASSWORD", default="radiptu_password"),
        ssl_mode=config("DB_SSL_MODE", default="prefer"),
        connect_timeout=config("DB_CONNECT_TIMEOUT", default=10, cast=int),
    )


def load_cache_config() -> CacheConfig:
    return CacheConfig(
        path=Path(config("RADIPTU_CACHE_PATH", default=".cache/radiptu_properties.json")),
        seed_yaml=Path(config("RADIPTU_SEED_YAML", default="seed/properties.yml")),
    )


def load_alert_config() -> AlertConfig:
    return AlertConfig(
        warning_days=config("RADIPTU_ALERT_WARNING_DAYS", default=15, cast=int),
        countdown_days=config("RADIPTU_ALERT_COUNTDOWN_DAYS", default=10, cast=int),
    )


def load_offline_flag() -> bool:
    return config("RADIPTU_OFFLINE", default=False, cast=bool)
