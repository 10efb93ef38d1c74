"""
Centralized configuration for the billing services.

- Frozen dataclass with validation in __post_init__.
- Loaded from OS env, plus a .env file at the repo root through python-dotenv.
- Immutable singleton via functools.lru_cache.
- Secrets and DSNs never logged (masked).
"""

from __future__ import annotations

import functools
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, cast
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.triggers.cron import CronTrigger
from dotenv import load_dotenv

from shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------
def _get_env_str(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    v = os.getenv(key, default)
    if required and (v is None or str(v).strip() == ""):
        raise ValueError(f"Missing required env var: {key}")
    return v


def _get_env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_env_int(key: str, default: int) -> int:
    v = os.getenv(key)
    if v is None or v.strip() == "":
        return default
    try:
        return int(v)
    except ValueError:
        raise ValueError(f"Env var {key} must be an integer") from None


def _validate_choice(value: str, *, choices: tuple[str, ...], key: str) -> str:
    if value not in choices:
        raise ValueError(f"{key} must be one of {choices}, got {value!r}")
    return value


def _validate_url(value: str, *, key: str, allowed_schemes: tuple[str, ...]) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in allowed_schemes or not parsed.netloc:
        raise ValueError(f"{key} must be a valid URL with scheme in {allowed_schemes}")
    return value


def _validate_database_url(value: str, *, key: str) -> str:
    if not value.startswith(("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")):
        raise ValueError(
            f"{key} must start with postgresql://, postgresql+asyncpg:// or sqlite+aiosqlite://"
        )
    return value


def _mask_dsn(value: Optional[str]) -> str:
    if not value:
        return "<unset>"
    parsed = urlparse(value)
    if parsed.password:
        return value.replace(parsed.password, "***")
    return value


# ------------------------------------------------------------------------------
# Settings dataclass (immutable)
# ------------------------------------------------------------------------------
EnvName = Literal["local", "dev", "staging", "prod"]
LogFormat = Literal["json", "console"]


@dataclass(frozen=True)
class Settings:
    # Environment
    environment: EnvName = "local"
    debug: bool = False

    # Database
    database_url: str = field(default="")
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Redis / payment queue
    redis_url: str = "redis://localhost:6379/0"
    payment_queue_name: str = "payment"

    # Charge job scheduling
    charge_job_cron: str = "0 0 * * *"
    scheduler_timezone: str = "America/Sao_Paulo"
    charge_job_lock_ttl_seconds: int = 3600

    # Observability
    log_level: str = "INFO"
    log_format: LogFormat = "json"

    # Paths
    base_dir: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent.parent)

    # Derived flags (filled in __post_init__)
    is_prod: bool = field(init=False)
    is_local: bool = field(init=False)

    def __post_init__(self) -> None:
        _validate_choice(self.environment, choices=("local", "dev", "staging", "prod"), key="ENVIRONMENT")
        _validate_choice(self.log_format, choices=("json", "console"), key="LOG_FORMAT")

        _validate_database_url(self.database_url, key="DATABASE_URL")
        _validate_url(self.redis_url, key="REDIS_URL", allowed_schemes=("redis", "rediss"))

        if self.database_pool_size <= 0:
            raise ValueError("DATABASE_POOL_SIZE must be > 0")
        if self.database_max_overflow < 0:
            raise ValueError("DATABASE_MAX_OVERFLOW must be >= 0")

        if not self.payment_queue_name.strip():
            raise ValueError("PAYMENT_QUEUE_NAME must be non-empty")

        try:
            tz = ZoneInfo(self.scheduler_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"SCHEDULER_TIMEZONE is not a known timezone: {self.scheduler_timezone!r}") from None
        try:
            CronTrigger.from_crontab(self.charge_job_cron, timezone=tz)
        except ValueError as e:
            raise ValueError(f"CHARGE_JOB_CRON is not a valid crontab expression: {e}") from None

        if self.charge_job_lock_ttl_seconds <= 0:
            raise ValueError("CHARGE_JOB_LOCK_TTL_SECONDS must be > 0")

        if not re.fullmatch(r"(?i)DEBUG|INFO|WARNING|ERROR|CRITICAL", self.log_level.strip()):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")

        object.__setattr__(self, "is_prod", self.environment == "prod")
        object.__setattr__(self, "is_local", self.environment == "local")

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"

    # Safe dict (for debug prints without secrets)
    def safe_dict(self) -> dict:
        return {
            "environment": self.environment,
            "debug": self.debug,
            "database_url": _mask_dsn(self.database_url),
            "database_pool_size": self.database_pool_size,
            "database_max_overflow": self.database_max_overflow,
            "redis_url": _mask_dsn(self.redis_url),
            "payment_queue_name": self.payment_queue_name,
            "charge_job_cron": self.charge_job_cron,
            "scheduler_timezone": self.scheduler_timezone,
            "charge_job_lock_ttl_seconds": self.charge_job_lock_ttl_seconds,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


# ------------------------------------------------------------------------------
# Loader (singleton)
# ------------------------------------------------------------------------------
@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    env_file = Path(__file__).resolve().parent.parent.parent / ".env"
    if env_file.exists():
        load_dotenv(dotenv_path=str(env_file), override=False)

    settings = Settings(
        environment=cast(EnvName, _get_env_str("ENVIRONMENT", "local") or "local"),
        debug=_get_env_bool("DEBUG", False),
        database_url=_get_env_str("DATABASE_URL", required=True) or "",
        database_pool_size=_get_env_int("DATABASE_POOL_SIZE", 5),
        database_max_overflow=_get_env_int("DATABASE_MAX_OVERFLOW", 10),
        redis_url=_get_env_str("REDIS_URL", "redis://localhost:6379/0") or "redis://localhost:6379/0",
        payment_queue_name=_get_env_str("PAYMENT_QUEUE_NAME", "payment") or "payment",
        charge_job_cron=_get_env_str("CHARGE_JOB_CRON", "0 0 * * *") or "0 0 * * *",
        scheduler_timezone=_get_env_str("SCHEDULER_TIMEZONE", "America/Sao_Paulo") or "America/Sao_Paulo",
        charge_job_lock_ttl_seconds=_get_env_int("CHARGE_JOB_LOCK_TTL_SECONDS", 3600),
        log_level=_get_env_str("LOG_LEVEL", "INFO") or "INFO",
        log_format=cast(LogFormat, _get_env_str("LOG_FORMAT", "json") or "json"),
    )

    logger.info("settings_loaded", settings=settings.safe_dict())
    return settings
