"""
app/config.py

Process configuration, read once at startup from the environment / .env
and frozen for the lifetime of the process.

Override any value via .env or the environment:
  API_KEY=...              optional shared key (unset = no auth)
  FILE_SIZE_LIMIT_MB=10
  MAX_BATCH_FILES=20
  MAX_BATCH_CANDIDATES=1000
  BATCH_WORKERS=4
  DEFAULT_THRESHOLD=10
  LOG_LEVEL=INFO
"""

import os
import math
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


class ConfigError(ValueError):
    pass


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _threshold_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value) or value < 0:
        raise ConfigError(f"{name} must be a non-negative number, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    file_size_limit_mb: int = 10
    max_batch_files: int = 20
    max_batch_candidates: int = 1000
    batch_workers: int = 4
    default_threshold: float = 10
    log_level: str = "INFO"
    app_version: str = "1.0.0"

    @property
    def file_size_limit_bytes(self) -> int:
        return self.file_size_limit_mb * 1024 * 1024

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()

        return cls(
            api_key=os.getenv("API_KEY") or None,
            file_size_limit_mb=_int_env("FILE_SIZE_LIMIT_MB", 10),
            max_batch_files=_int_env("MAX_BATCH_FILES", 20),
            max_batch_candidates=_int_env("MAX_BATCH_CANDIDATES", 1000),
            batch_workers=_int_env("BATCH_WORKERS", 4),
            default_threshold=_threshold_env("DEFAULT_THRESHOLD", 10),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            app_version=os.getenv("APP_VERSION", "1.0.0"),
        )
