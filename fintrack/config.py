"""Configuration for the finance tracker.

Values come from environment variables with defaults relative to the
project root. ``load_settings()`` re-reads the environment on every call;
the module-level constants are resolved once at import.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fintrack.errors import ConfigError

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(f"{name} must be at least 1, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    seed_path: Path
    log_level: str
    log_file: Optional[Path]
    trend_months: int
    recent_limit: int


def load_settings() -> Settings:
    """Build settings from the current environment."""
    data_dir = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))
    seed_path = Path(os.getenv("FINTRACK_SEED_PATH", data_dir / "seed.json"))
    log_file = os.getenv("FINTRACK_LOG_FILE")
    return Settings(
        data_dir=data_dir,
        seed_path=seed_path,
        log_level=os.getenv("FINTRACK_LOG_LEVEL", "INFO").upper(),
        log_file=Path(log_file) if log_file else None,
        trend_months=_env_int("FINTRACK_TREND_MONTHS", 6),
        recent_limit=_env_int("FINTRACK_RECENT_LIMIT", 5),
    )


DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))
SEED_PATH = Path(os.getenv("FINTRACK_SEED_PATH", DATA_DIR / "seed.json"))
