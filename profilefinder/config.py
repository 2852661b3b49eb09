"""Configuration for profilefinder, read from environment variables."""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _get_str(key: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.getenv(key, default)


def _get_list(key: str, default: str) -> List[str]:
    return [item.strip().lower() for item in _get_str(key, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime settings. Build with ``Settings.from_env()``; CLI flags override fields."""

    host: str = "0.0.0.0"
    port: int = 3000
    max_daily: int = 500
    min_interval: float = 3.0  # seconds between searches, all requests
    jitter: float = 1.0
    timeout: float = 15.0
    providers: List[str] = field(default_factory=lambda: ["bing"])
    seed: Optional[int] = None
    log_dir: str = "logs"
    log_level: str = "INFO"
    history_db: str = "data/lookups.db"
    cors: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        seed = _get_str("PROFILEFINDER_SEED")
        return cls(
            host=_get_str("PROFILEFINDER_HOST", "0.0.0.0"),
            port=_get_int("PROFILEFINDER_PORT", 3000),
            max_daily=_get_int("PROFILEFINDER_MAX_DAILY", 500),
            min_interval=_get_float("PROFILEFINDER_MIN_INTERVAL", 3.0),
            jitter=_get_float("PROFILEFINDER_JITTER", 1.0),
            timeout=_get_float("PROFILEFINDER_TIMEOUT", 15.0),
            providers=_get_list("PROFILEFINDER_PROVIDERS", "bing"),
            seed=int(seed) if seed.strip().lstrip("-").isdigit() else None,
            log_dir=_get_str("PROFILEFINDER_LOG_DIR", "logs"),
            log_level=_get_str("PROFILEFINDER_LOG_LEVEL", "INFO").upper(),
            history_db=_get_str("PROFILEFINDER_DB", "data/lookups.db"),
            cors=_get_bool("PROFILEFINDER_CORS", True),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        from .providers import PROVIDERS

        errors = []
        if not 0 < self.port < 65536:
            errors.append(f"Invalid port: {self.port}")
        if self.max_daily < 1:
            errors.append("PROFILEFINDER_MAX_DAILY must be >= 1")
        if self.min_interval < 0 or self.jitter < 0:
            errors.append("Pacing interval and jitter must be >= 0")
        if self.timeout <= 0:
            errors.append("PROFILEFINDER_TIMEOUT must be > 0")
        if not self.providers:
            errors.append("At least one search provider is required")
        for name in self.providers:
            if name not in PROVIDERS:
                errors.append(f"Unknown search provider: {name}")
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Invalid log level: {self.log_level}")
        return errors
