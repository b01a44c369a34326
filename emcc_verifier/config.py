"""
EMCC Verifier - Configuration

All settings come from environment variables, read once at startup.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

DEFAULT_DIRECTORY_URL = "https://www.emccglobal.org/directory"


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the verifier service"""
    port: int = 3000
    host: str = "0.0.0.0"
    environment: str = "production"
    include_stack_traces: bool = False
    directory_url: str = DEFAULT_DIRECTORY_URL
    navigation_timeout_ms: int = 60000
    settle_delay_ms: int = 5000
    headless: bool = True
    chromium_channel: Optional[str] = None
    max_concurrent_sessions: int = 4
    cors_allow_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        environment = os.getenv("ENVIRONMENT", "production").strip() or "production"
        is_development = environment.lower() == "development"

        # Stack traces never leave the process in production
        include_stack = _env_bool("INCLUDE_STACK_TRACES", default=is_development)
        if environment.lower() == "production":
            include_stack = False

        origins = tuple(
            origin.strip()
            for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
            if origin.strip()
        )

        return cls(
            port=_env_int("PORT", 3000),
            host=os.getenv("HOST", "0.0.0.0"),
            environment=environment,
            include_stack_traces=bool(include_stack),
            directory_url=os.getenv("EMCC_DIRECTORY_URL", DEFAULT_DIRECTORY_URL),
            navigation_timeout_ms=_env_int("NAVIGATION_TIMEOUT_MS", 60000),
            settle_delay_ms=_env_int("SETTLE_DELAY_MS", 5000),
            headless=bool(_env_bool("HEADLESS", default=True)),
            chromium_channel=(os.getenv("CHROMIUM_CHANNEL") or "").strip() or None,
            max_concurrent_sessions=max(0, _env_int("MAX_CONCURRENT_SESSIONS", 4)),
            cors_allow_origins=origins or ("*",),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the environment (cached for the process lifetime)"""
    return Settings.from_env()
