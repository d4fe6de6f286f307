import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Database (in-memory store when unset)
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None

    # Telegram bot (log-only notifier when unset)
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    NOTIFY_TIMEOUT_SECONDS: float = 10.0

    # Mini-App
    APP_URL: str = "https://your-app-url.com"

    # Stats / timers
    RECENT_HISTORY_LIMIT: int = 30
    TIMER_MAX_MINUTES: int = 1440

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
settings = Settings()


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate required configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("sketch_time")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    required_keys = [
        "DATABASE_URL",
        "TELEGRAM_BOT_TOKEN",
    ]

    missing = [key for key in required_keys if not getattr(cfg, key, None)]
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    if cfg.RECENT_HISTORY_LIMIT < 1 or cfg.TIMER_MAX_MINUTES < 1:
        message = "RECENT_HISTORY_LIMIT and TIMER_MAX_MINUTES must be positive"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
