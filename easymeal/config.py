from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")


@dataclass(frozen=True)
class AppConfig:
    """
    Runtime settings for the HTTP service.
    """

    env: str = os.getenv("APP_ENV", "development")
    session_secret: str = os.getenv(
        "SESSION_SECRET", "easy-meal-secret-change-in-production"
    )
    max_request_bytes: int = 1024 * 1024
    rate_limit_window: float = 60.0
    rate_limit_max: int = 100

    @property
    def is_production(self) -> bool:
        return self.env == "production"


DEFAULT_APP_CONFIG = AppConfig()
