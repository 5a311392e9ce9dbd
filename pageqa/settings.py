# pageqa/settings.py
"""Process settings read once from environment variables (+ optional .env)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote

from dotenv import load_dotenv

load_dotenv(override=False)

logger = logging.getLogger(__name__)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning('%s=%r is not an integer, using %s', name, raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    database_url: str = 'sqlite:///./pageqa.db'

    # Queue. No host means every submission is processed inline.
    redis_host: Optional[str] = None
    redis_port: int = 6379
    redis_password: Optional[str] = None

    # Answering collaborator
    groq_api_key: Optional[str] = None
    groq_model: str = 'llama-3.1-8b-instant'
    answer_timeout_seconds: int = 30

    # Rendering collaborator
    render_timeout_ms: int = 30000
    production: bool = False
    chrome_executable_path: Optional[str] = None

    log_level: str = 'INFO'
    port: int = 3000
    cors_origins: list = field(default_factory=lambda: ['*'])

    @classmethod
    def from_env(cls) -> 'Settings':
        app_env = (_env('APP_ENV', 'development') or '').lower()
        origins = _env('CORS_ORIGINS', '*')
        return cls(
            database_url=_env('DATABASE_URL', cls.database_url),
            redis_host=_env('REDIS_HOST'),
            redis_port=_env_int('REDIS_PORT', 6379),
            redis_password=_env('REDIS_PASSWORD'),
            groq_api_key=_env('GROQ_API_KEY'),
            groq_model=_env('GROQ_MODEL', cls.groq_model),
            answer_timeout_seconds=_env_int('ANSWER_TIMEOUT_SECONDS', 30),
            render_timeout_ms=_env_int('RENDER_TIMEOUT_MS', 30000),
            production=app_env == 'production' or _env('VERCEL') == '1',
            chrome_executable_path=_env('CHROME_EXECUTABLE_PATH'),
            log_level=(_env('LOG_LEVEL', 'INFO') or 'INFO').upper(),
            port=_env_int('PORT', 3000),
            cors_origins=[o.strip() for o in origins.split(',') if o.strip()],
        )

    @property
    def queue_enabled(self) -> bool:
        return self.redis_host is not None

    @property
    def broker_url(self) -> str:
        host = self.redis_host or 'localhost'
        auth = f':{quote(self.redis_password, safe="")}@' if self.redis_password else ''
        return f'redis://{auth}{host}:{self.redis_port}/0'
