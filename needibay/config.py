# ==============================================================================
# CONFIGURATION
# ==============================================================================
# Every setting comes from the environment (optionally a .env file at the
# project root). The remote API URL is the only one without a usable default.
# ==============================================================================

import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    """Settings loaded into ``app.config``."""

    SECRET_KEY = os.getenv('SECRET_KEY', 'needibay-dev-secret')

    # Remote REST API (the server is not part of this project)
    API_URL = os.getenv('NEEDIBAY_API_URL', 'http://localhost:3000/api').rstrip('/')
    API_TIMEOUT = _env_int('NEEDIBAY_API_TIMEOUT', 15)

    # Logging / profiling
    LOG_LEVEL = os.getenv('NEEDIBAY_LOG_LEVEL', 'INFO').upper()
    ENABLE_PROFILING = _env_bool('NEEDIBAY_ENABLE_PROFILING', True)
    SLOW_THRESHOLD_MS = _env_int('NEEDIBAY_SLOW_THRESHOLD_MS', 300)
    CRITICAL_THRESHOLD_MS = _env_int('NEEDIBAY_CRITICAL_THRESHOLD_MS', 700)

    # Session (holds token + user, the app's only local state)
    PERMANENT_SESSION_LIFETIME = timedelta(hours=12)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Uploaded product / shop images
    MAX_CONTENT_LENGTH = 8 * 1024 * 1024
    ALLOWED_IMAGE_EXTENSIONS = frozenset(['png', 'jpg', 'jpeg', 'gif', 'webp'])


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    API_URL = 'http://api.test'
    ENABLE_PROFILING = False
