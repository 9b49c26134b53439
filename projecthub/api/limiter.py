"""
Rate limiter configuration using slowapi
"""
import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from projecthub.config import config

# Default limit is applied to every route by SlowAPIMiddleware
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[config.get("rate_limit", "default", "300/minute")],
    enabled=bool(config.get("rate_limit", "enabled", True)) and os.getenv("APP_ENV") != "test",
)
