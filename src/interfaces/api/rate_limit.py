# src/interfaces/api/rate_limit.py
"""API rate limiting."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from src.config import settings

limiter = Limiter(key_func=get_remote_address)


def get_rate_limit_string() -> str:
    """Get rate limit string for slowapi.

    Returns:
        Rate limit string in format "N/minute".
    """
    return f"{settings.api_rate_limit}/minute"
