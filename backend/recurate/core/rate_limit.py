"""
Login throttling.

slowapi's default strategy is a fixed window: LOGIN_RATE_LIMIT attempts per
client address per window, counted whether the attempt succeeds or not.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from recurate.core.config import settings

TOO_MANY_ATTEMPTS_MESSAGE = "Too many login attempts, please try again later."

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
)

login_limit = limiter.limit(settings.LOGIN_RATE_LIMIT)
