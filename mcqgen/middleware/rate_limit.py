"""
Rate limiting middleware using slowapi
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from mcqgen import config

# Create limiter instance
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000/hour", "100/minute"],
    enabled=config.RATE_LIMIT_ENABLED,
)


# Rate limit decorators for different endpoints
def generation_limit():
    """Rate limit for MCQ generation (may call the paid model)"""
    return limiter.limit(config.GENERATION_RATE_LIMIT)


def general_api_limit():
    """Rate limit for scoring/export endpoints"""
    return limiter.limit("60/minute")
