"""
Rate Limiting for the DinTask API
=================================
slowapi limiter keyed by authenticated account, falling back to client IP.

Credential endpoints carry tighter limits:
- login: 5 req/min (brute force protection)
- register / forgot password: 3 req/min
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from dintask.core.config import settings
from dintask.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """Rate limit key: account id when authenticated, otherwise IP"""
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


LOGIN_LIMIT = "5/minute"
REGISTER_LIMIT = "3/minute"
PASSWORD_RESET_LIMIT = "3/minute"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URL,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """429 in the common error envelope with a Retry-After hint"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests. Please slow down.",
            "code": "RATE_LIMITED",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": "60"},
    )
