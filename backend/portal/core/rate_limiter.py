"""
Rate Limiting for the Student Portal
====================================
slowapi limiter keyed by client address. ``send-otp`` carries its own
tighter limit (OTP_RATE_LIMIT) so phone numbers cannot be flooded with codes.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from portal.core.config import settings
from portal.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """Rate limit key: first X-Forwarded-For hop, else the socket address"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """429 with a Retry-After hint"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}",
        extra={"event_type": "rate_limit", "http_path": request.url.path},
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests. Please slow down.",
            "code": "RATE_LIMITED",
        },
        headers={"Retry-After": "60"},
    )


def otp_rate_limit():
    """Limit for OTP issuance (OTP_RATE_LIMIT, default 5/minute)"""
    return limiter.limit(settings.OTP_RATE_LIMIT, key_func=get_client_identifier)
