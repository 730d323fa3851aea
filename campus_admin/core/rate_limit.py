"""Rate limiting for moderation actions using slowapi"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

# Custom key function that considers the acting admin
def get_rate_limit_key(request: Request) -> str:
    """Get rate limit key based on acting admin or IP"""
    # Set by the admin authorization gate before the endpoint runs
    admin_uid = getattr(request.state, "admin_uid", None)

    if admin_uid:
        return f"admin:{admin_uid}"

    # Fall back to IP address
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = get_remote_address(request)

    return f"ip:{ip}"

# Create limiter instance
limiter = Limiter(
    key_func=get_rate_limit_key,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="moving-window",
    headers_enabled=True,
    enabled=settings.rate_limiting_active,
)

# Rate limiting decorators for moderation action classes
ban_limiter = limiter.shared_limit(settings.RATE_LIMIT_BAN, scope="admin_ban")
promote_limiter = limiter.shared_limit(settings.RATE_LIMIT_PROMOTE, scope="admin_promote")
suspend_limiter = limiter.shared_limit(settings.RATE_LIMIT_SUSPEND, scope="admin_suspend")
