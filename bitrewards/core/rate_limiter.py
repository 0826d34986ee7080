from fastapi import Request, status
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from bitrewards.core import config
from bitrewards.core.templating import render


# Custom key function for rate limiting
def get_rate_limit_key(request: Request) -> str:
    user_id = getattr(request.state, "user_id", None)
    if user_id is not None:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_rate_limit_key,
    storage_uri=config.RATE_LIMIT_STORAGE_URI,
    enabled=config.RATE_LIMIT_ENABLED,
)


async def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    response = render(
        request,
        "error.html",
        {"message": "Too many requests. Please try again later."},
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    )
    response.headers["Retry-After"] = "60"
    return response
