"""Rate limiting for the public authentication endpoints."""

from slowapi import Limiter
from starlette.requests import Request


def _get_client_ip(request: Request) -> str:
    """Extract the client IP, honouring the first X-Forwarded-For hop behind a proxy."""
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    return forwarded or (request.client.host if request.client else "127.0.0.1")


limiter = Limiter(key_func=_get_client_ip)
