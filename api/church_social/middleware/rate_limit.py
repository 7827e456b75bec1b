"""Rate limiting middleware using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from church_social.auth.api_key import hash_api_key


def get_client_key(request: Request) -> str:
    """Limit per API key when one is sent, per client address otherwise."""
    api_key = request.headers.get("X-API-Key")
    if api_key:
        return f"key:{hash_api_key(api_key)}"
    return get_remote_address(request)


# headers_enabled would require a Response parameter on every limited endpoint
limiter = Limiter(key_func=get_client_key)


def reset_limiter() -> None:
    """Reset the limiter storage. Used in tests to clear rate limit state."""
    limiter.reset()
