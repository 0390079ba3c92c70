"""Rate limiting for outward-facing endpoints using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Keyed by client IP: the OAuth callback and the metadata fetcher are
# reachable without a session.
limiter = Limiter(key_func=get_remote_address)


def reset_limiter() -> None:
    """Clear the in-memory limiter storage. Used in tests for isolation."""
    if hasattr(limiter, "_limiter") and limiter._limiter:
        storage = limiter._limiter.storage
        if hasattr(storage, "reset"):
            storage.reset()
    if hasattr(limiter, "_storage") and limiter._storage:
        limiter._storage.reset()
