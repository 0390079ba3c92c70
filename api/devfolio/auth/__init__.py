"""Authentication utilities for the Devfolio API."""

from devfolio.auth.dependencies import get_current_session, get_optional_session
from devfolio.auth.session import build_session, create_session_token, decode_session_token

__all__ = [
    "build_session",
    "create_session_token",
    "decode_session_token",
    "get_current_session",
    "get_optional_session",
]
