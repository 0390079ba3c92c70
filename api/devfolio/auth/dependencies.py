"""Authentication dependencies for FastAPI endpoints."""

from fastapi import HTTPException, Request, status

from devfolio.auth.session import decode_session_token
from devfolio.config import settings
from devfolio.schemas.auth import SessionData


async def get_current_session(request: Request) -> SessionData:
    """
    Validate the session cookie and return the session.

    Raises:
        HTTPException: 401 if the cookie is missing, invalid, or expired
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "UNAUTHORIZED",
                    "message": "Session required",
                }
            },
        )

    session = decode_session_token(token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "UNAUTHORIZED",
                    "message": "Invalid or expired session",
                }
            },
        )

    return session


async def get_optional_session(request: Request) -> SessionData | None:
    """Return the session when a valid cookie is present, None otherwise."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    return decode_session_token(token)
