"""Session tokens for GitHub-authenticated dashboard users."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from devfolio.config import settings
from devfolio.schemas.auth import SessionData, SessionUser
from devfolio.schemas.github import GitHubProfile

ALGORITHM = "HS256"


def build_session(profile: GitHubProfile, access_token: str) -> SessionData:
    """Session payload for a freshly authenticated GitHub user."""
    return SessionData(
        user=SessionUser(
            id=str(profile.id),
            name=profile.name or profile.github_username,
            email=profile.email or None,
            image=profile.avatar_url or None,
            github_username=profile.github_username,
            access_token=access_token,
        ),
        expires=datetime.now(timezone.utc) + timedelta(hours=settings.session_expire_hours),
    )


def create_session_token(session: SessionData) -> str:
    """
    Encode a session as a signed JWT.

    The payload is readable by the client; the signature only stops it being
    forged or extended.
    """
    payload = session.model_dump(mode="json", by_alias=True)
    payload["exp"] = session.expires
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_session_token(token: str) -> SessionData | None:
    """
    Decode and validate a session token.

    Returns the session if valid, None if invalid or expired.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    try:
        return SessionData.model_validate(payload)
    except ValueError:
        return None
