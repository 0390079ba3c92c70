"""Session schemas."""

from datetime import datetime

from devfolio.schemas.common import CamelModel


class SessionUser(CamelModel):
    """User identity carried in the session cookie."""

    id: str
    name: str
    email: str | None = None
    image: str | None = None
    github_username: str
    access_token: str


class SessionData(CamelModel):
    user: SessionUser
    expires: datetime
