"""User model mirroring the GitHub identity."""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, Column, Integer, String, Text, func
from sqlalchemy.orm import relationship

from devfolio.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Identity anchor for a portfolio owner.

    Keyed naturally by ``github_id``; every mirrored profile field is
    rewritten from the provider payload on each save.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    github_id = Column(String, unique=True, nullable=False)
    name = Column(Text, nullable=False, default="")
    email = Column(String, unique=True, nullable=False)
    github_username = Column(String, nullable=False, default="", index=True)
    avatar_url = Column(Text, nullable=False, default="")
    bio = Column(Text, nullable=False, default="")
    location = Column(Text, nullable=False, default="")
    website_url = Column(Text, nullable=False, default="")
    twitter_username = Column(Text, nullable=False, default="")
    company = Column(Text, nullable=False, default="")
    public_repos = Column(Integer, nullable=False, default=0)
    followers = Column(Integer, nullable=False, default=0)
    following = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    portfolio = relationship("Portfolio", back_populates="user", uselist=False)
    repositories = relationship("Repository", back_populates="owner")
