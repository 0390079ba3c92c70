"""Repository catalog model."""

from sqlalchemy import (
    TIMESTAMP,
    BigInteger,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from devfolio.database import Base
from devfolio.models.user import utcnow


class Repository(Base):
    """
    Global catalog of projects, keyed by the provider-assigned ``external_id``.

    Imported (non-Git) projects carry a synthesized external id plus the page
    metadata they were built from. Rows are upserted and never deleted.
    """

    __tablename__ = "repositories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_id = Column(BigInteger, unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    full_name = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    html_url = Column(Text, nullable=False, default="")
    clone_url = Column(Text, nullable=False, default="")
    homepage = Column(Text, nullable=False, default="")
    language = Column(String, nullable=False, default="")
    stargazers_count = Column(Integer, nullable=False, default=0)
    forks_count = Column(Integer, nullable=False, default=0)
    size = Column(Integer, nullable=False, default=0)
    is_private = Column(Boolean, nullable=False, default=False)
    is_fork = Column(Boolean, nullable=False, default=False)
    is_imported = Column(Boolean, nullable=False, default=False)

    # Page metadata for URL-imported projects
    favicon = Column(Text)
    site_name = Column(Text)
    keywords = Column(Text)
    author = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    pushed_at = Column(TIMESTAMP(timezone=True))

    owner = relationship("User", back_populates="repositories")
