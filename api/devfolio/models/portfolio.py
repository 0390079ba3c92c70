"""Portfolio aggregate models: Portfolio, Skill, Social, PortfolioRepository."""

from sqlalchemy import TIMESTAMP, Boolean, Column, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from devfolio.database import Base
from devfolio.models.user import utcnow


class Portfolio(Base):
    """
    One published portfolio per user.

    Addressable publicly by ``custom_username`` or by the owner's GitHub login.
    """

    __tablename__ = "portfolios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    display_name = Column(Text, nullable=False, default="")
    job_title = Column(Text, nullable=False, default="")
    bio = Column(Text, nullable=False, default="")
    profile_pic = Column(Text, nullable=False, default="")
    custom_username = Column(String, nullable=False, default="", index=True)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())

    user = relationship("User", back_populates="portfolio")
    skills = relationship(
        "Skill",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="Skill.id",
    )
    socials = relationship(
        "Social",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="Social.id",
    )
    repositories = relationship(
        "PortfolioRepository",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="PortfolioRepository.id",
    )


class Skill(Base):
    """A skill listed on a portfolio. Duplicates by name are allowed."""

    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(
        Integer,
        ForeignKey("portfolios.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(Text, nullable=False)
    category = Column(Text, nullable=False, default="")

    portfolio = relationship("Portfolio", back_populates="skills")


class Social(Base):
    """A social account link; pinned ones show in the public hero section."""

    __tablename__ = "socials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(
        Integer,
        ForeignKey("portfolios.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    platform = Column(String, nullable=False)
    username = Column(Text, nullable=False)
    url = Column(Text, nullable=False)
    is_pinned = Column(Boolean, nullable=False, default=False)

    portfolio = relationship("Portfolio", back_populates="socials")


class PortfolioRepository(Base):
    """Selection of a catalog repository on a portfolio."""

    __tablename__ = "portfolio_repositories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(
        Integer,
        ForeignKey("portfolios.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    repository_id = Column(Integer, ForeignKey("repositories.id"), nullable=False)
    deployed_url = Column(Text)
    is_visible = Column(Boolean, nullable=False, default=True)

    portfolio = relationship("Portfolio", back_populates="repositories")
    repository = relationship("Repository")
