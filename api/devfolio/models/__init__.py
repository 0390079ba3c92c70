"""Database models for the Devfolio API."""

from devfolio.models.portfolio import Portfolio, PortfolioRepository, Skill, Social
from devfolio.models.repository import Repository
from devfolio.models.user import User

__all__ = [
    "User",
    "Portfolio",
    "Skill",
    "Social",
    "Repository",
    "PortfolioRepository",
]
