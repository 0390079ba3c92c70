"""Pydantic schemas for request/response validation."""

from devfolio.schemas.auth import SessionData, SessionUser
from devfolio.schemas.github import GitHubProfile, RepositoryRecord
from devfolio.schemas.metadata import ExtractMetadataRequest, ExtractMetadataResponse, PageMetadata
from devfolio.schemas.portfolio import (
    HomeRequest,
    PortfolioAggregate,
    PortfolioFields,
    PublishAllRequest,
    PublishRequest,
    ReposRequest,
    SaveResponse,
    SkillIn,
    SkillsRequest,
    SocialIn,
    SocialsRequest,
)

__all__ = [
    "SessionData",
    "SessionUser",
    "GitHubProfile",
    "RepositoryRecord",
    "ExtractMetadataRequest",
    "ExtractMetadataResponse",
    "PageMetadata",
    "HomeRequest",
    "PortfolioAggregate",
    "PortfolioFields",
    "PublishAllRequest",
    "PublishRequest",
    "ReposRequest",
    "SaveResponse",
    "SkillIn",
    "SkillsRequest",
    "SocialIn",
    "SocialsRequest",
]
