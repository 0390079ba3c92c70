"""Portfolio request and response schemas."""

from datetime import datetime
from typing import Any

from pydantic import field_validator

from devfolio.schemas.common import CamelModel
from devfolio.schemas.github import GitHubProfile


class PortfolioFields(CamelModel):
    """
    Editable profile fields of the home section.

    Fields left out of a payload are not written, so a partial save keeps
    the stored values.
    """

    display_name: str = ""
    job_title: str = ""
    bio: str = ""
    profile_pic: str = ""
    custom_username: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class SkillIn(CamelModel):
    name: str
    category: str = ""


class SocialIn(CamelModel):
    platform: str
    username: str
    url: str | None = None
    is_pinned: bool = False


# --- Requests ---


class OwnedRequest(CamelModel):
    """Body carrying the owner's external identity and mirrored profile."""

    user_id: str | None = None
    user_data: GitHubProfile | None = None

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v: Any) -> Any:
        if v is None or isinstance(v, bool):
            return v
        if isinstance(v, int):
            return str(v)
        if isinstance(v, str):
            return v.strip() or None
        return v


class HomeRequest(OwnedRequest):
    portfolio_data: PortfolioFields = PortfolioFields()


class SkillsRequest(OwnedRequest):
    skills: list[SkillIn] = []


class SocialsRequest(OwnedRequest):
    socials: list[SocialIn] = []


class ReposRequest(OwnedRequest):
    """
    Repository selection.

    ``repositories`` items stay untyped so that one malformed record (even a
    null or a bare string) is skipped by the catalog upsert instead of failing
    the whole request.
    """

    selected_repos: list[int] = []
    deployed_urls: dict[str, str | None] = {}
    repositories: list[Any] = []


class PublishRequest(ReposRequest):
    portfolio_data: PortfolioFields = PortfolioFields()
    skills: list[SkillIn] = []


class PublishAllRequest(PublishRequest):
    socials: list[SocialIn] = []


# --- Responses ---


class SkillResponse(CamelModel):
    id: int
    name: str
    category: str


class SocialResponse(CamelModel):
    id: int
    platform: str
    username: str
    url: str
    is_pinned: bool


class RepositoryResponse(CamelModel):
    id: int
    external_id: int
    name: str
    full_name: str
    description: str
    html_url: str
    homepage: str
    language: str
    stargazers_count: int
    forks_count: int
    size: int
    is_private: bool
    is_fork: bool
    is_imported: bool
    favicon: str | None = None
    site_name: str | None = None
    keywords: str | None = None
    author: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None


class PortfolioRepositoryResponse(CamelModel):
    id: int
    deployed_url: str | None
    is_visible: bool
    repository: RepositoryResponse


class OwnerResponse(CamelModel):
    """Public view of the owner (email is private and not included)."""

    github_id: str
    name: str
    github_username: str
    avatar_url: str
    bio: str
    location: str
    website_url: str
    twitter_username: str
    company: str
    public_repos: int
    followers: int
    following: int


class PortfolioAggregate(CamelModel):
    """Profile fields, skills, socials and selected repositories as one unit."""

    id: int
    display_name: str
    job_title: str
    bio: str
    profile_pic: str
    custom_username: str
    is_published: bool
    updated_at: datetime | None = None
    user: OwnerResponse
    skills: list[SkillResponse]
    socials: list[SocialResponse]
    repositories: list[PortfolioRepositoryResponse]


class Diagnostic(CamelModel):
    """Non-fatal problem encountered while saving."""

    code: str
    message: str
    external_id: int | None = None


class SaveResponse(CamelModel):
    success: bool = True
    message: str
    portfolio: PortfolioAggregate
    diagnostics: list[Diagnostic] = []


class PortfolioReadResponse(CamelModel):
    success: bool = True
    portfolio: PortfolioAggregate


class SocialsListResponse(CamelModel):
    success: bool = True
    socials: list[SocialResponse]
