"""Schemas for GitHub profile and repository data."""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, field_validator

from devfolio.schemas.common import CamelModel


class GitHubProfile(CamelModel):
    """
    External profile mirrored onto the ``users`` row.

    Missing or null text fields become empty strings and missing counters
    become zero, so a thin payload overwrites richer stored values.
    """

    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None
    name: str = ""
    email: str = ""
    github_username: str = ""
    avatar_url: str = ""
    bio: str = ""
    location: str = ""
    website_url: str = ""
    twitter_username: str = ""
    company: str = ""
    public_repos: int = 0
    followers: int = 0
    following: int = 0

    @field_validator(
        "name",
        "email",
        "github_username",
        "avatar_url",
        "bio",
        "location",
        "website_url",
        "twitter_username",
        "company",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("public_repos", "followers", "following", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "GitHubProfile":
        """Normalize a ``GET /user`` payload."""
        return cls(
            id=data["id"],
            name=data.get("name") or data.get("login") or "",
            email=data.get("email") or "",
            github_username=data.get("login") or "",
            avatar_url=data.get("avatar_url") or "",
            bio=data.get("bio") or "",
            location=data.get("location") or "",
            website_url=data.get("blog") or "",
            twitter_username=data.get("twitter_username") or "",
            company=data.get("company") or "",
            public_repos=data.get("public_repos") or 0,
            followers=data.get("followers") or 0,
            following=data.get("following") or 0,
        )


class RepositoryRecord(CamelModel):
    """Repository-shaped record, either from the GitHub API or imported from a URL."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    full_name: str = ""
    description: str = ""
    html_url: str = ""
    clone_url: str | None = None
    homepage: str = ""
    language: str = ""
    stargazers_count: int = 0
    forks_count: int = 0
    size: int = 0
    is_private: bool = False
    is_fork: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None

    # Imported projects only
    is_imported: bool = False
    favicon: str | None = None
    site_name: str | None = None
    keywords: str | None = None
    author: str | None = None

    @field_validator("full_name", "description", "html_url", "homepage", "language", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("stargazers_count", "forks_count", "size", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RepositoryRecord":
        """Normalize one item of ``GET /user/repos``."""
        return cls(
            id=data["id"],
            name=data["name"],
            full_name=data.get("full_name") or "",
            description=data.get("description") or "",
            html_url=data.get("html_url") or "",
            clone_url=data.get("clone_url"),
            homepage=data.get("homepage") or "",
            language=data.get("language") or "",
            stargazers_count=data.get("stargazers_count") or 0,
            forks_count=data.get("forks_count") or 0,
            size=data.get("size") or 0,
            is_private=bool(data.get("private")),
            is_fork=bool(data.get("fork")),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            pushed_at=data.get("pushed_at"),
        )


class RepositoryListResponse(CamelModel):
    repositories: list[RepositoryRecord]
