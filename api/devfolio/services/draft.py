"""Dashboard draft state and unsaved-change detection."""

from typing import Any

from devfolio.models.portfolio import Portfolio
from devfolio.schemas.common import CamelModel
from devfolio.schemas.github import GitHubProfile, RepositoryRecord
from devfolio.schemas.portfolio import (
    PortfolioAggregate,
    PortfolioFields,
    PublishAllRequest,
    SkillIn,
    SocialIn,
)


class PortfolioDraft(CamelModel):
    """
    In-memory edit state of the dashboard before it is published.

    Serializable as the same camelCase JSON the dashboard sends, so a saved
    snapshot can be compared with the live draft.
    """

    portfolio_data: PortfolioFields = PortfolioFields()
    selected_repos: list[int] = []
    skills: list[SkillIn] = []
    socials: list[SocialIn] = []
    deployed_urls: dict[str, str] = {}
    imported_projects: list[RepositoryRecord] = []


def _normalized(draft: PortfolioDraft) -> dict[str, Any]:
    data = draft.model_dump(mode="json")
    # Empty overrides mean "no deployed URL"
    data["deployed_urls"] = {k: v for k, v in data["deployed_urls"].items() if v}
    return data


def has_unsaved_changes(current: PortfolioDraft, saved: PortfolioDraft | None) -> bool:
    """True when ``current`` differs from the last saved snapshot."""
    if saved is None:
        return True
    return _normalized(current) != _normalized(saved)


def draft_from_aggregate(
    aggregate: Portfolio | PortfolioAggregate | None,
    profile: GitHubProfile | None = None,
) -> PortfolioDraft:
    """
    Snapshot of a persisted aggregate as a draft.

    Without an aggregate the draft is seeded from the GitHub profile, the way
    a first-time dashboard starts out.
    """
    if aggregate is None:
        profile = profile or GitHubProfile()
        return PortfolioDraft(
            portfolio_data=PortfolioFields(
                display_name=profile.name or profile.github_username,
                bio=profile.bio,
                profile_pic=profile.avatar_url,
                custom_username=profile.github_username,
            )
        )

    if isinstance(aggregate, Portfolio):
        aggregate = PortfolioAggregate.model_validate(aggregate)

    deployed_urls: dict[str, str] = {}
    imported_projects: list[RepositoryRecord] = []
    for link in aggregate.repositories:
        repository = link.repository
        if link.deployed_url:
            deployed_urls[str(repository.external_id)] = link.deployed_url
        if repository.is_imported:
            imported_projects.append(
                RepositoryRecord(
                    id=repository.external_id,
                    name=repository.name,
                    full_name=repository.full_name or repository.name,
                    description=repository.description,
                    html_url=repository.html_url,
                    homepage=link.deployed_url or "",
                    language=repository.language or "Web Project",
                    stargazers_count=repository.stargazers_count,
                    forks_count=repository.forks_count,
                    size=repository.size,
                    is_private=repository.is_private,
                    is_fork=repository.is_fork,
                    created_at=repository.created_at,
                    updated_at=repository.updated_at,
                    pushed_at=repository.pushed_at or repository.updated_at,
                    is_imported=True,
                    favicon=repository.favicon,
                    site_name=repository.site_name,
                    keywords=repository.keywords,
                    author=repository.author,
                )
            )

    return PortfolioDraft(
        portfolio_data=PortfolioFields(
            display_name=aggregate.display_name,
            job_title=aggregate.job_title,
            bio=aggregate.bio,
            profile_pic=aggregate.profile_pic,
            custom_username=aggregate.custom_username,
        ),
        selected_repos=[link.repository.external_id for link in aggregate.repositories],
        skills=[SkillIn(name=s.name, category=s.category) for s in aggregate.skills],
        socials=[
            SocialIn(platform=s.platform, username=s.username, url=s.url, is_pinned=s.is_pinned)
            for s in aggregate.socials
        ],
        deployed_urls=deployed_urls,
        imported_projects=imported_projects,
    )


def to_publish_payload(
    draft: PortfolioDraft,
    user_id: str,
    profile: GitHubProfile,
    repositories: list[RepositoryRecord],
) -> PublishAllRequest:
    """Build the publish-all request for a draft; imported projects join the catalog."""
    catalog = [r.model_dump(by_alias=True, mode="json") for r in repositories]
    catalog += [p.model_dump(by_alias=True, mode="json") for p in draft.imported_projects]
    return PublishAllRequest(
        user_id=user_id,
        user_data=profile,
        portfolio_data=draft.portfolio_data,
        skills=draft.skills,
        socials=draft.socials,
        selected_repos=draft.selected_repos,
        deployed_urls=dict(draft.deployed_urls),
        repositories=catalog,
    )
