"""Portfolio aggregate store: reconciles submitted portfolio state with the database."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devfolio.config import settings
from devfolio.errors import MissingIdentityError, PersistenceError
from devfolio.models.portfolio import Portfolio, PortfolioRepository, Skill, Social
from devfolio.models.repository import Repository
from devfolio.models.user import User, utcnow
from devfolio.schemas.github import GitHubProfile, RepositoryRecord
from devfolio.schemas.portfolio import Diagnostic, PortfolioFields, SkillIn, SocialIn

T = TypeVar("T")

PLATFORM_URL_PATTERNS = {
    "github": "https://github.com/{username}",
    "twitter": "https://twitter.com/{username}",
    "linkedin": "https://linkedin.com/in/{username}",
    "instagram": "https://instagram.com/{username}",
    "facebook": "https://facebook.com/{username}",
    "youtube": "https://youtube.com/@{username}",
    "stackoverflow": "https://stackoverflow.com/users/{username}",
    "reddit": "https://reddit.com/u/{username}",
}


def social_url(platform: str, username: str) -> str:
    """Build a profile URL for a platform handle."""
    pattern = PLATFORM_URL_PATTERNS.get(platform, "https://" + platform + ".com/{username}")
    return pattern.format(username=username)


def placeholder_email(user_id: str) -> str:
    """Stand-in for users whose GitHub email is private."""
    return f"github-{user_id}@placeholder.com"


def dedupe_socials_by_platform(socials: Iterable[SocialIn]) -> list[SocialIn]:
    """Keep one entry per platform; a later entry replaces an earlier one in place."""
    by_platform: dict[str, SocialIn] = {}
    for social in socials:
        by_platform[social.platform] = social
    return list(by_platform.values())


def _external_id_of(raw: Any) -> int | None:
    value = raw.get("id") if isinstance(raw, Mapping) else None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class SaveResult:
    """Persisted aggregate plus the non-fatal problems met while saving it."""

    portfolio: Portfolio
    diagnostics: list[Diagnostic] = field(default_factory=list)


class PortfolioStore:
    """
    Read and write the portfolio aggregate.

    The aggregate (portfolio fields, skills, socials, repository links) is
    written in one transaction. Collections are only ever replaced whole;
    there is no incremental add or remove at this layer. Repository catalog
    rows are upserted before the transaction, one commit per record.
    """

    def __init__(self, db: AsyncSession, transaction_timeout: float | None = None):
        self.db = db
        self.transaction_timeout = (
            transaction_timeout
            if transaction_timeout is not None
            else settings.transaction_timeout_seconds
        )

    # --- Transactions ---

    async def _in_transaction(self, work: Callable[[], Awaitable[T]]) -> T:
        """Run ``work`` and commit as one unit, rolling back everything on failure."""

        async def run() -> T:
            result = await work()
            await self.db.commit()
            return result

        try:
            return await asyncio.wait_for(run(), timeout=self.transaction_timeout)
        except (SQLAlchemyError, asyncio.TimeoutError) as exc:
            await self.db.rollback()
            logger.error(f"Portfolio transaction rolled back: {exc!r}")
            raise PersistenceError("Failed to save portfolio") from exc

    @staticmethod
    def _require_identity(user_id: str | None) -> str:
        if user_id is None or not str(user_id).strip():
            raise MissingIdentityError("User ID is required")
        return str(user_id).strip()

    # --- Users ---

    async def upsert_user(self, user_id: str, profile: GitHubProfile | None) -> int:
        """
        Create or refresh the user keyed by GitHub id; returns the internal id.

        Every mirrored field is rewritten, so empty values in ``profile``
        overwrite whatever was stored before.
        """
        profile = profile or GitHubProfile()
        email = profile.email.strip() or placeholder_email(user_id)
        values = {
            "name": profile.name,
            "email": email,
            "github_username": profile.github_username,
            "avatar_url": profile.avatar_url,
            "bio": profile.bio,
            "location": profile.location,
            "website_url": profile.website_url,
            "twitter_username": profile.twitter_username,
            "company": profile.company,
            "public_repos": profile.public_repos,
            "followers": profile.followers,
            "following": profile.following,
        }

        result = await self.db.execute(select(User).where(User.github_id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(github_id=user_id, **values)
            self.db.add(user)
        else:
            for key, value in values.items():
                setattr(user, key, value)
            user.updated_at = utcnow()
        await self.db.flush()
        return user.id

    # --- Repository catalog ---

    async def _upsert_repository(self, owner_id: int, record: RepositoryRecord) -> None:
        now = utcnow()
        clone_url = record.clone_url or (
            record.html_url if record.is_imported else f"{record.html_url}.git"
        )
        values = {
            "name": record.name,
            "full_name": record.full_name,
            "description": record.description,
            "html_url": record.html_url,
            "clone_url": clone_url,
            "homepage": record.homepage,
            "language": record.language,
            "stargazers_count": record.stargazers_count,
            "forks_count": record.forks_count,
            "size": record.size,
            "is_private": record.is_private,
            "is_fork": record.is_fork,
            "is_imported": record.is_imported,
            "favicon": record.favicon,
            "site_name": record.site_name,
            "keywords": record.keywords,
            "author": record.author,
            "created_at": record.created_at or now,
            "updated_at": record.updated_at or now,
            "pushed_at": record.pushed_at,
        }

        result = await self.db.execute(
            select(Repository).where(Repository.external_id == record.id)
        )
        repository = result.scalar_one_or_none()
        if repository is None:
            self.db.add(Repository(external_id=record.id, user_id=owner_id, **values))
        else:
            for key, value in values.items():
                setattr(repository, key, value)
        await self.db.flush()

    async def upsert_repositories(
        self,
        owner_id: int,
        records: Iterable[Any],
    ) -> list[Diagnostic]:
        """
        Upsert catalog rows by external id, committing each one separately.

        A record that fails validation or persistence is logged and skipped;
        the others still land.
        """
        diagnostics: list[Diagnostic] = []
        for raw in records:
            if isinstance(raw, RepositoryRecord):
                record = raw
            else:
                try:
                    record = RepositoryRecord.model_validate(raw)
                except ValidationError as exc:
                    external_id = _external_id_of(raw)
                    logger.warning(f"Skipping malformed repository record {external_id}: {exc}")
                    diagnostics.append(
                        Diagnostic(
                            code="INVALID_REPOSITORY",
                            message="Repository record is malformed and was skipped",
                            external_id=external_id,
                        )
                    )
                    continue

            try:
                await self._upsert_repository(owner_id, record)
                await self.db.commit()
            except SQLAlchemyError as exc:
                await self.db.rollback()
                logger.warning(f"Error upserting repository {record.name} ({record.id}): {exc!r}")
                diagnostics.append(
                    Diagnostic(
                        code="REPOSITORY_UPSERT_FAILED",
                        message=f"Repository '{record.name}' could not be saved",
                        external_id=record.id,
                    )
                )
        return diagnostics

    # --- Portfolio row ---

    async def _get_portfolio(self, owner_id: int) -> Portfolio | None:
        result = await self.db.execute(select(Portfolio).where(Portfolio.user_id == owner_id))
        return result.scalar_one_or_none()

    async def write_portfolio_fields(self, owner_id: int, fields: PortfolioFields) -> Portfolio:
        """
        Create or update the owner's portfolio with ``fields`` and publish it.

        Only fields present in the payload are written; omitted ones keep their
        stored value. An explicit empty string or null clears a field.
        """
        portfolio = await self._get_portfolio(owner_id)
        if portfolio is None:
            portfolio = Portfolio(user_id=owner_id)
            self.db.add(portfolio)

        for name in fields.model_fields_set:
            setattr(portfolio, name, getattr(fields, name))
        portfolio.is_published = True
        portfolio.updated_at = utcnow()
        await self.db.flush()
        return portfolio

    async def ensure_portfolio(
        self,
        owner_id: int,
        profile: GitHubProfile | None,
        publish: bool,
    ) -> Portfolio:
        """Get the owner's portfolio, creating it from profile defaults when missing."""
        portfolio = await self._get_portfolio(owner_id)
        if portfolio is None:
            profile = profile or GitHubProfile()
            portfolio = Portfolio(
                user_id=owner_id,
                display_name=profile.name,
                bio=profile.bio,
                profile_pic=profile.avatar_url,
                custom_username=profile.github_username,
                is_published=publish,
            )
            self.db.add(portfolio)
        elif publish:
            portfolio.is_published = True
            portfolio.updated_at = utcnow()
        await self.db.flush()
        return portfolio

    # --- Collection replacement ---

    async def replace_skills(self, portfolio_id: int, skills: Iterable[SkillIn]) -> None:
        await self.db.execute(delete(Skill).where(Skill.portfolio_id == portfolio_id))
        self.db.add_all(
            Skill(portfolio_id=portfolio_id, name=skill.name, category=skill.category)
            for skill in skills
        )
        await self.db.flush()

    async def replace_socials(self, portfolio_id: int, socials: Iterable[SocialIn]) -> None:
        await self.db.execute(delete(Social).where(Social.portfolio_id == portfolio_id))
        self.db.add_all(
            Social(
                portfolio_id=portfolio_id,
                platform=social.platform,
                username=social.username,
                url=social.url or social_url(social.platform, social.username),
                is_pinned=social.is_pinned,
            )
            for social in socials
        )
        await self.db.flush()

    async def replace_repository_links(
        self,
        portfolio_id: int,
        selected_external_ids: Iterable[int],
        deployed_urls: Mapping[str, str | None] | None = None,
    ) -> list[Diagnostic]:
        """
        Replace the selected repositories of a portfolio.

        External ids resolve against the catalog; ids with no catalog row are
        dropped and reported rather than failing the save.
        """
        deployed_urls = deployed_urls or {}
        selected = list(dict.fromkeys(selected_external_ids))

        await self.db.execute(
            delete(PortfolioRepository).where(PortfolioRepository.portfolio_id == portfolio_id)
        )

        resolved: dict[int, int] = {}
        if selected:
            result = await self.db.execute(
                select(Repository.external_id, Repository.id).where(
                    Repository.external_id.in_(selected)
                )
            )
            resolved = {external_id: internal_id for external_id, internal_id in result.all()}

        diagnostics: list[Diagnostic] = []
        for external_id in selected:
            repository_id = resolved.get(external_id)
            if repository_id is None:
                logger.warning(
                    f"Repository with external id {external_id} not found in catalog, "
                    f"dropping it from portfolio {portfolio_id}"
                )
                diagnostics.append(
                    Diagnostic(
                        code="REPOSITORY_NOT_FOUND",
                        message=f"Repository {external_id} is not in the catalog",
                        external_id=external_id,
                    )
                )
                continue

            self.db.add(
                PortfolioRepository(
                    portfolio_id=portfolio_id,
                    repository_id=repository_id,
                    deployed_url=deployed_urls.get(str(external_id)) or None,
                    is_visible=True,
                )
            )
        await self.db.flush()
        return diagnostics

    # --- Write operations ---

    async def save_portfolio(
        self,
        user_id: str | None,
        profile: GitHubProfile | None,
        fields: PortfolioFields,
        skills: Iterable[SkillIn],
        socials: Iterable[SocialIn] | None,
        selected_external_ids: Iterable[int],
        repository_records: Iterable[Any],
        deployed_urls: Mapping[str, str | None] | None = None,
    ) -> SaveResult:
        """
        Save the whole aggregate.

        The user upsert and the catalog upsert run ahead of the aggregate
        transaction; portfolio fields, skills, socials (unless ``None``) and
        repository links then land together or not at all.
        """
        user_id = self._require_identity(user_id)

        owner_id = await self._in_transaction(lambda: self.upsert_user(user_id, profile))
        diagnostics = await self.upsert_repositories(owner_id, repository_records)

        async def write() -> int:
            portfolio = await self.write_portfolio_fields(owner_id, fields)
            await self.replace_skills(portfolio.id, skills)
            if socials is not None:
                await self.replace_socials(portfolio.id, socials)
            diagnostics.extend(
                await self.replace_repository_links(
                    portfolio.id, selected_external_ids, deployed_urls
                )
            )
            return portfolio.id

        portfolio_id = await self._in_transaction(write)
        return SaveResult(await self._load(Portfolio.id == portfolio_id), diagnostics)

    async def save_home(
        self,
        user_id: str | None,
        profile: GitHubProfile | None,
        fields: PortfolioFields,
    ) -> SaveResult:
        user_id = self._require_identity(user_id)

        async def write() -> int:
            owner_id = await self.upsert_user(user_id, profile)
            portfolio = await self.write_portfolio_fields(owner_id, fields)
            return portfolio.id

        portfolio_id = await self._in_transaction(write)
        return SaveResult(await self._load(Portfolio.id == portfolio_id))

    async def save_skills(
        self,
        user_id: str | None,
        profile: GitHubProfile | None,
        skills: Iterable[SkillIn],
    ) -> SaveResult:
        user_id = self._require_identity(user_id)

        async def write() -> int:
            owner_id = await self.upsert_user(user_id, profile)
            portfolio = await self.ensure_portfolio(owner_id, profile, publish=True)
            await self.replace_skills(portfolio.id, skills)
            return portfolio.id

        portfolio_id = await self._in_transaction(write)
        return SaveResult(await self._load(Portfolio.id == portfolio_id))

    async def save_socials(
        self,
        user_id: str | None,
        profile: GitHubProfile | None,
        socials: Iterable[SocialIn],
    ) -> SaveResult:
        """Replace socials; one entry per platform, without publishing the portfolio."""
        user_id = self._require_identity(user_id)
        socials = dedupe_socials_by_platform(socials)

        async def write() -> int:
            owner_id = await self.upsert_user(user_id, profile)
            portfolio = await self.ensure_portfolio(owner_id, profile, publish=False)
            await self.replace_socials(portfolio.id, socials)
            return portfolio.id

        portfolio_id = await self._in_transaction(write)
        return SaveResult(await self._load(Portfolio.id == portfolio_id))

    async def save_repositories(
        self,
        user_id: str | None,
        profile: GitHubProfile | None,
        selected_external_ids: Iterable[int],
        repository_records: Iterable[Any],
        deployed_urls: Mapping[str, str | None] | None = None,
    ) -> SaveResult:
        user_id = self._require_identity(user_id)

        async def ensure() -> int:
            owner_id = await self.upsert_user(user_id, profile)
            portfolio = await self.ensure_portfolio(owner_id, profile, publish=True)
            return portfolio.id

        portfolio_id = await self._in_transaction(ensure)
        portfolio = await self._load(Portfolio.id == portfolio_id)
        diagnostics = await self.upsert_repositories(portfolio.user_id, repository_records)

        async def link() -> None:
            diagnostics.extend(
                await self.replace_repository_links(
                    portfolio_id, selected_external_ids, deployed_urls
                )
            )

        await self._in_transaction(link)
        return SaveResult(await self._load(Portfolio.id == portfolio_id), diagnostics)

    # --- Read operations ---

    @staticmethod
    def _aggregate_query():
        return (
            select(Portfolio)
            .options(
                selectinload(Portfolio.user),
                selectinload(Portfolio.skills),
                selectinload(Portfolio.socials),
                selectinload(Portfolio.repositories).selectinload(PortfolioRepository.repository),
            )
            .execution_options(populate_existing=True)
        )

    async def _load(self, *criteria) -> Portfolio:
        result = await self.db.execute(self._aggregate_query().where(*criteria))
        return result.scalar_one()

    async def get_by_owner(self, user_id: str, published_only: bool = False) -> Portfolio | None:
        """Full aggregate for the owner's GitHub id; unpublished ones unless ``published_only``."""
        query = (
            self._aggregate_query()
            .join(User, Portfolio.user_id == User.id)
            .where(User.github_id == str(user_id))
        )
        if published_only:
            query = query.where(Portfolio.is_published.is_(True))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_published_by_username(self, username: str) -> Portfolio | None:
        """
        Full published aggregate for a public username.

        A custom username match wins over a GitHub login match; among several
        matches the oldest portfolio wins.
        """
        if not username:
            return None

        result = await self.db.execute(
            self._aggregate_query()
            .where(Portfolio.is_published.is_(True))
            .where(Portfolio.custom_username == username)
            .order_by(Portfolio.id)
            .limit(1)
        )
        portfolio = result.scalar_one_or_none()
        if portfolio is not None:
            return portfolio

        result = await self.db.execute(
            self._aggregate_query()
            .join(User, Portfolio.user_id == User.id)
            .where(Portfolio.is_published.is_(True))
            .where(User.github_username == username)
            .order_by(Portfolio.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_socials(self, user_id: str) -> list[Social]:
        result = await self.db.execute(
            select(Social)
            .join(Portfolio, Social.portfolio_id == Portfolio.id)
            .join(User, Portfolio.user_id == User.id)
            .where(User.github_id == str(user_id))
            .order_by(Social.id)
        )
        return list(result.scalars().all())
