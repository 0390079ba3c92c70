"""Services for the Devfolio API."""

from devfolio.services.draft import PortfolioDraft, draft_from_aggregate, has_unsaved_changes
from devfolio.services.github import GitHubClient, OAuthDeniedError
from devfolio.services.metadata import MetadataFetcher, extract_metadata
from devfolio.services.portfolio_store import PortfolioStore, SaveResult

__all__ = [
    "PortfolioStore",
    "SaveResult",
    "GitHubClient",
    "OAuthDeniedError",
    "MetadataFetcher",
    "extract_metadata",
    "PortfolioDraft",
    "draft_from_aggregate",
    "has_unsaved_changes",
]
