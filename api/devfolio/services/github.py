"""
GitHub OAuth and REST client.

Handles the authorization-code exchange and the profile/repository reads
the dashboard is built from. Every step is a single request; failures are
raised as ``UpstreamError`` and never retried.
"""

import secrets
from typing import Any
from urllib.parse import urlencode

import httpx
from loguru import logger
from pydantic import ValidationError

from devfolio.config import settings
from devfolio.errors import UpstreamError
from devfolio.schemas.github import GitHubProfile, RepositoryRecord

GITHUB_ACCEPT = "application/vnd.github.v3+json"


def _json(response: httpx.Response, what: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        logger.error(f"{what} returned a non-JSON body: {exc!r}")
        raise UpstreamError("Unexpected response from GitHub") from exc


class OAuthDeniedError(UpstreamError):
    """GitHub answered the code exchange with an OAuth error."""


class GitHubClient:
    """GitHub OAuth 2.0 and REST API client."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.client_id = settings.github_client_id
        self.client_secret = settings.github_client_secret
        self.redirect_uri = settings.github_redirect_uri
        self.oauth_url = settings.github_oauth_url
        self.token_url = settings.github_token_url
        self.api_url = settings.github_api_url.rstrip("/")
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self.transport,
            timeout=settings.http_timeout_seconds,
        )

    def get_authorization_url(self, state: str | None = None) -> str:
        """
        Generate the GitHub authorize URL.

        Args:
            state: Optional state parameter for CSRF protection

        Returns:
            Authorization URL the browser is redirected to
        """
        if not state:
            state = secrets.token_urlsafe(32)

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": settings.github_scope,
            "state": state,
        }
        return f"{self.oauth_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for an access token.

        Raises:
            OAuthDeniedError: GitHub rejected the code
            UpstreamError: network failure or non-2xx response
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    self.token_url,
                    json={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                    },
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.error(f"Token exchange request failed: {exc!r}")
            raise UpstreamError("Failed to reach GitHub") from exc

        if response.status_code != 200:
            logger.error(f"Token exchange failed: {response.status_code} {response.text}")
            raise UpstreamError("Failed to exchange code for token")

        data = _json(response, "Token exchange")
        if not isinstance(data, dict):
            logger.error(f"Token exchange returned {type(data).__name__}, expected an object")
            raise UpstreamError("Unexpected response from GitHub")
        if data.get("error") or not data.get("access_token"):
            logger.warning(f"Token exchange denied: {data.get('error')}")
            raise OAuthDeniedError(data.get("error_description") or "Access denied")

        return data["access_token"]

    async def _get(self, path: str, access_token: str, params: dict[str, Any] | None = None) -> Any:
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.api_url}{path}",
                    params=params,
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Accept": GITHUB_ACCEPT,
                    },
                )
        except httpx.HTTPError as exc:
            logger.error(f"GitHub request {path} failed: {exc!r}")
            raise UpstreamError("Failed to reach GitHub") from exc

        if response.status_code != 200:
            logger.error(f"GitHub request {path} failed: {response.status_code} {response.text}")
            raise UpstreamError(f"GitHub request failed with status {response.status_code}")

        return _json(response, f"GitHub request {path}")

    async def get_user(self, access_token: str) -> GitHubProfile:
        """Fetch the authenticated user's profile."""
        data = await self._get("/user", access_token)
        try:
            return GitHubProfile.from_api(data)
        except (KeyError, TypeError, ValidationError) as exc:
            logger.error(f"Malformed GitHub profile payload: {exc!r}")
            raise UpstreamError("Unexpected response from GitHub") from exc

    async def list_repositories(self, access_token: str) -> list[RepositoryRecord]:
        """
        List the authenticated user's repositories, most recently updated first.

        Only the first page is read, so accounts with more repositories than
        ``repos_per_page`` are not fully enumerated.
        """
        data = await self._get(
            "/user/repos",
            access_token,
            params={"sort": "updated", "per_page": settings.repos_per_page},
        )
        try:
            return [RepositoryRecord.from_api(item) for item in data]
        except (KeyError, TypeError, ValidationError) as exc:
            logger.error(f"Malformed GitHub repository payload: {exc!r}")
            raise UpstreamError("Unexpected response from GitHub") from exc


def get_github_client() -> GitHubClient:
    """Dependency providing the GitHub client."""
    return GitHubClient()
