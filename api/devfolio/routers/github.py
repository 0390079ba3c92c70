"""GitHub router exposing the signed-in user's profile and repositories."""

from fastapi import APIRouter, Depends, status

from devfolio.auth.dependencies import get_current_session
from devfolio.schemas.auth import SessionData
from devfolio.schemas.github import GitHubProfile, RepositoryListResponse
from devfolio.services.github import GitHubClient, get_github_client

router = APIRouter(prefix="/api/v1/github", tags=["GitHub"])


@router.get(
    "/profile",
    response_model=GitHubProfile,
    status_code=status.HTTP_200_OK,
)
async def get_profile(
    session: SessionData = Depends(get_current_session),
    github: GitHubClient = Depends(get_github_client),
) -> GitHubProfile:
    """Fetch the signed-in user's GitHub profile."""
    return await github.get_user(session.user.access_token)


@router.get(
    "/repos",
    response_model=RepositoryListResponse,
    status_code=status.HTTP_200_OK,
)
async def list_repositories(
    session: SessionData = Depends(get_current_session),
    github: GitHubClient = Depends(get_github_client),
) -> RepositoryListResponse:
    """
    List the signed-in user's repositories.

    Only the first page (up to 100, most recently updated) is returned.
    """
    repositories = await github.list_repositories(session.user.access_token)
    return RepositoryListResponse(repositories=repositories)
