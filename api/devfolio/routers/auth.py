"""Authentication router for the GitHub OAuth flow and the session cookie."""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from loguru import logger

from devfolio.auth.dependencies import get_current_session
from devfolio.auth.session import build_session, create_session_token
from devfolio.config import settings
from devfolio.errors import UpstreamError
from devfolio.middleware.rate_limit import limiter
from devfolio.schemas.auth import SessionData
from devfolio.services.github import GitHubClient, OAuthDeniedError, get_github_client

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


def _app_redirect(path: str) -> RedirectResponse:
    return RedirectResponse(
        f"{settings.app_url.rstrip('/')}{path}",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )


@router.get("/github")
@limiter.limit(settings.oauth_rate_limit)
async def github_callback(
    request: Request,
    code: str | None = None,
    github: GitHubClient = Depends(get_github_client),
) -> RedirectResponse:
    """
    GitHub OAuth entry point and redirect target.

    Without ``code`` the browser is sent to GitHub's authorize page. With a
    code, it is exchanged for a token, the profile is fetched and the session
    cookie is set before redirecting to the dashboard. Failures redirect to
    the sign-in page with an error and set no cookie.
    """
    if not code:
        return RedirectResponse(
            github.get_authorization_url(),
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )

    try:
        access_token = await github.exchange_code(code)
        profile = await github.get_user(access_token)
    except OAuthDeniedError:
        return _app_redirect("/auth?error=access_denied")
    except UpstreamError:
        return _app_redirect("/auth?error=server_error")

    session = build_session(profile, access_token)

    response = _app_redirect("/dashboard")
    # Client-readable: the dashboard reads the session from the cookie
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(session),
        httponly=False,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.session_expire_hours * 60 * 60,
    )
    logger.info(f"Session established for GitHub user {profile.github_username}")
    return response


@router.get(
    "/session",
    response_model=SessionData,
    status_code=status.HTTP_200_OK,
)
async def get_session(
    session: SessionData = Depends(get_current_session),
) -> SessionData:
    """Return the decoded session of the current browser."""
    return session


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def logout() -> Response:
    """Clear the session cookie."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(key=settings.session_cookie_name, samesite="lax")
    return response
