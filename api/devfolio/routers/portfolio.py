"""Portfolio router: section saves, publishing, and aggregate reads."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from devfolio.auth.dependencies import get_optional_session
from devfolio.database import get_db
from devfolio.schemas.auth import SessionData
from devfolio.schemas.portfolio import (
    HomeRequest,
    PortfolioAggregate,
    PortfolioReadResponse,
    PublishAllRequest,
    PublishRequest,
    ReposRequest,
    SaveResponse,
    SkillsRequest,
    SocialResponse,
    SocialsListResponse,
    SocialsRequest,
)
from devfolio.services.portfolio_store import PortfolioStore, SaveResult

router = APIRouter(prefix="/api/v1/portfolio", tags=["Portfolio"])


def _save_response(result: SaveResult, message: str) -> SaveResponse:
    return SaveResponse(
        message=message,
        portfolio=PortfolioAggregate.model_validate(result.portfolio),
        diagnostics=result.diagnostics,
    )


def _bad_request(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "error": {
                "code": "BAD_REQUEST",
                "message": message,
            }
        },
    )


@router.post(
    "/home",
    response_model=SaveResponse,
    status_code=status.HTTP_200_OK,
)
async def save_home(
    data: HomeRequest,
    db: AsyncSession = Depends(get_db),
) -> SaveResponse:
    """
    Save the home section (display name, job title, bio, picture, custom username).

    Creates the user and portfolio on first save and publishes the portfolio.
    """
    result = await PortfolioStore(db).save_home(data.user_id, data.user_data, data.portfolio_data)
    return _save_response(result, "Home section saved successfully")


@router.post(
    "/skills",
    response_model=SaveResponse,
    status_code=status.HTTP_200_OK,
)
async def save_skills(
    data: SkillsRequest,
    db: AsyncSession = Depends(get_db),
) -> SaveResponse:
    """Replace the portfolio's skill set."""
    result = await PortfolioStore(db).save_skills(data.user_id, data.user_data, data.skills)
    return _save_response(result, "Skills saved successfully")


@router.post(
    "/socials",
    response_model=SaveResponse,
    status_code=status.HTTP_200_OK,
)
async def save_socials(
    data: SocialsRequest,
    db: AsyncSession = Depends(get_db),
) -> SaveResponse:
    """
    Replace the portfolio's social accounts.

    One account per platform is kept; a missing URL is built from the handle.
    """
    result = await PortfolioStore(db).save_socials(data.user_id, data.user_data, data.socials)
    return _save_response(result, "Social accounts saved successfully")


@router.get(
    "/socials",
    response_model=SocialsListResponse,
    status_code=status.HTTP_200_OK,
)
async def list_socials(
    user_id: str | None = Query(default=None, alias="userId"),
    db: AsyncSession = Depends(get_db),
) -> SocialsListResponse:
    """List the social accounts saved for a user (empty when none)."""
    if not user_id:
        raise _bad_request("User ID is required")

    socials = await PortfolioStore(db).list_socials(user_id)
    return SocialsListResponse(socials=[SocialResponse.model_validate(s) for s in socials])


@router.post(
    "/repos",
    response_model=SaveResponse,
    status_code=status.HTTP_200_OK,
)
async def save_repos(
    data: ReposRequest,
    db: AsyncSession = Depends(get_db),
) -> SaveResponse:
    """
    Upsert the repository catalog and replace the portfolio's selection.

    Selections that do not resolve to a catalog row are reported in
    ``diagnostics`` instead of failing the request.
    """
    result = await PortfolioStore(db).save_repositories(
        data.user_id,
        data.user_data,
        data.selected_repos,
        data.repositories,
        data.deployed_urls,
    )
    return _save_response(result, "Repositories saved successfully")


@router.post(
    "/publish",
    response_model=SaveResponse,
    status_code=status.HTTP_200_OK,
)
async def publish(
    data: PublishRequest,
    db: AsyncSession = Depends(get_db),
) -> SaveResponse:
    """Publish profile fields, skills and repositories; socials are left as they are."""
    result = await PortfolioStore(db).save_portfolio(
        data.user_id,
        data.user_data,
        data.portfolio_data,
        data.skills,
        None,
        data.selected_repos,
        data.repositories,
        data.deployed_urls,
    )
    return _save_response(result, "Portfolio published successfully")


@router.post(
    "/publish-all",
    response_model=SaveResponse,
    status_code=status.HTTP_200_OK,
)
async def publish_all(
    data: PublishAllRequest,
    db: AsyncSession = Depends(get_db),
) -> SaveResponse:
    """Publish the whole aggregate in one request."""
    result = await PortfolioStore(db).save_portfolio(
        data.user_id,
        data.user_data,
        data.portfolio_data,
        data.skills,
        data.socials,
        data.selected_repos,
        data.repositories,
        data.deployed_urls,
    )
    return _save_response(result, "Portfolio published successfully! All changes have been saved.")


@router.get(
    "/publish",
    response_model=PortfolioReadResponse,
    status_code=status.HTTP_200_OK,
)
async def get_portfolio(
    username: str | None = Query(default=None),
    user_id: str | None = Query(default=None, alias="userId"),
    session: SessionData | None = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db),
) -> PortfolioReadResponse:
    """
    Read a full portfolio aggregate.

    ``userId`` reads by the owner's GitHub id: the signed-in owner gets the
    portfolio whether or not it is published, anyone else only a published
    one. ``username`` reads a published portfolio by custom username or
    GitHub login.
    """
    if not username and not user_id:
        raise _bad_request("Username or User ID is required")

    store = PortfolioStore(db)
    if user_id:
        is_owner = session is not None and session.user.id == str(user_id)
        portfolio = await store.get_by_owner(user_id, published_only=not is_owner)
    else:
        portfolio = await store.get_published_by_username(username)

    if portfolio is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": {
                    "code": "NOT_FOUND",
                    "message": "Portfolio not found",
                }
            },
        )

    return PortfolioReadResponse(portfolio=PortfolioAggregate.model_validate(portfolio))
