"""Router for importing non-Git projects from a URL."""

from fastapi import APIRouter, Depends, Request, status

from devfolio.config import settings
from devfolio.middleware.rate_limit import limiter
from devfolio.schemas.metadata import ExtractMetadataRequest, ExtractMetadataResponse
from devfolio.services.metadata import MetadataFetcher, get_metadata_fetcher

router = APIRouter(prefix="/api/v1", tags=["Import"])


@router.post(
    "/extract-metadata",
    response_model=ExtractMetadataResponse,
    status_code=status.HTTP_200_OK,
)
@limiter.limit(settings.extract_metadata_rate_limit)
async def extract_metadata(
    request: Request,
    data: ExtractMetadataRequest,
    fetcher: MetadataFetcher = Depends(get_metadata_fetcher),
) -> ExtractMetadataResponse:
    """
    Fetch a page and describe it as an imported project.

    Malformed URLs and localhost or private IP hosts are rejected with 400
    before any request is made. A redirect to such a host, or any other fetch
    failure, returns 502. Host names are not resolved, so a public name
    pointing at a private address is still fetched.
    """
    metadata, project = await fetcher.extract(data.url)
    return ExtractMetadataResponse(metadata=metadata, project_data=project)
