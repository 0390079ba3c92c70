"""Schemas for page metadata extraction."""

from devfolio.schemas.common import CamelModel
from devfolio.schemas.github import RepositoryRecord


class ExtractMetadataRequest(CamelModel):
    url: str | None = None


class PageMetadata(CamelModel):
    title: str
    description: str
    image: str | None
    site_name: str
    url: str
    favicon: str
    type: str
    keywords: str
    author: str


class ExtractMetadataResponse(CamelModel):
    success: bool = True
    metadata: PageMetadata
    project_data: RepositoryRecord
