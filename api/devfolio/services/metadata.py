"""Page metadata extraction for projects imported from arbitrary URLs."""

import ipaddress
import time
from datetime import datetime, timezone
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from devfolio.config import settings
from devfolio.errors import InvalidURLError, UpstreamError
from devfolio.schemas.github import RepositoryRecord
from devfolio.schemas.metadata import PageMetadata

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def validate_url(url: str | None) -> str:
    """Reject missing or non-absolute http(s) URLs before any network call."""
    if not url or not url.strip():
        raise InvalidURLError("URL is required")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc or not parsed.hostname:
        raise InvalidURLError("Invalid URL format")
    if is_internal_host(parsed.hostname):
        raise InvalidURLError("URL host is not allowed")
    return url


def is_internal_host(host: str) -> bool:
    """
    True for localhost names and for loopback, private, link-local or other
    non-global IP literals. Names are not resolved.
    """
    host = host.strip("[]").rstrip(".").lower()
    if host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    if address.version == 6 and address.ipv4_mapped:
        address = address.ipv4_mapped
    return not address.is_global or address.is_multicast


async def _check_redirect_host(request: httpx.Request) -> None:
    if is_internal_host(request.url.host):
        logger.warning(f"Refusing to fetch {request.url}: host is not allowed")
        raise UpstreamError("Webpage redirected to a disallowed host")


def _meta(soup: BeautifulSoup, selector: str) -> str | None:
    tag = soup.select_one(selector)
    if tag is None:
        return None
    value = tag.get("content") or tag.get("href")
    return value.strip() if isinstance(value, str) and value.strip() else None


def _first(soup: BeautifulSoup, *selectors: str) -> str | None:
    for selector in selectors:
        value = _meta(soup, selector)
        if value:
            return value
    return None


def _absolute(value: str | None, page_url: str) -> str | None:
    if value and value.startswith("/"):
        return urljoin(page_url, value)
    return value


def extract_metadata(html: str, url: str) -> PageMetadata:
    """
    Extract page metadata with Open Graph, Twitter Card, generic meta and
    raw tag fallbacks, in that order.
    """
    soup = BeautifulSoup(html, "html.parser")
    parsed = urlparse(url)

    title_tag = soup.find("title")
    title_text = title_tag.get_text(strip=True) if title_tag else ""

    title = (
        _first(soup, 'meta[property="og:title"]', 'meta[name="twitter:title"]')
        or title_text
        or "Untitled Project"
    )
    description = (
        _first(
            soup,
            'meta[property="og:description"]',
            'meta[name="twitter:description"]',
            'meta[name="description"]',
        )
        or "No description available"
    )
    image = _first(
        soup,
        'meta[property="og:image"]',
        'meta[name="twitter:image"]',
        'link[rel="icon"]',
        'link[rel="shortcut icon"]',
    )
    favicon = (
        _first(
            soup,
            'link[rel="icon"]',
            'link[rel="shortcut icon"]',
            'link[rel="apple-touch-icon"]',
        )
        or f"{parsed.scheme}://{parsed.netloc}/favicon.ico"
    )

    return PageMetadata(
        title=title,
        description=description,
        image=_absolute(image, url),
        site_name=_first(soup, 'meta[property="og:site_name"]') or parsed.hostname or "",
        url=url,
        favicon=_absolute(favicon, url),
        type=_first(soup, 'meta[property="og:type"]') or "website",
        keywords=_first(soup, 'meta[name="keywords"]') or "",
        author=_first(soup, 'meta[name="author"]', 'meta[property="article:author"]') or "",
    )


def build_imported_project(metadata: PageMetadata, project_id: int | None = None) -> RepositoryRecord:
    """Wrap page metadata in a repository-shaped record flagged as imported."""
    now = datetime.now(timezone.utc)
    return RepositoryRecord(
        id=project_id if project_id is not None else int(time.time() * 1000),
        name=metadata.title[:MAX_NAME_LENGTH],
        full_name=f"{metadata.site_name}/{metadata.title}",
        description=metadata.description[:MAX_DESCRIPTION_LENGTH],
        html_url=metadata.url,
        homepage=metadata.url,
        language="Web Project",
        created_at=now,
        updated_at=now,
        pushed_at=now,
        is_imported=True,
        favicon=metadata.favicon,
        site_name=metadata.site_name,
        keywords=metadata.keywords,
        author=metadata.author,
    )


class MetadataFetcher:
    """Fetch a page and extract its metadata."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.transport = transport

    async def fetch_html(self, url: str) -> str:
        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=settings.http_timeout_seconds,
                follow_redirects=True,
                event_hooks={"request": [_check_redirect_host]},
            ) as client:
                response = await client.get(url, headers={"User-Agent": settings.metadata_user_agent})
        except httpx.HTTPError as exc:
            logger.error(f"Fetching {url} failed: {exc!r}")
            raise UpstreamError("Failed to fetch webpage") from exc

        if not response.is_success:
            logger.error(f"Fetching {url} returned {response.status_code}")
            raise UpstreamError("Failed to fetch webpage")

        return response.text

    async def extract(self, url: str | None) -> tuple[PageMetadata, RepositoryRecord]:
        url = validate_url(url)
        metadata = extract_metadata(await self.fetch_html(url), url)
        return metadata, build_imported_project(metadata)


def get_metadata_fetcher() -> MetadataFetcher:
    """Dependency providing the metadata fetcher."""
    return MetadataFetcher()
