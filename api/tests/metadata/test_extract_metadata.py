"""
Tests for page metadata extraction and POST /api/v1/extract-metadata.
"""

import httpx
import pytest
from httpx import AsyncClient

from devfolio.schemas.metadata import PageMetadata
from devfolio.services.metadata import build_imported_project, extract_metadata, is_internal_host

OG_PAGE = """
<html>
  <head>
    <title>Plain Title</title>
    <meta property="og:title" content="Open Graph Title">
    <meta name="twitter:title" content="Twitter Title">
    <meta property="og:description" content="Open Graph description">
    <meta name="description" content="Generic description">
    <meta property="og:image" content="/img/cover.png">
    <meta property="og:site_name" content="Example Site">
    <meta property="og:type" content="article">
    <meta name="keywords" content="python, portfolio">
    <meta name="author" content="Ada Lovelace">
    <link rel="icon" href="/static/favicon.png">
  </head>
  <body></body>
</html>
"""

TWITTER_PAGE = """
<html><head>
  <title>Plain Title</title>
  <meta name="twitter:title" content="Twitter Title">
  <meta name="twitter:description" content="Twitter description">
  <meta name="twitter:image" content="https://cdn.example.com/card.png">
</head></html>
"""

BARE_PAGE = "<html><head><title>  Just a title  </title></head><body>hi</body></html>"


class TestExtractMetadata:
    """Fallback chains of the extractor."""

    def test_prefers_open_graph(self):
        metadata = extract_metadata(OG_PAGE, "https://example.com/projects/x")

        assert metadata.title == "Open Graph Title"
        assert metadata.description == "Open Graph description"
        assert metadata.site_name == "Example Site"
        assert metadata.type == "article"
        assert metadata.keywords == "python, portfolio"
        assert metadata.author == "Ada Lovelace"

    def test_resolves_root_relative_urls(self):
        metadata = extract_metadata(OG_PAGE, "https://example.com/projects/x")

        assert metadata.image == "https://example.com/img/cover.png"
        assert metadata.favicon == "https://example.com/static/favicon.png"

    def test_falls_back_to_twitter_card(self):
        metadata = extract_metadata(TWITTER_PAGE, "https://example.com")

        assert metadata.title == "Twitter Title"
        assert metadata.description == "Twitter description"
        assert metadata.image == "https://cdn.example.com/card.png"

    def test_bare_page_defaults(self):
        metadata = extract_metadata(BARE_PAGE, "https://demo.example.org/app")

        assert metadata.title == "Just a title"
        assert metadata.description == "No description available"
        assert metadata.image is None
        assert metadata.site_name == "demo.example.org"
        assert metadata.favicon == "https://demo.example.org/favicon.ico"
        assert metadata.type == "website"
        assert metadata.keywords == ""
        assert metadata.author == ""

    def test_untitled_page(self):
        metadata = extract_metadata("<html><body>nothing</body></html>", "https://x.dev")
        assert metadata.title == "Untitled Project"

    def test_generic_description_used_without_social_tags(self):
        html = '<html><head><meta name="description" content="Generic"></head></html>'
        assert extract_metadata(html, "https://x.dev").description == "Generic"


class TestBuildImportedProject:
    """Imported projects are repository-shaped records."""

    def test_shapes_record(self):
        metadata = PageMetadata(
            title="My App",
            description="Does things",
            image=None,
            site_name="myapp.dev",
            url="https://myapp.dev",
            favicon="https://myapp.dev/favicon.ico",
            type="website",
            keywords="",
            author="",
        )
        project = build_imported_project(metadata, project_id=1700000000000)

        assert project.id == 1700000000000
        assert project.name == "My App"
        assert project.full_name == "myapp.dev/My App"
        assert project.html_url == "https://myapp.dev"
        assert project.homepage == "https://myapp.dev"
        assert project.language == "Web Project"
        assert project.is_imported is True
        assert project.stargazers_count == 0

    def test_truncates_name_and_description(self):
        metadata = PageMetadata(
            title="t" * 150,
            description="d" * 800,
            image=None,
            site_name="long.dev",
            url="https://long.dev",
            favicon="https://long.dev/favicon.ico",
            type="website",
            keywords="",
            author="",
        )
        project = build_imported_project(metadata)

        assert len(project.name) == 100
        assert len(project.description) == 500
        assert project.id > 0


class TestInternalHost:

    @pytest.mark.parametrize(
        "host", ["localhost", "LOCALHOST.", "127.0.0.1", "192.168.1.1", "[fe80::1]", "0.0.0.0"]
    )
    def test_internal(self, host: str):
        assert is_internal_host(host) is True

    @pytest.mark.parametrize("host", ["example.com", "8.8.8.8", "2606:4700::1111", "localhost.dev"])
    def test_public(self, host: str):
        assert is_internal_host(host) is False


class TestExtractMetadataEndpoint:
    """POST /api/v1/extract-metadata."""

    async def test_returns_metadata_and_project(
        self, async_client: AsyncClient, page_transport
    ):
        transport = page_transport(lambda request: httpx.Response(200, text=OG_PAGE))
        response = await async_client.post(
            "/api/v1/extract-metadata", json={"url": "https://example.com/projects/x"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["metadata"]["title"] == "Open Graph Title"
        assert data["metadata"]["siteName"] == "Example Site"
        assert data["projectData"]["isImported"] is True
        assert data["projectData"]["language"] == "Web Project"
        assert "Mozilla/5.0" in transport.requests[0].headers["user-agent"]

    async def test_follows_redirects(self, async_client: AsyncClient, page_transport):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "https://example.com/new"})
            return httpx.Response(200, text=BARE_PAGE)

        page_transport(handler)
        response = await async_client.post(
            "/api/v1/extract-metadata", json={"url": "https://example.com/old"}
        )
        assert response.status_code == 200
        assert response.json()["metadata"]["title"] == "Just a title"

    @pytest.mark.parametrize("url", ["not a url", "ftp://example.com/file", "example.com", ""])
    async def test_malformed_url_returns_400_without_fetching(
        self, async_client: AsyncClient, page_transport, url: str
    ):
        transport = page_transport(lambda request: httpx.Response(200, text=BARE_PAGE))
        response = await async_client.post("/api/v1/extract-metadata", json={"url": url})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"
        assert transport.requests == []

    async def test_missing_url_returns_400(self, async_client: AsyncClient, page_transport):
        page_transport(lambda request: httpx.Response(200, text=BARE_PAGE))
        response = await async_client.post("/api/v1/extract-metadata", json={})
        assert response.status_code == 400

    @pytest.mark.parametrize("status_code", [404, 500])
    async def test_unsuccessful_fetch_returns_502(
        self, async_client: AsyncClient, page_transport, status_code: int
    ):
        page_transport(lambda request: httpx.Response(status_code, text="nope"))
        response = await async_client.post(
            "/api/v1/extract-metadata", json={"url": "https://example.com"}
        )

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "UPSTREAM_ERROR"

    async def test_unreachable_host_returns_502(self, async_client: AsyncClient, page_transport):
        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("name resolution failed", request=request)

        page_transport(unreachable)
        response = await async_client.post(
            "/api/v1/extract-metadata", json={"url": "https://nowhere.invalid"}
        )
        assert response.status_code == 502

    @pytest.mark.parametrize(
        "url",
        [
            "http://127.0.0.1/",
            "http://localhost:8000/admin",
            "http://api.localhost/",
            "http://169.254.169.254/latest/meta-data",
            "http://10.0.0.5/",
            "http://[::1]/",
            "http://[::ffff:127.0.0.1]/",
        ],
    )
    async def test_internal_host_returns_400_without_fetching(
        self, async_client: AsyncClient, page_transport, url: str
    ):
        transport = page_transport(lambda request: httpx.Response(200, text=BARE_PAGE))
        response = await async_client.post("/api/v1/extract-metadata", json={"url": url})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "URL host is not allowed"
        assert transport.requests == []

    async def test_redirect_to_internal_host_returns_502(
        self, async_client: AsyncClient, page_transport
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "example.com":
                return httpx.Response(302, headers={"Location": "http://127.0.0.1/admin"})
            return httpx.Response(200, text=BARE_PAGE)

        transport = page_transport(handler)
        response = await async_client.post(
            "/api/v1/extract-metadata", json={"url": "https://example.com/old"}
        )

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "UPSTREAM_ERROR"
        assert [str(r.url) for r in transport.requests] == ["https://example.com/old"]
