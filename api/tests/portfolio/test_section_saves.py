"""
Tests for the per-section save endpoints:
POST /api/v1/portfolio/home, /skills, /socials, /repos and GET /socials.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from devfolio.models import Portfolio, User


class TestSaveHome:
    """POST /api/v1/portfolio/home."""

    async def test_creates_published_portfolio(
        self, async_client: AsyncClient, user_data: dict, portfolio_data: dict
    ):
        response = await async_client.post(
            "/api/v1/portfolio/home",
            json={"userId": "1001", "userData": user_data, "portfolioData": portfolio_data},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Home section saved successfully"
        portfolio = data["portfolio"]
        assert portfolio["displayName"] == "Ada L."
        assert portfolio["jobTitle"] == "Engineer"
        assert portfolio["customUsername"] == "ada-builds"
        assert portfolio["isPublished"] is True
        assert portfolio["user"]["githubUsername"] == "ada"

    async def test_owner_email_is_not_exposed(
        self, async_client: AsyncClient, user_data: dict, portfolio_data: dict
    ):
        response = await async_client.post(
            "/api/v1/portfolio/home",
            json={"userId": "1001", "userData": user_data, "portfolioData": portfolio_data},
        )
        assert "email" not in response.json()["portfolio"]["user"]

    async def test_numeric_user_id_is_accepted(
        self, async_client: AsyncClient, user_data: dict, portfolio_data: dict
    ):
        response = await async_client.post(
            "/api/v1/portfolio/home",
            json={"userId": 1001, "userData": user_data, "portfolioData": portfolio_data},
        )
        assert response.status_code == 200
        assert response.json()["portfolio"]["user"]["githubId"] == "1001"

    async def test_null_fields_become_empty(self, async_client: AsyncClient, user_data: dict):
        response = await async_client.post(
            "/api/v1/portfolio/home",
            json={
                "userId": "1001",
                "userData": user_data,
                "portfolioData": {"displayName": "Ada", "jobTitle": None},
            },
        )
        assert response.status_code == 200
        assert response.json()["portfolio"]["jobTitle"] == ""

    @pytest.mark.parametrize("user_id", [None, ""])
    async def test_missing_user_id_returns_400(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        user_data: dict,
        portfolio_data: dict,
        user_id,
    ):
        response = await async_client.post(
            "/api/v1/portfolio/home",
            json={"userId": user_id, "userData": user_data, "portfolioData": portfolio_data},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"
        assert response.json()["error"]["message"] == "User ID is required"
        assert await db_session.scalar(select(func.count()).select_from(User)) == 0


class TestSaveSkills:
    """POST /api/v1/portfolio/skills."""

    async def test_replaces_skills(self, async_client: AsyncClient, user_data: dict):
        await async_client.post(
            "/api/v1/portfolio/skills",
            json={
                "userId": "1001",
                "userData": user_data,
                "skills": [
                    {"name": "Python", "category": "Languages"},
                    {"name": "Postgres", "category": "Data"},
                ],
            },
        )
        response = await async_client.post(
            "/api/v1/portfolio/skills",
            json={
                "userId": "1001",
                "userData": user_data,
                "skills": [{"name": "Rust", "category": "Languages"}],
            },
        )

        assert response.status_code == 200
        skills = response.json()["portfolio"]["skills"]
        assert [(s["name"], s["category"]) for s in skills] == [("Rust", "Languages")]

    async def test_publishes_portfolio(self, async_client: AsyncClient, user_data: dict):
        response = await async_client.post(
            "/api/v1/portfolio/skills",
            json={"userId": "1001", "userData": user_data, "skills": []},
        )
        assert response.json()["portfolio"]["isPublished"] is True

    async def test_missing_user_id_returns_400(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/portfolio/skills", json={"skills": [{"name": "Go"}]}
        )
        assert response.status_code == 400


class TestSocials:
    """POST and GET /api/v1/portfolio/socials."""

    async def test_save_builds_urls_and_dedupes(self, async_client: AsyncClient, user_data: dict):
        response = await async_client.post(
            "/api/v1/portfolio/socials",
            json={
                "userId": "1001",
                "userData": user_data,
                "socials": [
                    {"platform": "github", "username": "old-ada"},
                    {"platform": "linkedin", "username": "ada-l", "isPinned": True},
                    {"platform": "github", "username": "ada"},
                ],
            },
        )

        assert response.status_code == 200
        socials = response.json()["portfolio"]["socials"]
        assert [(s["platform"], s["url"]) for s in socials] == [
            ("github", "https://github.com/ada"),
            ("linkedin", "https://linkedin.com/in/ada-l"),
        ]
        assert socials[1]["isPinned"] is True

    async def test_save_does_not_publish(self, async_client: AsyncClient, user_data: dict):
        response = await async_client.post(
            "/api/v1/portfolio/socials",
            json={"userId": "1001", "userData": user_data, "socials": []},
        )
        assert response.json()["portfolio"]["isPublished"] is False

    async def test_list_returns_saved_socials(self, async_client: AsyncClient, user_data: dict):
        await async_client.post(
            "/api/v1/portfolio/socials",
            json={
                "userId": "1001",
                "userData": user_data,
                "socials": [{"platform": "twitter", "username": "ada_l"}],
            },
        )
        response = await async_client.get("/api/v1/portfolio/socials", params={"userId": "1001"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["socials"][0]["url"] == "https://twitter.com/ada_l"

    async def test_list_for_unknown_user_is_empty(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/portfolio/socials", params={"userId": "404"})

        assert response.status_code == 200
        assert response.json()["socials"] == []

    async def test_list_without_user_id_returns_400(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/portfolio/socials")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "User ID is required"


class TestSaveRepos:
    """POST /api/v1/portfolio/repos."""

    async def test_links_selected_repositories(
        self, async_client: AsyncClient, user_data: dict, repo_record
    ):
        response = await async_client.post(
            "/api/v1/portfolio/repos",
            json={
                "userId": "1001",
                "userData": user_data,
                "selectedRepos": [2],
                "deployedUrls": {"2": "https://two.ada.dev"},
                "repositories": [repo_record(1), repo_record(2)],
            },
        )

        assert response.status_code == 200
        links = response.json()["portfolio"]["repositories"]
        assert len(links) == 1
        assert links[0]["deployedUrl"] == "https://two.ada.dev"
        assert links[0]["isVisible"] is True
        assert links[0]["repository"]["externalId"] == 2
        assert links[0]["repository"]["name"] == "repo-2"

    async def test_dangling_selection_is_reported(
        self, async_client: AsyncClient, user_data: dict, repo_record
    ):
        response = await async_client.post(
            "/api/v1/portfolio/repos",
            json={
                "userId": "1001",
                "userData": user_data,
                "selectedRepos": [1, 999],
                "repositories": [repo_record(1)],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert [link["repository"]["externalId"] for link in data["portfolio"]["repositories"]] == [1]
        assert data["diagnostics"] == [
            {
                "code": "REPOSITORY_NOT_FOUND",
                "message": "Repository 999 is not in the catalog",
                "externalId": 999,
            }
        ]

    async def test_malformed_record_does_not_fail_request(
        self, async_client: AsyncClient, user_data: dict, repo_record
    ):
        response = await async_client.post(
            "/api/v1/portfolio/repos",
            json={
                "userId": "1001",
                "userData": user_data,
                "selectedRepos": [1],
                "repositories": [{"id": "not-a-number"}, repo_record(1)],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data["portfolio"]["repositories"]) == 1
        assert data["diagnostics"][0]["code"] == "INVALID_REPOSITORY"
        assert data["diagnostics"][0]["externalId"] is None

    async def test_non_object_records_do_not_fail_request(
        self, async_client: AsyncClient, user_data: dict, repo_record
    ):
        response = await async_client.post(
            "/api/v1/portfolio/repos",
            json={
                "userId": "1001",
                "userData": user_data,
                "selectedRepos": [1],
                "repositories": [None, "repo-2", 3, repo_record(1)],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert [link["repository"]["externalId"] for link in data["portfolio"]["repositories"]] == [1]
        assert [d["code"] for d in data["diagnostics"]] == ["INVALID_REPOSITORY"] * 3

    async def test_one_portfolio_per_user(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        user_data: dict,
        repo_record,
    ):
        for _ in range(2):
            await async_client.post(
                "/api/v1/portfolio/repos",
                json={
                    "userId": "1001",
                    "userData": user_data,
                    "selectedRepos": [1],
                    "repositories": [repo_record(1)],
                },
            )
        await async_client.post(
            "/api/v1/portfolio/skills",
            json={"userId": "1001", "userData": user_data, "skills": [{"name": "Go"}]},
        )

        assert await db_session.scalar(select(func.count()).select_from(Portfolio)) == 1
