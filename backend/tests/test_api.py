"""
HTTP tests for the FastAPI application

Tests cover:
- POST /resume-parse and GET /resume-parse-status (stub and async strategies)
- POST /api/search/summary (auth, validation, lookup, summary text)
- Error rendering, method checks, /health and /metrics
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from unittest.mock import AsyncMock, MagicMock, patch

from hirewise.auth import COOKIE_NAME
from hirewise.container import build_container
from hirewise.exceptions import StorageError
from hirewise.main import create_app
from hirewise.services.generation import MockTextGenerator
from hirewise.services.match_explainer import UNAVAILABLE_SUMMARY


@pytest_asyncio.fixture
async def container(settings):
    container = build_container(settings)
    await container.database.init_db()
    yield container
    await container.database.dispose()


@pytest_asyncio.fixture
async def client(container):
    app = create_app(container=container)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers(session_token):
    return {"Authorization": f"Bearer {session_token}"}


@pytest_asyncio.fixture
async def mumbai_candidate(container):
    return await container.candidate_store.add_candidate(
        id="c1",
        name="Priya",
        current_role="React Developer",
        current_company="Acme",
        location="Mumbai",
        total_experience="6 years",
        technical_skills=["React", "TypeScript"],
    )


class TestResumeParse:
    """Test intake submission and polling."""

    @pytest.mark.asyncio
    async def test_submit_then_poll(self, client):
        response = await client.post("/resume-parse", json={"file_path": "r1.pdf", "candidate_id": "c1"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        job_id = body["parsing_job_id"]

        response = await client.get("/resume-parse-status", params={"parsing_job_id": job_id})

        assert response.status_code == 200
        job = response.json()["parsing_job"]
        assert job["id"] == job_id
        assert job["candidate_id"] == "c1"
        assert job["status"] == "completed"
        assert job["parsing_method"] == "edge_stub"
        assert job["completed_at"] is not None

    @pytest.mark.asyncio
    async def test_async_strategy_returns_queued(self, settings):
        settings.extraction_strategy = "async"
        container = build_container(settings)
        await container.database.init_db()
        dispatcher = MagicMock()
        container.strategy._dispatcher = dispatcher
        app = create_app(container=container)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/resume-parse", json={"file_path": "r1.pdf", "candidate_id": "c1"})
            job_id = response.json()["parsing_job_id"]
            polled = await client.get("/resume-parse-status", params={"parsing_job_id": job_id})
        await container.database.dispose()

        assert response.json()["status"] == "queued"
        dispatcher.assert_called_once_with(job_id, "r1.pdf")
        assert polled.json()["parsing_job"]["completed_at"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"candidate_id": "c1"},
        {"file_path": "r1.pdf"},
        {"file_path": "", "candidate_id": "c1"},
        {"file_path": "r1.pdf", "candidate_id": "  "},
        {"file_path": ["r1.pdf"], "candidate_id": "c1"},
    ])
    async def test_invalid_body(self, client, body):
        response = await client.post("/resume-parse", json=body)

        assert response.status_code == 400
        assert response.json()["error_type"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_malformed_json(self, client):
        response = await client.post(
            "/resume-parse", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_status_requires_parameter(self, client):
        response = await client.get("/resume-parse-status")

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_status_unknown_job(self, client):
        response = await client.get("/resume-parse-status", params={"parsing_job_id": "missing"})

        assert response.status_code == 404
        assert response.json()["error"] == "Parsing job not found"

    @pytest.mark.asyncio
    async def test_wrong_methods(self, client):
        assert (await client.get("/resume-parse")).status_code == 405
        assert (await client.post("/resume-parse-status")).status_code == 405

    @pytest.mark.asyncio
    async def test_storage_failure_is_500(self, client, container):
        with patch.object(container.job_store, "get_active_job", AsyncMock(side_effect=StorageError("db down"))):
            response = await client.post("/resume-parse", json={"file_path": "r1.pdf", "candidate_id": "c1"})

        assert response.status_code == 500
        assert response.json()["error_type"] == "StorageError"


class TestSearchSummary:
    """Test the authenticated summary endpoint."""

    @pytest.mark.asyncio
    async def test_unauthenticated_makes_no_lookup(self, client, container):
        with patch.object(container.candidate_store, "get_candidate", AsyncMock()) as lookup:
            response = await client.post("/api/search/summary", json={"candidateId": "c1", "type": "query", "query": "x"})

        assert response.status_code == 401
        lookup.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_candidate_id(self, client, auth_headers):
        response = await client.post("/api/search/summary", json={"type": "query", "query": "x"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Missing candidateId"

    @pytest.mark.asyncio
    async def test_unknown_candidate(self, client, auth_headers):
        response = await client.post(
            "/api/search/summary", json={"candidateId": "ghost", "type": "query", "query": "x"}, headers=auth_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_location_mismatch_reaches_prompt(self, client, container, auth_headers, mumbai_candidate):
        """The explanation is grounded in the facts passed to the generator prompt."""
        generator = MockTextGenerator(default="Strong frontend fit.")
        container.explainer.generator = generator

        response = await client.post(
            "/api/search/summary",
            json={"candidateId": "c1", "type": "query", "query": "React developer, Pune, 5 years"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["candidateId"] == "c1"
        assert body["summary"] == "Strong frontend fit."
        assert "Location mismatch (Mumbai vs Pune)" in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_session_cookie_and_no_generator(self, client, session_token, mumbai_candidate):
        response = await client.post(
            "/api/search/summary",
            json={"candidateId": "c1", "type": "jd", "jd": "Fleet manager, Delhi"},
            headers={"Cookie": f"{COOKIE_NAME}={session_token}"},
        )

        assert response.status_code == 200
        assert response.json() == {"candidateId": "c1", "summary": UNAVAILABLE_SUMMARY}

    @pytest.mark.asyncio
    async def test_lookup_failure_is_500(self, client, container, auth_headers):
        with patch.object(container.candidate_store, "get_candidate", AsyncMock(side_effect=StorageError("db down"))):
            response = await client.post(
                "/api/search/summary", json={"candidateId": "c1", "query": "x"}, headers=auth_headers
            )

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_generation_failure_is_not_an_http_error(self, client, container, auth_headers, mumbai_candidate):
        container.explainer.generator = MockTextGenerator([RuntimeError("provider down")])

        response = await client.post(
            "/api/search/summary", json={"candidateId": "c1", "query": "React"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["summary"] == "Summary generation failed."


class TestServiceEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "generation_configured": False}

    @pytest.mark.asyncio
    async def test_metrics(self, client):
        await client.post("/resume-parse", json={"file_path": "r1.pdf", "candidate_id": "c9"})

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "parsing_job_transitions_total" in response.text
        assert "http_requests_total" in response.text
