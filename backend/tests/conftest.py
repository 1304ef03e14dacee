"""
Shared fixtures.

Every test that touches the database gets its own SQLite file under
tmp_path, so tests never share rows.
"""

import pytest
import pytest_asyncio

from hirewise.auth import create_session_token
from hirewise.config import Settings
from hirewise.database import Database
from hirewise.stores import CandidateStore, JobStore

TEST_SECRET = "test-secret-key"


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from .env and the real environment defaults."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'hirewise.db'}",
        secret_key=TEST_SECRET,
        generation_provider="none",
        interpreter_provider="keyword",
        extraction_strategy="stub",
        field_extractor="none",
        resume_storage_dir=str(tmp_path / "resumes"),
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings.database_url)
    await db.init_db()
    yield db
    await db.dispose()


@pytest.fixture
def job_store(database):
    return JobStore(database)


@pytest.fixture
def candidate_store(database):
    return CandidateStore(database)


@pytest.fixture
def session_token():
    return create_session_token(TEST_SECRET)
