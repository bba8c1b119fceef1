"""Shared fixtures: isolated settings, a fresh SQLite store and an API client."""

from contextlib import ExitStack
from typing import Any, Callable, Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from friday.api import create_app
from friday.config import Settings
from friday.database import Database, SubmissionRepository
from friday.utils.time_utils import utc_iso_now

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        data_dir=tmp_path / "data",
        database_url="",
        admin_token=ADMIN_TOKEN,
        enable_analytics=False,
        logfire_token="",
        s3_bucket_name="",
    )


@pytest.fixture
def database(settings) -> Iterator[Database]:
    db = Database.from_settings(settings)
    db.ensure_schema()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    with database.session() as db:
        yield db


@pytest.fixture
def repository(session) -> SubmissionRepository:
    return SubmissionRepository(session)


def submission_fields(instance_id: str, score: int, **overrides: Any) -> Dict[str, Any]:
    fields = {
        "instance_id": instance_id,
        "handle": None,
        "score": score,
        "os": "linux",
        "arch": "x64",
        "timestamp": utc_iso_now(),
        "ip_address": "10.0.0.1",
        "user_agent": "pytest",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def seed(repository) -> Callable[..., int]:
    """Insert a committed submission row and return its id."""

    def insert(instance_id: str, score: int, **overrides: Any) -> int:
        row_id = repository.insert(submission_fields(instance_id, score, **overrides))
        repository.session.commit()
        return row_id

    return insert


@pytest.fixture
def make_client(settings, database) -> Iterator[Callable[..., TestClient]]:
    """Build a started TestClient, optionally with settings overrides."""
    with ExitStack() as stack:

        def build(**overrides: Any) -> TestClient:
            app_settings = settings.model_copy(update=overrides) if overrides else settings
            app = create_app(app_settings, database=database)
            return stack.enter_context(TestClient(app))

        yield build


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def make_fields() -> Callable[..., Dict[str, Any]]:
    return submission_fields
