import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from unittest.mock import AsyncMock

from course_ingest.api.main import create_app
from course_ingest.boundary.db import get_async_db


@pytest.fixture
def client():
    app = create_app()
    return TestClient(app)


def _override_db(client, session):
    async def _db():
        yield session

    client.app.dependency_overrides[get_async_db] = _db


def test_health_check(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "message": "Server Healthy"}


def test_health_check_sets_correlation_header(client):
    response = client.get("/api/v1/health", headers={"X-Correlation-ID": "req-123"})
    assert response.headers["X-Correlation-ID"] == "req-123"

    generated = client.get("/api/v1/health")
    assert generated.headers["X-Correlation-ID"]


def test_health_check_db(client):
    session = AsyncMock()
    _override_db(client, session)

    response = client.get("/api/v1/health/db")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "message": "Database connection OK"}
    session.execute.assert_called_once()


def test_health_check_db_unavailable(client):
    session = AsyncMock()
    session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    _override_db(client, session)

    response = client.get("/api/v1/health/db")

    assert response.status_code == 503
