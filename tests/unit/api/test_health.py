"""
Tests for the health check endpoint
"""

from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from api.health import router
from database.session import get_db
from storefront.config_store import EmailConfigCache, get_email_config_cache

pytestmark = pytest.mark.unit

app = FastAPI()
app.include_router(router)


@pytest.fixture
def client():
    cache = Mock(spec=EmailConfigCache)
    cache.is_loaded = False
    app.dependency_overrides[get_email_config_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_healthy(client, db_session):
    app.dependency_overrides[get_db] = lambda: db_session

    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["checks"]["database"]["status"] == "connected"
    assert data["checks"]["email_config_loaded"] is False
    assert "webhook_secret_configured" in data["checks"]


def test_database_down(client):
    db = Mock()
    db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    app.dependency_overrides[get_db] = lambda: db

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"
    assert response.json()["checks"]["database"]["status"] == "error"
