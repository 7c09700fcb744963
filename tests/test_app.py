"""Tests for the root routes and the shared error envelope."""

import asyncio
import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from app.database import lifespan
from app.main import app


def test_root_greeting(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "Hello from SoloSphere Server...."
    assert response.headers["content-type"].startswith("text/plain")


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_unknown_route_uses_envelope(client):
    response = client.get("/no-such-route")

    assert response.status_code == 404
    assert response.json() == {"success": False, "status": 404, "message": "Not Found"}


def test_database_unavailable(client):
    with patch("app.crud.list_jobs", AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))):
        response = client.get("/jobs")

    assert response.status_code == 503
    assert response.json()["message"] == "Database unavailable"


def test_unexpected_error_becomes_500(client):
    with patch("app.crud.list_jobs", AsyncMock(side_effect=RuntimeError("boom"))):
        response = client.get("/jobs")

    assert response.status_code == 500
    assert response.json() == {"success": False, "status": 500, "message": "Internal server error"}


def test_cors_allows_configured_origin(client):
    response = client.options(
        "/jobs",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )

    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_unknown_origin(client):
    response = client.options(
        "/jobs",
        headers={"Origin": "https://evil.example.com", "Access-Control-Request-Method": "GET"},
    )

    assert "access-control-allow-origin" not in response.headers


def test_health_time_is_utc(client):
    time = datetime.datetime.fromisoformat(client.get("/health").json()["time"])

    assert time.utcoffset() == datetime.timedelta(0)


def test_startup_failure_closes_client():
    mongo_client = MagicMock()
    mongo_client.admin.command = AsyncMock(return_value={"ok": 1})

    async def start():
        async with lifespan(app):
            pass

    with patch("app.database.AsyncIOMotorClient", return_value=mongo_client), \
            patch("app.database.ensure_indexes", AsyncMock(side_effect=OperationFailure("duplicate key"))):
        with pytest.raises(OperationFailure):
            asyncio.run(start())

    mongo_client.close.assert_called_once()
