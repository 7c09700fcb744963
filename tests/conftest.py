"""Shared fixtures for the API tests."""

import asyncio
import os

os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-token-secret")
os.environ.setdefault("NODE_ENV", "development")

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.main import app
from app.database import ensure_indexes, get_mongo_db
from app.routers.auth import create_access_token
from app.config import settings


@pytest.fixture
def db():
    """Fresh in-memory database with the production indexes."""
    database = AsyncMongoMockClient()["solo-db-test"]
    asyncio.run(ensure_indexes(database))
    return database


@pytest.fixture
def client(db):
    """Test client wired to the in-memory database."""
    async def override_get_mongo_db():
        return db

    app.dependency_overrides[get_mongo_db] = override_get_mongo_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Attach an auth cookie for the given email to the test client."""
    def _login(email: str):
        client.cookies.set(settings.TOKEN_COOKIE_NAME, create_access_token({"email": email}))
        return client
    return _login


@pytest.fixture
def job_data():
    return {
        "title": "Backend Engineer Needed",
        "category": "web-development",
        "deadline": "2025-03-01T00:00:00",
        "min_price": 100,
        "max_price": 500,
        "description": "Build a REST API",
        "buyer": {"email": "buyer@example.com", "name": "Buyer", "photo": "https://example.com/b.png"},
    }


@pytest.fixture
def create_job(client, job_data):
    """Post a job and return its id."""
    def _create(**overrides):
        payload = {**job_data, **overrides}
        response = client.post("/add-job", json=payload)
        assert response.status_code == 200, response.text
        return response.json()["insertedId"]
    return _create


@pytest.fixture
def bid_data():
    def _bid(job_id: str, **overrides):
        payload = {
            "jobId": job_id,
            "email": "bidder@example.com",
            "buyer": "buyer@example.com",
            "price": 250,
            "deadline": "2025-02-20T00:00:00",
            "status": "Pending",
        }
        payload.update(overrides)
        return payload
    return _bid
