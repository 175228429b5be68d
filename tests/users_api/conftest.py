"""
pytest configuration and fixtures for the users API testing suite
"""

import os

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017/users_api_test")

import httpx
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from app import app
from database.connection import get_users_collection


@pytest_asyncio.fixture
async def users_collection():
    """Fresh in-memory users collection per test"""
    client = AsyncMongoMockClient()
    collection = client["users_api_test"]["users"]
    await collection.delete_many({})
    yield collection
    await collection.drop()


@pytest_asyncio.fixture
async def api_client(users_collection):
    """HTTP client bound to the app with the in-memory collection injected"""
    app.dependency_overrides[get_users_collection] = lambda: users_collection
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def create_user(api_client):
    """Create a user through the API and return the response body"""
    async def _create(**fields):
        response = await api_client.post("/users/", json=fields)
        assert response.status_code == 201, response.text
        return response.json()
    return _create
