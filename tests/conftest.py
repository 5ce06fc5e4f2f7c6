"""Pytest configuration and shared fixtures."""

import asyncio
import os
import uuid

os.environ.setdefault("OTEL_ENABLE_TRACES", "false")
os.environ.setdefault("OTEL_ENABLE_METRICS", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.pop("OPENAI_API_KEY", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from mongomock_motor import AsyncMongoMockClient  # noqa: E402

from api.database import Database  # noqa: E402
from api.errors import GenerationError  # noqa: E402
from api.services import get_assistant, infer_icon  # noqa: E402


class FakeAssistant:
    """Stands in for GenerativeAssistant; records calls, never touches the network."""

    def __init__(self):
        self.summary_calls: list[str] = []
        self.chat_calls: list[dict] = []
        self.fail_summary = False
        self.fail_chat = False
        self.icon_delay = 0.0
        self.icon_cancelled = False

    async def summarize(self, content: str) -> str:
        self.summary_calls.append(content)
        if self.fail_summary:
            raise GenerationError("summary generation timed out after 15.0s")
        return f"Summary of: {content[:40]}"

    async def classify_icon(self, content: str):
        if self.icon_delay:
            try:
                await asyncio.sleep(self.icon_delay)
            except asyncio.CancelledError:
                self.icon_cancelled = True
                raise
        return infer_icon(content)

    async def converse(self, content: str, title: str, user_message: str) -> str:
        self.chat_calls.append({"title": title, "content": content, "message": user_message})
        if self.fail_chat:
            raise GenerationError("note_chat generation timed out after 30.0s")
        return f"About '{title}': {user_message}"

    async def converse_general(self, user_message: str) -> str:
        self.chat_calls.append({"message": user_message})
        if self.fail_chat:
            raise GenerationError("general_chat generation timed out after 30.0s")
        return f"General reply: {user_message}"


@pytest.fixture
def mock_db(monkeypatch):
    """In-memory MongoDB wired into Database for the app's lifespan."""
    client = AsyncMongoMockClient()

    async def connect():
        Database.client = client
        Database.db = client["thoughtsort_test"]
        await Database.initialize_collections()

    async def disconnect():
        Database.client = None
        Database.db = None

    monkeypatch.setattr(Database, "connect", staticmethod(connect))
    monkeypatch.setattr(Database, "disconnect", staticmethod(disconnect))
    yield client


@pytest.fixture
def fake_assistant():
    return FakeAssistant()


@pytest.fixture
def api_client(mock_db, fake_assistant):
    """FastAPI test client fixture with lifespan context."""
    from api.app import app

    app.dependency_overrides[get_assistant] = lambda: fake_assistant
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_user_data():
    """Sample user data for testing with unique email per test."""
    return {"email": f"test-{uuid.uuid4().hex[:8]}@example.com", "name": "Test User"}


@pytest.fixture
def auth_headers(api_client, sample_user_data):
    """Register a user and return its Authorization header."""
    response = api_client.post("/auth/register", json=sample_user_data)
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(api_client):
    """Authorization header of a second, unrelated user."""
    response = api_client.post(
        "/auth/register",
        json={"email": f"other-{uuid.uuid4().hex[:8]}@example.com", "name": "Other User"},
    )
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def sample_note_data():
    """Sample note data for testing."""
    return {"title": "Trip", "content": "Planning our vacation to Japan"}


@pytest.fixture
def sample_chat_message():
    """Sample chat message for testing."""
    return {"message": "Hello, this is a test message!"}
