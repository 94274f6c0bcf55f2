"""
Integration test fixtures. Overrides get_db for API tests with an in-memory DB
and get_llm with a scripted fake so no Ollama server is needed.
"""
from typing import Optional

import pytest

from lajan.llm import LLM


class FakeLLM(LLM):
    """Scripted generator: returns the configured values or raises the configured error."""

    def __init__(self, structured=None, text: Optional[str] = None, error: Optional[Exception] = None):
        self.structured = structured
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def generate(self, prompt, *, system=None, timeout=None):
        self.calls.append(("generate", prompt))
        if self.error:
            raise self.error
        return self.text

    async def generate_structured(self, prompt, schema, *, system=None, timeout=None):
        self.calls.append(("generate_structured", prompt))
        if self.error:
            raise self.error
        return self.structured


@pytest.fixture
def override_get_db(session_factory):
    """Session factory over a seeded in-memory database for API tests."""
    from api.services.catalog import seed_catalog

    seed_db = session_factory()
    try:
        seed_catalog(seed_db)
    finally:
        seed_db.close()

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def fake_llm():
    return FakeLLM(error=ConnectionError("ollama not running"))


@pytest.fixture
def api_client(override_get_db, fake_llm):
    """FastAPI TestClient with in-memory DB and fake generator overrides."""
    from fastapi.testclient import TestClient
    from api.api import app
    from api.config import get_db
    from api.services.quiz_service import get_llm

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm] = lambda: fake_llm
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def registered_user(api_client):
    """Registers a user through the API; the client keeps the auth cookie."""
    response = api_client.post(
        "/auth/register",
        json={
            "email": "learner@example.com",
            "password": "testpass123",
            "confirm_password": "testpass123",
            "name": "Test Learner",
            "preferred_topics": ["banking"],
            "learning_style": "practical",
        },
    )
    assert response.status_code == 200, response.text
    data = response.json()
    return {"id": data["user_id"], "token": data["access_token"], "email": "learner@example.com"}
