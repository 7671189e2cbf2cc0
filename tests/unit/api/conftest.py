"""Fixtures for API tests: an app wired to in-memory stores and a mock model."""

from collections.abc import Callable, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from canvaspartner.api.app import create_app
from canvaspartner.api.dependencies import (
    get_canvas_store,
    get_message_store,
    get_orchestrator,
    get_session_store,
)
from canvaspartner.config.models.agent import AgentConfig
from canvaspartner.orchestration.orchestrator import TurnOrchestrator
from canvaspartner.providers.llm import MockLLMProvider
from tests.factories.api import auth, sse_events


@pytest.fixture
def provider() -> MockLLMProvider:
    return MockLLMProvider(stream_chunk_size=5)


@pytest.fixture
def orchestrator(session_store, message_store, provider, registry) -> TurnOrchestrator:
    return TurnOrchestrator(
        session_store,
        message_store,
        provider,
        registry,
        AgentConfig(max_rounds=4, max_message_length=500),
    )


@pytest.fixture
def app(session_store, message_store, canvas_store, orchestrator) -> FastAPI:
    """Create the full application with in-memory dependencies."""
    app = create_app()
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_message_store] = lambda: message_store
    app.dependency_overrides[get_canvas_store] = lambda: canvas_store
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as client:
        yield client


@pytest.fixture
def post_chat(client: TestClient) -> Callable[..., list[dict]]:
    """POST /v1/chat and return the decoded stream events."""

    def _post(message: str, *, session_id: str = "s-1", user_id: str = "user-1", **extra):
        with client.stream(
            "POST",
            "/v1/chat",
            json={"session_id": session_id, "message": message, **extra},
            headers=auth(user_id),
        ) as response:
            assert response.status_code == 200
            return sse_events(response)

    return _post
