from typing import Optional

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.state import AppServices
from extraction.task_extractor import TaskExtractor
from fakes import REFERENCE_TIME, FakeProvider, InMemoryTaskStore, InMemoryUserStore
from llm.llm_client import LLMClient
from llm.providers.base import LLMProvider
from services import auth_service as auth_module
from services.auth_service import AuthService
from services.task_service import TaskService
from storage.task_store import TaskStore
from todo_ai.config import Settings


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    # minimum bcrypt cost keeps the auth tests quick
    monkeypatch.setattr(
        auth_module,
        "_pwd_context",
        auth_module.CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=4),
    )


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str = "[]", error: Optional[Exception] = None):
        return FakeProvider(response_text, error=error)
    return _make


@pytest.fixture
def task_store():
    return InMemoryTaskStore()


@pytest.fixture
def make_service(task_store):
    def _make(provider: LLMProvider, store: Optional[TaskStore] = None) -> TaskService:
        extractor = TaskExtractor(LLMClient(provider=provider))
        return TaskService(store or task_store, extractor, clock=lambda: REFERENCE_TIME)
    return _make


@pytest.fixture
def make_client(task_store):
    """Build a TestClient over in-memory stores and the given provider."""

    def _make(provider: Optional[LLMProvider] = None, store: Optional[TaskStore] = None) -> TestClient:
        settings = Settings(jwt_secret="test-secret", llm_provider="fake")
        extractor = TaskExtractor(LLMClient(provider=provider or FakeProvider()))
        services = AppServices(
            settings=settings,
            task_service=TaskService(store or task_store, extractor),
            auth_service=AuthService(InMemoryUserStore(), jwt_secret=settings.jwt_secret),
        )
        return TestClient(create_app(settings, services=services))

    return _make
