import pytest
from fastapi.testclient import TestClient

from tasks_api.main import create_app
from tasks_api.repositories import InMemoryRepository
from tasks_api.settings import Settings


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        host="127.0.0.1",
        port=5000,
        store_url="memory://",
        cors_allow_origins=["*"],
        log_level="INFO",
    )


@pytest.fixture()
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture()
def app(settings, repo):
    return create_app(settings, repository=repo)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)
