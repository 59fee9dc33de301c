"""
pytest configuration and fixtures.
"""

from typing import Generator
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from users_api.config import Settings
from users_api.handlers import UsersEndpoint
from users_api.main import create_app
from users_api.models import UserEntity
from users_api.repository import UserRepository


class FakeLinks:
    """Link builder with predictable URLs."""

    def user_url(self, user_id: UUID) -> str:
        return f"http://test/api/users/{user_id}"

    def users_url(self, page_number: int, page_size: int) -> str:
        return f"http://test/api/users?pageNumber={page_number}&pageSize={page_size}"


def make_user(login: str = "jdoe", first_name: str = "John", last_name: str = "Doe",
              games_played: int = 0, current_game_id: UUID = None) -> UserEntity:
    return UserEntity(
        login=login,
        first_name=first_name,
        last_name=last_name,
        games_played=games_played,
        current_game_id=current_game_id,
    )


@pytest.fixture
def repository() -> UserRepository:
    """Fresh in-memory repository."""
    return UserRepository()


@pytest.fixture
def endpoint(repository: UserRepository) -> UsersEndpoint:
    return UsersEndpoint(repository)


@pytest.fixture
def links() -> FakeLinks:
    return FakeLinks()


@pytest.fixture
def client(repository: UserRepository) -> Generator[TestClient, None, None]:
    """HTTP client against an app sharing the `repository` fixture."""
    app = create_app(repository=repository, settings=Settings(log_level="WARNING"))
    with TestClient(app) as test_client:
        yield test_client
