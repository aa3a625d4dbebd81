# tests/conftest.py
import pytest

from techfolio.shared.container import container as app_container
from techfolio.core.domain.models import Role
from techfolio.adapters.persistence.memory_repo import (
    InMemoryCategoryRepository,
    InMemoryContentRepository,
    InMemoryTagRepository,
)

@pytest.fixture(scope="function")
def category_repo():
    """Returns an empty in-memory category store."""
    return InMemoryCategoryRepository()

@pytest.fixture(scope="function")
def content_repo():
    return InMemoryContentRepository()

@pytest.fixture(scope="function")
def tag_repo():
    return InMemoryTagRepository()

@pytest.fixture(scope="function")
def container(category_repo, content_repo, tag_repo):
    """
    Sets up the Dependency Injection Container for testing.
    It overrides the storage providers with fresh in-memory repositories, so
    every test starts from an empty system.

    The application-wide container is used (not a new one) because the API
    wiring in `create_app` resolves dependencies from it.
    """
    app_container.category_repository.override(category_repo)
    app_container.content_repository.override(content_repo)
    app_container.tag_repository.override(tag_repo)

    yield app_container

    # Clean up overrides after test
    app_container.category_repository.reset_override()
    app_container.content_repository.reset_override()
    app_container.tag_repository.reset_override()
    app_container.unwire()

@pytest.fixture
def tree(container):
    return container.category_tree()

@pytest.fixture
def content(container):
    return container.content_lifecycle()

@pytest.fixture
def tags(container):
    return container.tag_resolver()

@pytest.fixture
def dispatcher(container):
    return container.dispatcher()

@pytest.fixture
def admin():
    return Role.ADMIN

@pytest.fixture
def user():
    return Role.USER
