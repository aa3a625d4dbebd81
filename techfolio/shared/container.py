# techfolio/shared/container.py
from dependency_injector import containers, providers

from techfolio.shared.config import settings, StorageBackend
from techfolio.adapters.persistence.memory_repo import (
    InMemoryCategoryRepository,
    InMemoryContentRepository,
    InMemoryTagRepository,
)
from techfolio.adapters.persistence.sql import (
    SqlCategoryRepository,
    SqlContentRepository,
    SqlTagRepository,
    bootstrap,
)

from techfolio.core.use_cases.category_tree import CategoryTree
from techfolio.core.use_cases.content_lifecycle import ContentLifecycle
from techfolio.core.use_cases.tag_resolver import TagResolver
from techfolio.core.use_cases.dispatcher import build_dispatcher

def _backend_key(backend) -> str:
    return StorageBackend(backend).value

class Container(containers.DeclarativeContainer):
    """
    Dependency Injection Container.

    This declarative container defines the assembly instructions for the application.
    """

    # 1. Configuration
    # We load settings directly, but wrapping them allows overriding in tests.
    config = providers.Configuration(pydantic_settings=[settings])

    # 2. Gateways (Repository Adapters)

    # Engine + schema are created once, on first use of a SQL repository.
    db_session_factory = providers.Singleton(
        bootstrap,
        url=config.DATABASE_URL,
        echo=config.DEBUG,
    )

    storage_backend = providers.Callable(_backend_key, config.STORAGE_BACKEND)

    # Singletons: the in-memory stores ARE the data, so there must be one each.
    category_repository = providers.Selector(
        storage_backend,
        memory=providers.Singleton(InMemoryCategoryRepository),
        sql=providers.Singleton(SqlCategoryRepository, session_factory=db_session_factory),
    )

    content_repository = providers.Selector(
        storage_backend,
        memory=providers.Singleton(InMemoryContentRepository),
        sql=providers.Singleton(SqlContentRepository, session_factory=db_session_factory),
    )

    tag_repository = providers.Selector(
        storage_backend,
        memory=providers.Singleton(InMemoryTagRepository),
        sql=providers.Singleton(SqlTagRepository, session_factory=db_session_factory),
    )

    # 3. Use Cases (Application Logic)

    # Factory: New instance created for every request (stateless logic),
    # but with Singleton dependencies injected.

    tag_resolver = providers.Factory(
        TagResolver,
        repo=tag_repository,
        max_attempts=config.TAG_RESOLVE_MAX_ATTEMPTS,
    )

    category_tree = providers.Factory(
        CategoryTree,
        repo=category_repository,
        max_depth=config.CATEGORY_MAX_DEPTH,
        default_delete_policy=config.CATEGORY_DELETE_POLICY,
        max_attempts=config.TREE_COMMIT_MAX_ATTEMPTS,
    )

    content_lifecycle = providers.Factory(
        ContentLifecycle,
        repo=content_repository,
        categories=category_repository,
        tags=tag_resolver,
    )

    # 4. Mediator
    dispatcher = providers.Factory(
        build_dispatcher,
        tree=category_tree,
        content=content_lifecycle,
        tags=tag_resolver,
    )

# Instantiate the container for global access (e.g. by FastAPI)
container = Container()
