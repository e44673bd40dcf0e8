# src/core/subscriptions/factory.py
"""Factory functions wiring the subscription components together.

The engine is shared per process; dispatchers are cheap and built per
notifier so each interface can supply its own Slack client.
"""

import logging

from src.config import settings
from src.core.subscriptions.catalog import (
    CatalogProtocol,
    CatalogRepository,
    HierarchyResolver,
    InMemoryCatalog,
)
from src.core.subscriptions.catalog_loader import load_catalog
from src.core.subscriptions.dispatcher import CommandDispatcher
from src.core.subscriptions.engine import SubscriptionEngine
from src.core.subscriptions.notification import NotificationProtocol
from src.core.subscriptions.repository import (
    InMemorySubscriptionStore,
    SubscriptionRepository,
    SubscriptionStore,
)

logger = logging.getLogger(__name__)


def create_engine(
    catalog: CatalogProtocol | None = None,
    store: SubscriptionStore | None = None,
    backend: str | None = None,
    db_path: str | None = None,
    catalog_path: str | None = None,
) -> SubscriptionEngine:
    """Create a SubscriptionEngine.

    Collaborators that are not passed in are created for the configured
    storage backend. A catalog created here is populated from the
    catalog export when one is configured.

    Args:
        catalog: Catalog to resolve nodes from.
        store: Subscription store.
        backend: "sqlite" or "memory". Defaults to settings.storage_backend.
        db_path: SQLite path. Defaults to settings.database_path.
        catalog_path: JSON catalog export loaded into a catalog created
            here. Defaults to settings.catalog_path; empty skips loading.

    Returns:
        Configured SubscriptionEngine.

    Raises:
        ValueError: If the backend is unknown.
    """
    backend = backend or settings.storage_backend
    db_path = db_path or settings.database_path

    if backend == "sqlite":
        store = store or SubscriptionRepository(db_path=db_path)
    elif backend == "memory":
        store = store or InMemorySubscriptionStore()
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    if catalog is None:
        catalog = _create_catalog(backend, db_path, catalog_path)

    logger.info("Subscription engine created with %s backend", backend)
    return SubscriptionEngine(HierarchyResolver(catalog), store)


def _create_catalog(
    backend: str, db_path: str, catalog_path: str | None
) -> CatalogRepository | InMemoryCatalog:
    catalog = CatalogRepository(db_path=db_path) if backend == "sqlite" else InMemoryCatalog()
    catalog_path = catalog_path if catalog_path is not None else settings.catalog_path
    if catalog_path:
        load_catalog(catalog_path, catalog)
    return catalog


_engine: SubscriptionEngine | None = None


def get_engine() -> SubscriptionEngine:
    """Get the process-wide SubscriptionEngine singleton."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def reset_engine() -> None:
    """Drop the engine singleton (for testing)."""
    global _engine
    _engine = None


def create_dispatcher(
    notifier: NotificationProtocol, engine: SubscriptionEngine | None = None
) -> CommandDispatcher:
    """Create a CommandDispatcher posting confirmations through `notifier`."""
    return CommandDispatcher(engine=engine or get_engine(), notifier=notifier)
