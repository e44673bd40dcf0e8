"""Shared pytest fixtures for all test modules.

Provides common fixtures for:
- An in-memory catalog seeded with the oslo-origo hierarchy
- In-memory subscription store and recording notifier
- Engine and dispatcher wired to the fakes
- Temporary database paths
- A JSON catalog export file
- Engine singleton reset
"""

import json
import os
import tempfile
from collections.abc import Generator

import pytest

from src.core.subscriptions.catalog import HierarchyResolver, InMemoryCatalog
from src.core.subscriptions.dispatcher import CommandDispatcher
from src.core.subscriptions.engine import SubscriptionEngine
from src.core.subscriptions.errors import StoreReadError, StoreWriteError
from src.core.subscriptions.models import Node, NodeKind, SubscriptionRecord
from src.core.subscriptions.repository import InMemorySubscriptionStore

ORGANIZATIONS = [
    Node(id="org-1", kind=NodeKind.ORGANIZATION, slug="oslo-origo", name="Oslo Origo"),
    Node(id="org-2", kind=NodeKind.ORGANIZATION, slug="bymiljoetaten", name="Bymiljøetaten"),
]
DEPARTMENTS = [
    Node(
        id="dep-1",
        kind=NodeKind.DEPARTMENT,
        slug="apen-by",
        name="Åpen by",
        organization_id="org-1",
    ),
    Node(
        id="dep-2",
        kind=NodeKind.DEPARTMENT,
        slug="dataspeilet",
        name="Dataspeilet",
        organization_id="org-1",
    ),
    Node(
        id="dep-3",
        kind=NodeKind.DEPARTMENT,
        slug="sykkel",
        name="Sykkel",
        organization_id="org-2",
    ),
]
PRODUCTS = [
    Node(
        id="prod-1",
        kind=NodeKind.PRODUCT,
        slug="oslonokkelen",
        name="Oslonøkkelen",
        organization_id="org-1",
        department_id="dep-1",
    ),
    Node(
        id="prod-2",
        kind=NodeKind.PRODUCT,
        slug="bysykkel",
        name="Bysykkel",
        organization_id="org-1",
        department_id="dep-1",
    ),
    Node(
        id="prod-3",
        kind=NodeKind.PRODUCT,
        slug="datahub",
        name="Datahub",
        organization_id="org-1",
        department_id="dep-2",
    ),
    Node(
        id="prod-4",
        kind=NodeKind.PRODUCT,
        slug="sykkelveier",
        name="Sykkelveier",
        organization_id="org-2",
        department_id="dep-3",
    ),
]
ALL_NODES = [*ORGANIZATIONS, *DEPARTMENTS, *PRODUCTS]

CATALOG_EXPORT = {
    "organizations": [{"id": "org-1", "slug": "oslo-origo", "name": "Oslo Origo"}],
    "departments": [
        {"id": "dep-1", "slug": "apen-by", "name": "Åpen by", "organization_id": "org-1"}
    ],
    "products": [
        {
            "id": "prod-1",
            "slug": "oslonokkelen",
            "name": "Oslonøkkelen",
            "organization_id": "org-1",
            "department_id": "dep-1",
        },
        {"id": "prod-9", "slug": "origo-portal", "organization_id": "org-1"},
    ],
}

OSLO_ORIGO_DESCENDANTS = ["apen-by", "dataspeilet", "oslonokkelen", "bysykkel", "datahub"]
APEN_BY_DESCENDANTS = ["oslonokkelen", "bysykkel"]


class RecordingNotifier:
    """Notifier fake that records every message it is asked to send."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    async def send(self, channel_id: str, message: str) -> str | None:
        self.messages.append((channel_id, message))
        return f"{len(self.messages)}.000"


class FailingWriteStore(InMemorySubscriptionStore):
    """In-memory store whose writes fail for selected slugs."""

    def __init__(self, failing_slugs: set[str]) -> None:
        super().__init__()
        self.failing_slugs = failing_slugs

    async def put(self, slug: str, record: SubscriptionRecord) -> None:
        if slug in self.failing_slugs:
            raise StoreWriteError(slug, "simulated outage")
        await super().put(slug, record)


class FailingReadStore(InMemorySubscriptionStore):
    """In-memory store whose reads fail for selected slugs.

    Raises StoreReadError unless another exception is supplied.
    """

    def __init__(self, failing_slugs: set[str], error: Exception | None = None) -> None:
        super().__init__()
        self.failing_slugs = failing_slugs
        self.error = error

    async def get(self, slug: str) -> SubscriptionRecord | None:
        if slug in self.failing_slugs:
            raise self.error or StoreReadError(slug, "simulated read outage")
        return await super().get(slug)


@pytest.fixture
def catalog() -> InMemoryCatalog:
    """Catalog with two organizations, three departments and four products."""
    return InMemoryCatalog(ALL_NODES)


@pytest.fixture
def store() -> InMemorySubscriptionStore:
    return InMemorySubscriptionStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def engine(catalog: InMemoryCatalog, store: InMemorySubscriptionStore) -> SubscriptionEngine:
    return SubscriptionEngine(HierarchyResolver(catalog), store)


@pytest.fixture
def dispatcher(
    engine: SubscriptionEngine, notifier: RecordingNotifier
) -> CommandDispatcher:
    return CommandDispatcher(engine=engine, notifier=notifier)


@pytest.fixture
def failing_engine(catalog: InMemoryCatalog):
    """Factory for an engine whose store fails writes for the given slugs.

    Returns:
        Callable taking a set of slugs and returning (engine, store).
    """

    def _make(failing_slugs: set[str]) -> tuple[SubscriptionEngine, FailingWriteStore]:
        failing_store = FailingWriteStore(failing_slugs)
        return SubscriptionEngine(HierarchyResolver(catalog), failing_store), failing_store

    return _make


@pytest.fixture
def failing_read_engine(catalog: InMemoryCatalog):
    """Factory for an engine whose store fails reads for the given slugs.

    Returns:
        Callable taking a set of slugs (and optionally an exception) and
        returning (engine, store).
    """

    def _make(
        failing_slugs: set[str], error: Exception | None = None
    ) -> tuple[SubscriptionEngine, FailingReadStore]:
        failing_store = FailingReadStore(failing_slugs, error)
        return SubscriptionEngine(HierarchyResolver(catalog), failing_store), failing_store

    return _make


@pytest.fixture
def temp_db() -> Generator[str, None, None]:
    """Create a temporary database file path.

    Yields:
        Path to temporary SQLite database file.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, "okr_notifier.db")


@pytest.fixture
def catalog_file(tmp_path) -> str:
    """Write CATALOG_EXPORT to a JSON file and return its path."""
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(CATALOG_EXPORT), encoding="utf-8")
    return str(path)


@pytest.fixture
def reset_engine_singleton() -> Generator[None, None, None]:
    """Reset the process-wide engine before and after a test."""
    from src.core.subscriptions.factory import reset_engine

    reset_engine()
    yield
    reset_engine()
