# src/core/subscriptions/catalog.py
"""Catalog lookups and hierarchy resolution.

The catalog of organizations, departments and products is owned by an
external system. This module defines the read-only protocol the engine
depends on, a SQLite-backed implementation, an in-memory implementation,
and the HierarchyResolver that turns raw lookups into nodes and children.
"""

import asyncio
import logging
import os
import sqlite3
from collections.abc import Iterable
from typing import Protocol

from src.core.subscriptions.errors import InvalidScopeError, NodeNotFoundError
from src.core.subscriptions.models import Node, NodeKind

logger = logging.getLogger(__name__)


class CatalogProtocol(Protocol):
    """Read-only access to the catalog hierarchy."""

    async def find_by_slug(self, kind: NodeKind, slug: str) -> list[Node]:
        """Return all nodes of the given kind with the slug."""
        ...

    async def find_children(self, kind: NodeKind, parent: Node) -> list[Node]:
        """Return all nodes of the given kind whose parent is `parent`.

        Departments and products match an organization by their
        organization reference; products match a department by their
        department reference.
        """
        ...


def _parent_field(parent: Node) -> str:
    if parent.kind is NodeKind.ORGANIZATION:
        return "organization_id"
    if parent.kind is NodeKind.DEPARTMENT:
        return "department_id"
    raise InvalidScopeError(parent.kind)


class InMemoryCatalog:
    """Catalog held in a list, in insertion order."""

    def __init__(self, nodes: Iterable[Node] = ()) -> None:
        self._nodes: list[Node] = list(nodes)

    def upsert(self, node: Node) -> Node:
        """Insert a node or replace the node with the same id."""
        for i, existing in enumerate(self._nodes):
            if existing.id == node.id:
                self._nodes[i] = node
                return node
        self._nodes.append(node)
        return node

    async def find_by_slug(self, kind: NodeKind, slug: str) -> list[Node]:
        return [n for n in self._nodes if n.kind is kind and n.slug == slug]

    async def find_children(self, kind: NodeKind, parent: Node) -> list[Node]:
        parent_field = _parent_field(parent)
        return [
            n
            for n in self._nodes
            if n.kind is kind and getattr(n, parent_field) == parent.id
        ]


class CatalogRepository:
    """SQLite-backed catalog.

    Stores nodes in a single `nodes` table. Slugs are indexed per kind but
    not declared unique: uniqueness belongs to the upstream catalog, and
    the resolver rejects ambiguous matches.

    Attributes:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str = "data/okr_notifier.db") -> None:
        self.db_path = db_path

        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._init_db()

    def _init_db(self) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS nodes (
                    id TEXT PRIMARY KEY,
                    kind TEXT NOT NULL,
                    slug TEXT NOT NULL,
                    name TEXT NOT NULL,
                    organization_id TEXT,
                    department_id TEXT
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_nodes_kind_slug
                ON nodes(kind, slug)
            """)
            conn.commit()
        finally:
            conn.close()

    def _row_to_node(self, row: tuple) -> Node:
        return Node(
            id=row[0],
            kind=NodeKind(row[1]),
            slug=row[2],
            name=row[3],
            organization_id=row[4],
            department_id=row[5],
        )

    def upsert(self, node: Node) -> Node:
        """Insert a node or replace the node with the same id."""
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute(
                """
                INSERT INTO nodes (
                    id, kind, slug, name, organization_id, department_id
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    kind = excluded.kind,
                    slug = excluded.slug,
                    name = excluded.name,
                    organization_id = excluded.organization_id,
                    department_id = excluded.department_id
                """,
                (
                    node.id,
                    node.kind.value,
                    node.slug,
                    node.name,
                    node.organization_id,
                    node.department_id,
                ),
            )
            conn.commit()
            return node
        finally:
            conn.close()

    def _select(self, where: str, params: tuple) -> list[Node]:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute(
                f"SELECT * FROM nodes WHERE {where} ORDER BY rowid", params
            )
            return [self._row_to_node(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    async def find_by_slug(self, kind: NodeKind, slug: str) -> list[Node]:
        return await asyncio.to_thread(
            self._select, "kind = ? AND slug = ?", (kind.value, slug)
        )

    async def find_children(self, kind: NodeKind, parent: Node) -> list[Node]:
        parent_field = _parent_field(parent)
        return await asyncio.to_thread(
            self._select, f"kind = ? AND {parent_field} = ?", (kind.value, parent.id)
        )


class HierarchyResolver:
    """Resolves slugs to nodes and nodes to their descendants."""

    def __init__(self, catalog: CatalogProtocol) -> None:
        self.catalog = catalog

    async def resolve(self, kind: NodeKind, slug: str) -> Node:
        """Resolve a slug to exactly one node.

        Raises:
            NodeNotFoundError: If zero or more than one node matches.
        """
        matches = await self.catalog.find_by_slug(kind, slug)
        if len(matches) != 1:
            if matches:
                logger.warning(
                    "Ambiguous slug %s for %s (%d matches)", slug, kind.value, len(matches)
                )
            raise NodeNotFoundError(kind, slug)
        return matches[0]

    async def children(self, node: Node) -> list[Node]:
        """Return every descendant a cascade on `node` applies to.

        Organizations yield their departments followed by their products;
        departments yield their products.

        Raises:
            InvalidScopeError: If `node` is a product.
        """
        if node.kind is NodeKind.ORGANIZATION:
            departments, products = await asyncio.gather(
                self.catalog.find_children(NodeKind.DEPARTMENT, node),
                self.catalog.find_children(NodeKind.PRODUCT, node),
            )
            return [*departments, *products]
        if node.kind is NodeKind.DEPARTMENT:
            return await self.catalog.find_children(NodeKind.PRODUCT, node)
        raise InvalidScopeError(node.kind)
