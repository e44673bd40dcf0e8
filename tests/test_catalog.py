"""Tests for catalog lookups and hierarchy resolution."""

import pytest

from src.core.subscriptions.catalog import (
    CatalogRepository,
    HierarchyResolver,
    InMemoryCatalog,
)
from src.core.subscriptions.errors import InvalidScopeError, NodeNotFoundError
from src.core.subscriptions.models import Node, NodeKind


class TestHierarchyResolver:
    """Test resolving slugs and children over the in-memory catalog."""

    @pytest.mark.asyncio
    async def test_resolve(self, catalog) -> None:
        node = await HierarchyResolver(catalog).resolve(NodeKind.ORGANIZATION, "oslo-origo")
        assert node.id == "org-1"

    @pytest.mark.asyncio
    async def test_resolve_missing(self, catalog) -> None:
        with pytest.raises(NodeNotFoundError):
            await HierarchyResolver(catalog).resolve(NodeKind.DEPARTMENT, "missing")

    @pytest.mark.asyncio
    async def test_resolve_ambiguous_slug(self, catalog) -> None:
        """Test more than one match is treated as not found."""
        catalog.upsert(Node(id="org-dup", kind=NodeKind.ORGANIZATION, slug="oslo-origo"))

        with pytest.raises(NodeNotFoundError):
            await HierarchyResolver(catalog).resolve(NodeKind.ORGANIZATION, "oslo-origo")

    @pytest.mark.asyncio
    async def test_organization_children(self, catalog) -> None:
        """Test departments come before products."""
        resolver = HierarchyResolver(catalog)
        org = await resolver.resolve(NodeKind.ORGANIZATION, "oslo-origo")

        children = await resolver.children(org)

        assert [c.slug for c in children] == [
            "apen-by",
            "dataspeilet",
            "oslonokkelen",
            "bysykkel",
            "datahub",
        ]

    @pytest.mark.asyncio
    async def test_department_children(self, catalog) -> None:
        resolver = HierarchyResolver(catalog)
        dep = await resolver.resolve(NodeKind.DEPARTMENT, "apen-by")

        children = await resolver.children(dep)

        assert [c.slug for c in children] == ["oslonokkelen", "bysykkel"]

    @pytest.mark.asyncio
    async def test_product_has_no_children(self, catalog) -> None:
        resolver = HierarchyResolver(catalog)
        product = await resolver.resolve(NodeKind.PRODUCT, "datahub")

        with pytest.raises(InvalidScopeError):
            await resolver.children(product)

    @pytest.mark.asyncio
    async def test_empty_organization(self) -> None:
        org = Node(id="org-x", kind=NodeKind.ORGANIZATION, slug="empty")
        resolver = HierarchyResolver(InMemoryCatalog([org]))

        assert await resolver.children(org) == []


class TestCatalogRepository:
    """Test the SQLite-backed catalog."""

    @pytest.fixture
    def repo(self, temp_db, catalog) -> CatalogRepository:
        repo = CatalogRepository(db_path=temp_db)
        for node in catalog._nodes:
            repo.upsert(node)
        return repo

    @pytest.mark.asyncio
    async def test_find_by_slug(self, repo) -> None:
        nodes = await repo.find_by_slug(NodeKind.PRODUCT, "oslonokkelen")

        assert len(nodes) == 1
        assert nodes[0] == Node(
            id="prod-1",
            kind=NodeKind.PRODUCT,
            slug="oslonokkelen",
            name="Oslonøkkelen",
            organization_id="org-1",
            department_id="dep-1",
        )

    @pytest.mark.asyncio
    async def test_find_by_slug_respects_kind(self, repo) -> None:
        assert await repo.find_by_slug(NodeKind.ORGANIZATION, "apen-by") == []

    @pytest.mark.asyncio
    async def test_upsert_replaces_node(self, repo) -> None:
        repo.upsert(
            Node(
                id="prod-1",
                kind=NodeKind.PRODUCT,
                slug="oslonokkelen-v2",
                name="Oslonøkkelen",
                organization_id="org-1",
                department_id="dep-1",
            )
        )

        assert await repo.find_by_slug(NodeKind.PRODUCT, "oslonokkelen") == []
        assert len(await repo.find_by_slug(NodeKind.PRODUCT, "oslonokkelen-v2")) == 1

    @pytest.mark.asyncio
    async def test_resolver_over_sqlite(self, repo) -> None:
        resolver = HierarchyResolver(repo)
        org = await resolver.resolve(NodeKind.ORGANIZATION, "oslo-origo")

        children = await resolver.children(org)

        assert [c.slug for c in children] == [
            "apen-by",
            "dataspeilet",
            "oslonokkelen",
            "bysykkel",
            "datahub",
        ]

    @pytest.mark.asyncio
    async def test_find_children_of_department(self, repo) -> None:
        dep = (await repo.find_by_slug(NodeKind.DEPARTMENT, "dataspeilet"))[0]

        products = await repo.find_children(NodeKind.PRODUCT, dep)

        assert [p.slug for p in products] == ["datahub"]
