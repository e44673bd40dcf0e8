# src/core/subscriptions/catalog_loader.py
"""Load the catalog hierarchy from a JSON export.

The file holds three lists keyed by collection name:

    {
      "organizations": [{"id": "org-1", "slug": "oslo-origo", "name": "Oslo Origo"}],
      "departments": [{"id": "dep-1", "slug": "apen-by", "organization_id": "org-1"}],
      "products": [
        {"id": "prod-1", "slug": "oslonokkelen",
         "organization_id": "org-1", "department_id": "dep-1"}
      ]
    }

Nodes are upserted by id, so loading the same file twice is harmless.
"""

import logging
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel

from src.core.subscriptions.models import Node, NodeKind

logger = logging.getLogger(__name__)


class WritableCatalog(Protocol):
    def upsert(self, node: Node) -> Node: ...


class OrganizationEntry(BaseModel):
    id: str
    slug: str
    name: str = ""


class DepartmentEntry(OrganizationEntry):
    organization_id: str


class ProductEntry(DepartmentEntry):
    department_id: str | None = None


class CatalogExport(BaseModel):
    """Parsed catalog file."""

    organizations: list[OrganizationEntry] = []
    departments: list[DepartmentEntry] = []
    products: list[ProductEntry] = []

    def to_nodes(self) -> list[Node]:
        """Return organizations, then departments, then products."""
        nodes = [
            Node(id=o.id, kind=NodeKind.ORGANIZATION, slug=o.slug, name=o.name)
            for o in self.organizations
        ]
        nodes.extend(
            Node(
                id=d.id,
                kind=NodeKind.DEPARTMENT,
                slug=d.slug,
                name=d.name,
                organization_id=d.organization_id,
            )
            for d in self.departments
        )
        nodes.extend(
            Node(
                id=p.id,
                kind=NodeKind.PRODUCT,
                slug=p.slug,
                name=p.name,
                organization_id=p.organization_id,
                department_id=p.department_id,
            )
            for p in self.products
        )
        return nodes


def load_catalog(path: str | Path, catalog: WritableCatalog) -> int:
    """Upsert every node in the JSON file at `path` into `catalog`.

    Returns:
        Number of nodes loaded.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the file does not match the format.
    """
    export = CatalogExport.model_validate_json(Path(path).read_text(encoding="utf-8"))
    nodes = export.to_nodes()
    for node in nodes:
        catalog.upsert(node)

    logger.info(
        "Loaded catalog from %s: %d organizations, %d departments, %d products",
        path,
        len(export.organizations),
        len(export.departments),
        len(export.products),
    )
    return len(nodes)
