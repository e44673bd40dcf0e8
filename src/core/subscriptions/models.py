# src/core/subscriptions/models.py
"""Data models for catalog nodes and channel subscriptions.

Records are treated as immutable values: every mutation helper returns a
new SubscriptionRecord so a record fetched from a store can be shared
between concurrent cascade steps without copying.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class NodeKind(str, Enum):
    """Kind of node in the catalog hierarchy."""

    ORGANIZATION = "organization"
    DEPARTMENT = "department"
    PRODUCT = "product"

    @property
    def collection(self) -> str:
        """Plural collection name used in stored documents."""
        return f"{self.value}s"

    @property
    def can_cascade(self) -> bool:
        """Whether deep subscriptions are allowed on this kind."""
        return self is not NodeKind.PRODUCT

    @classmethod
    def from_collection(cls, name: str) -> "NodeKind":
        """Parse either the singular or the plural (collection) form."""
        return cls(name[:-1] if name.endswith("s") else name)


@dataclass(frozen=True)
class Node:
    """An organization, department or product in the catalog.

    Attributes:
        id: Opaque identifier assigned by the catalog.
        kind: Node kind.
        slug: Human-readable identifier, unique within its kind.
        name: Display name.
        organization_id: Parent organization (departments and products).
        department_id: Parent department (products only).
    """

    id: str
    kind: NodeKind
    slug: str
    name: str = ""
    organization_id: str | None = None
    department_id: str | None = None


@dataclass(frozen=True)
class ChannelSubscription:
    """A single channel's subscription on a record.

    Attributes:
        channel_id: Slack channel ID.
        deep: True if the subscription cascades to all descendants.
        cascaded_from: Slug of the ancestor whose cascade inserted this
            entry, or None for entries created directly.
    """

    channel_id: str
    deep: bool = False
    cascaded_from: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel_id,
            "deep": self.deep,
            "cascaded_from": self.cascaded_from,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChannelSubscription":
        return cls(
            channel_id=data["channel"],
            deep=bool(data.get("deep", False)),
            cascaded_from=data.get("cascaded_from"),
        )


@dataclass(frozen=True)
class SubscriptionRecord:
    """Subscriptions for one node, keyed by the node's slug.

    At most one ChannelSubscription exists per channel_id. A record with
    no channels is kept in the store rather than deleted and behaves like
    an absent record.

    Attributes:
        node_kind: Kind of the subscribed node.
        slug: Slug of the subscribed node.
        channels: Channel subscriptions in insertion order.
    """

    node_kind: NodeKind
    slug: str
    channels: tuple[ChannelSubscription, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls, node: Node) -> "SubscriptionRecord":
        """Create a record with no channels for a node."""
        return cls(node_kind=node.kind, slug=node.slug)

    def find(self, channel_id: str) -> ChannelSubscription | None:
        """Return the channel's entry, or None if it is not subscribed."""
        for channel in self.channels:
            if channel.channel_id == channel_id:
                return channel
        return None

    def has_channel(self, channel_id: str) -> bool:
        return self.find(channel_id) is not None

    def with_channel(self, subscription: ChannelSubscription) -> "SubscriptionRecord":
        """Return a copy with the subscription appended.

        Raises:
            ValueError: If the channel already has an entry.
        """
        if self.has_channel(subscription.channel_id):
            raise ValueError(
                f"Channel {subscription.channel_id} already subscribed to {self.slug}"
            )
        return replace(self, channels=(*self.channels, subscription))

    def without_channel(self, channel_id: str) -> "SubscriptionRecord":
        """Return a copy with the channel's entry removed."""
        return replace(
            self,
            channels=tuple(c for c in self.channels if c.channel_id != channel_id),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored document format."""
        return {
            "type": self.node_kind.collection,
            "name": self.slug,
            "channels": [c.to_dict() for c in self.channels],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubscriptionRecord":
        """Create from a stored document.

        Duplicate channel entries in legacy documents are collapsed,
        keeping the first occurrence.
        """
        channels: list[ChannelSubscription] = []
        seen: set[str] = set()
        for raw in data.get("channels") or []:
            channel = ChannelSubscription.from_dict(raw)
            if channel.channel_id in seen:
                continue
            seen.add(channel.channel_id)
            channels.append(channel)

        return cls(
            node_kind=NodeKind.from_collection(data["type"]),
            slug=data["name"],
            channels=tuple(channels),
        )


@dataclass
class CascadeFailure:
    """A descendant that could not be read or written during a cascade."""

    slug: str
    reason: str


@dataclass
class CascadeResult:
    """Per-descendant outcome of a cascading subscribe or unsubscribe.

    Attributes:
        root: Slug of the organization or department the cascade started at.
        channel_id: Channel being subscribed or unsubscribed.
        updated: Descendant slugs whose records were written.
        skipped: Descendant slugs that needed no change.
        failed: Descendants whose read or write failed.
    """

    root: str
    channel_id: str
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[CascadeFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def failed_slugs(self) -> list[str]:
        return [f.slug for f in self.failed]
