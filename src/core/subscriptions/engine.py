# src/core/subscriptions/engine.py
"""Subscription state transitions for a channel on a catalog node.

Every (slug, channel) pair is either unsubscribed, subscribed directly,
or subscribed deeply. A deep subscription on an organization or
department is applied by copying a plain entry onto every descendant
that lacks one at the time of subscribing; only the root's own entry is
marked deep.

Cascades are not atomic. Descendant reads and writes fan out
concurrently, failures are collected per slug in a CascadeResult, and
the root record is written last so a failed cascade can be retried.
"""

import asyncio
import logging

from src.core.subscriptions.catalog import HierarchyResolver
from src.core.subscriptions.errors import (
    AlreadySubscribedError,
    InvalidScopeError,
    NoDeepSubscriptionError,
    NotSubscribedError,
    StoreError,
    SubscriptionNotFoundError,
)
from src.core.subscriptions.models import (
    CascadeFailure,
    CascadeResult,
    ChannelSubscription,
    Node,
    NodeKind,
    SubscriptionRecord,
)
from src.core.subscriptions.repository import SubscriptionStore

logger = logging.getLogger(__name__)


class SubscriptionEngine:
    """Applies subscribe and unsubscribe operations to the store.

    Attributes:
        resolver: HierarchyResolver for node and descendant lookups.
        store: SubscriptionStore holding the records.

    Example:
        >>> engine = SubscriptionEngine(HierarchyResolver(catalog), store)
        >>> await engine.subscribe(NodeKind.PRODUCT, "oslonokkelen", "C123")
        >>> result = await engine.subscribe_all(
        ...     NodeKind.ORGANIZATION, "oslo-origo", "C123"
        ... )
        >>> result.failed_slugs
        []
    """

    def __init__(self, resolver: HierarchyResolver, store: SubscriptionStore) -> None:
        self.resolver = resolver
        self.store = store

    async def subscribe(
        self, kind: NodeKind, slug: str, channel_id: str
    ) -> SubscriptionRecord:
        """Subscribe a channel directly to a node.

        Returns:
            The stored record.

        Raises:
            NodeNotFoundError: If the node does not resolve.
            AlreadySubscribedError: If the channel has any entry on the node.
        """
        node = await self.resolver.resolve(kind, slug)
        record = await self.store.get(node.slug) or SubscriptionRecord.empty(node)

        if record.has_channel(channel_id):
            raise AlreadySubscribedError(node.slug, channel_id)

        record = record.with_channel(ChannelSubscription(channel_id))
        await self.store.put(node.slug, record)
        logger.info("Channel %s subscribed to %s %s", channel_id, kind.value, node.slug)
        return record

    async def unsubscribe(
        self, kind: NodeKind, slug: str, channel_id: str
    ) -> SubscriptionRecord:
        """Remove a channel's entry from a node, deep or not.

        Descendant entries created by an earlier cascade are left in place.

        Raises:
            NodeNotFoundError: If the node does not resolve.
            SubscriptionNotFoundError: If the node has no record.
            NotSubscribedError: If the channel has no entry on the node.
        """
        node = await self.resolver.resolve(kind, slug)
        record = await self.store.get(node.slug)

        if record is None:
            raise SubscriptionNotFoundError(kind, node.slug)
        if not record.has_channel(channel_id):
            raise NotSubscribedError(node.slug, channel_id)

        record = record.without_channel(channel_id)
        await self.store.put(node.slug, record)
        logger.info(
            "Channel %s unsubscribed from %s %s", channel_id, kind.value, node.slug
        )
        return record

    async def subscribe_all(
        self, kind: NodeKind, slug: str, channel_id: str
    ) -> CascadeResult:
        """Subscribe a channel to a node and every descendant.

        Descendants that already have an entry for the channel are left
        untouched. The root then gets a deep entry, unless it already has
        an entry for the channel, deep or not.

        Raises:
            InvalidScopeError: If `kind` is product.
            NodeNotFoundError: If the node does not resolve.
            AlreadySubscribedError: If the root already has an entry for the channel.
            StoreError: If the root record cannot be read or written.
        """
        _require_cascade_scope(kind)
        root = await self.resolver.resolve(kind, slug)
        descendants = await self.resolver.children(root)
        result = CascadeResult(root=root.slug, channel_id=channel_id)

        writes: list[tuple[str, SubscriptionRecord]] = []
        for node, record in await self._fetch_records(descendants, result):
            record = record or SubscriptionRecord.empty(node)
            if record.has_channel(channel_id):
                result.skipped.append(node.slug)
                continue
            entry = ChannelSubscription(channel_id, cascaded_from=root.slug)
            writes.append((node.slug, record.with_channel(entry)))

        await self._apply_writes(writes, result)

        root_record = await self.store.get(root.slug) or SubscriptionRecord.empty(root)
        if root_record.has_channel(channel_id):
            raise AlreadySubscribedError(root.slug, channel_id)

        root_record = root_record.with_channel(ChannelSubscription(channel_id, deep=True))
        await self.store.put(root.slug, root_record)

        logger.info(
            "Channel %s subscribed to all of %s %s: %d updated, %d skipped, %d failed",
            channel_id,
            kind.value,
            root.slug,
            len(result.updated),
            len(result.skipped),
            len(result.failed),
        )
        return result

    async def unsubscribe_all(
        self, kind: NodeKind, slug: str, channel_id: str
    ) -> CascadeResult:
        """Remove a deep subscription and the channel from every descendant.

        The channel is removed from each descendant record that has it,
        regardless of which subscription created the entry.

        Raises:
            InvalidScopeError: If `kind` is product.
            NodeNotFoundError: If the node does not resolve.
            NoDeepSubscriptionError: If the root has no deep entry for the channel.
            StoreError: If the root record cannot be read or written.
        """
        _require_cascade_scope(kind)
        root = await self.resolver.resolve(kind, slug)
        root_record = await self.store.get(root.slug)

        entry = root_record.find(channel_id) if root_record is not None else None
        if entry is None or not entry.deep:
            raise NoDeepSubscriptionError(root.slug, channel_id)

        descendants = await self.resolver.children(root)
        result = CascadeResult(root=root.slug, channel_id=channel_id)

        writes: list[tuple[str, SubscriptionRecord]] = []
        for node, record in await self._fetch_records(descendants, result):
            if record is None or not record.has_channel(channel_id):
                result.skipped.append(node.slug)
                continue
            writes.append((node.slug, record.without_channel(channel_id)))

        await self._apply_writes(writes, result)
        await self.store.put(root.slug, root_record.without_channel(channel_id))

        logger.info(
            "Channel %s unsubscribed from all of %s %s: %d updated, %d skipped, %d failed",
            channel_id,
            kind.value,
            root.slug,
            len(result.updated),
            len(result.skipped),
            len(result.failed),
        )
        return result

    async def list_subscriptions(self, channel_id: str) -> list[SubscriptionRecord]:
        """Return every record the channel is subscribed to."""
        return await self.store.list_for_channel(channel_id)

    async def _fetch_records(
        self, nodes: list[Node], result: CascadeResult
    ) -> list[tuple[Node, SubscriptionRecord | None]]:
        """Read all descendant records concurrently.

        Nodes whose read fails are recorded in `result.failed` and left
        out of the returned list.
        """
        fetched = await asyncio.gather(
            *(self.store.get(node.slug) for node in nodes),
            return_exceptions=True,
        )

        records: list[tuple[Node, SubscriptionRecord | None]] = []
        for node, outcome in zip(nodes, fetched):
            if isinstance(outcome, StoreError):
                logger.error("Could not read subscriptions for %s: %s", node.slug, outcome)
                result.failed.append(CascadeFailure(node.slug, str(outcome)))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                records.append((node, outcome))
        return records

    async def _apply_writes(
        self, writes: list[tuple[str, SubscriptionRecord]], result: CascadeResult
    ) -> None:
        """Write descendant records concurrently, collecting failures."""

        async def _write(slug: str, record: SubscriptionRecord) -> None:
            try:
                await self.store.put(slug, record)
            except StoreError as e:
                logger.error("Could not update subscriptions for %s: %s", slug, e)
                result.failed.append(CascadeFailure(slug, str(e)))
            else:
                result.updated.append(slug)

        await asyncio.gather(*(_write(slug, record) for slug, record in writes))


def _require_cascade_scope(kind: NodeKind) -> None:
    if not kind.can_cascade:
        raise InvalidScopeError(kind)
