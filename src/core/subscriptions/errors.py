# src/core/subscriptions/errors.py
"""Error types raised by the subscription engine and its stores.

Errors carry the structured context of the failed operation. They are
turned into user-facing text only by the command dispatcher.
"""

from src.core.subscriptions.models import NodeKind


class SubscriptionError(Exception):
    """Base class for all subscription errors."""


class NotFoundError(SubscriptionError):
    """A node or subscription record could not be found."""

    def __init__(self, kind: NodeKind, slug: str) -> None:
        self.kind = kind
        self.slug = slug
        super().__init__(f"{kind.value} {slug!r} not found")


class NodeNotFoundError(NotFoundError):
    """No single catalog node matches the kind and slug."""


class SubscriptionNotFoundError(NotFoundError):
    """The node exists but has no subscription record."""


class AlreadySubscribedError(SubscriptionError):
    def __init__(self, slug: str, channel_id: str) -> None:
        self.slug = slug
        self.channel_id = channel_id
        super().__init__(f"Channel {channel_id} already subscribed to {slug!r}")


class NotSubscribedError(SubscriptionError):
    def __init__(self, slug: str, channel_id: str) -> None:
        self.slug = slug
        self.channel_id = channel_id
        super().__init__(f"Channel {channel_id} not subscribed to {slug!r}")


class NoDeepSubscriptionError(SubscriptionError):
    """The channel has no cascading subscription on the node."""

    def __init__(self, slug: str, channel_id: str) -> None:
        self.slug = slug
        self.channel_id = channel_id
        super().__init__(f"Channel {channel_id} has no deep subscription to {slug!r}")


class InvalidScopeError(SubscriptionError):
    """A cascading operation was requested on a kind without children."""

    def __init__(self, kind: NodeKind) -> None:
        self.kind = kind
        super().__init__(f"Cascading operations are not allowed on {kind.value}")


class StoreError(SubscriptionError):
    """A subscription store operation failed."""

    def __init__(self, slug: str, reason: str = "") -> None:
        self.slug = slug
        self.reason = reason
        message = f"Store operation failed for {slug!r}"
        super().__init__(f"{message}: {reason}" if reason else message)


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass
