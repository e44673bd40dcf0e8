"""Subscription module for hierarchical channel notifications.

This module provides:
- NodeKind, Node, SubscriptionRecord, ChannelSubscription: Data models
- HierarchyResolver: Slug and descendant resolution over a catalog
- load_catalog: Populates a catalog from a JSON export
- SubscriptionRepository / InMemorySubscriptionStore: Record persistence
- SubscriptionEngine: Subscribe, unsubscribe and cascading variants
- parse_subscription_command: Parser for `/okr` command text
- CommandDispatcher: Runs commands and builds slash-command replies
- SlackNotifier: Confirmation messages through Slack
"""

from src.core.subscriptions.catalog import (
    CatalogRepository,
    HierarchyResolver,
    InMemoryCatalog,
)
from src.core.subscriptions.catalog_loader import CatalogExport, load_catalog
from src.core.subscriptions.dispatcher import CommandDispatcher, CommandResponse
from src.core.subscriptions.engine import SubscriptionEngine
from src.core.subscriptions.factory import create_dispatcher, create_engine, get_engine
from src.core.subscriptions.models import (
    CascadeFailure,
    CascadeResult,
    ChannelSubscription,
    Node,
    NodeKind,
    SubscriptionRecord,
)
from src.core.subscriptions.notification import NotificationProtocol, SlackNotifier
from src.core.subscriptions.parser import (
    Action,
    ParsedSubscriptionCommand,
    parse_subscription_command,
)
from src.core.subscriptions.repository import (
    InMemorySubscriptionStore,
    SubscriptionRepository,
    SubscriptionStore,
)

__all__ = [
    "Action",
    "CascadeFailure",
    "CascadeResult",
    "CatalogExport",
    "CatalogRepository",
    "ChannelSubscription",
    "CommandDispatcher",
    "CommandResponse",
    "HierarchyResolver",
    "InMemoryCatalog",
    "InMemorySubscriptionStore",
    "Node",
    "NodeKind",
    "NotificationProtocol",
    "ParsedSubscriptionCommand",
    "SlackNotifier",
    "SubscriptionEngine",
    "SubscriptionRecord",
    "SubscriptionRepository",
    "SubscriptionStore",
    "create_dispatcher",
    "create_engine",
    "get_engine",
    "load_catalog",
    "parse_subscription_command",
]
