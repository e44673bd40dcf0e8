"""Pure function-based parser for `/okr` slash-command text."""

from dataclasses import dataclass
from enum import Enum

from src.core.subscriptions.models import NodeKind


class Action(str, Enum):
    """Subscription command actions."""

    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    SUBSCRIBE_ALL = "subscribe/all"
    UNSUBSCRIBE_ALL = "unsubscribe/all"
    LIST = "list"

    @property
    def is_cascade(self) -> bool:
        return self in (Action.SUBSCRIBE_ALL, Action.UNSUBSCRIBE_ALL)


SCOPE_ALIASES: dict[str, NodeKind] = {
    "organization": NodeKind.ORGANIZATION,
    "org": NodeKind.ORGANIZATION,
    "department": NodeKind.DEPARTMENT,
    "dep": NodeKind.DEPARTMENT,
    "dept": NodeKind.DEPARTMENT,
    "product": NodeKind.PRODUCT,
    "prod": NodeKind.PRODUCT,
}


@dataclass
class ParsedSubscriptionCommand:
    """Represents a parsed subscription command.

    Attributes:
        action: The requested action.
        kind: Node kind the command targets (None for `list`).
        slug: Node slug as typed (empty for `list`).
    """

    action: Action
    kind: NodeKind | None = None
    slug: str = ""


def parse_subscription_command(text: str) -> ParsedSubscriptionCommand | None:
    """Parse slash-command text into an action, scope and slug.

    Tokens are split on any whitespace. Action and scope are matched
    case-insensitively; the slug is kept exactly as typed.
    Plain subscribe/unsubscribe commands take exactly three tokens:
    action, scope and slug. The scope of `/all` variants is not
    restricted here so that `subscribe/all product x` reaches the engine
    and is reported as an invalid scope rather than as help.

    Args:
        text: Raw command text (without the slash command itself).

    Returns:
        ParsedSubscriptionCommand, or None if the text is empty or not a
        valid command.

    Examples:
        >>> parse_subscription_command("subscribe organization oslo-origo")
        ParsedSubscriptionCommand(action=<Action.SUBSCRIBE: 'subscribe'>, kind=<NodeKind.ORGANIZATION: 'organization'>, slug='oslo-origo')

        >>> parse_subscription_command("unsubscribe dep apen-by").kind
        <NodeKind.DEPARTMENT: 'department'>

        >>> parse_subscription_command("subscribe team x")
        None
    """
    tokens = text.split()
    if not tokens:
        return None

    try:
        action = Action(tokens[0].lower())
    except ValueError:
        return None

    if action is Action.LIST:
        return ParsedSubscriptionCommand(action=action) if len(tokens) == 1 else None

    if len(tokens) != 3:
        return None

    kind = SCOPE_ALIASES.get(tokens[1].lower())
    if kind is None:
        return None

    return ParsedSubscriptionCommand(action=action, kind=kind, slug=tokens[2])
