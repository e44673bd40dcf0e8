# src/core/subscriptions/dispatcher.py
"""Command dispatcher for `/okr` subscription commands.

Parses command text, runs the matching engine operation and flattens the
outcome into a CommandResponse. Successful commands answer with an empty
body and post their confirmation through the notifier; every error is
answered with a short text. Nothing raised by the engine escapes
`dispatch`.
"""

import logging
from dataclasses import dataclass
from typing import Any

from src.core.subscriptions.engine import SubscriptionEngine
from src.core.subscriptions.errors import (
    AlreadySubscribedError,
    InvalidScopeError,
    NodeNotFoundError,
    NoDeepSubscriptionError,
    NotSubscribedError,
    StoreError,
    SubscriptionError,
    SubscriptionNotFoundError,
)
from src.core.subscriptions.models import CascadeResult
from src.core.subscriptions.notification import NotificationProtocol
from src.core.subscriptions.parser import (
    Action,
    ParsedSubscriptionCommand,
    parse_subscription_command,
)
from src.utils.logging import set_command_context

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Something went wrong while handling the command, please try again later"


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


HELP_BLOCKS: list[dict[str, Any]] = [
    _section("Invalid command! :wave: Need some help with `/okr`?"),
    _section(
        "Slug is the lowercase name your organization/department/product gets "
        "and is used in the url. I.E: https://okr.oslo.systems/oslo-origo. "
        "The slug here is `oslo-origo`"
    ),
    _section(
        "Subscribe to notifications for an organization\n"
        "`/okr subscribe organization organization-slug`\n"
        "Example: `/okr subscribe organization oslo-origo`"
    ),
    _section(
        "Unsubscribe to notifications for an organization\n"
        "`/okr unsubscribe organization organization-slug`\n"
        "Example: `/okr unsubscribe organization oslo-origo`"
    ),
    _section(
        "Subscribe to notifications for a department\n"
        "`/okr subscribe department department-slug`\n"
        "Example: `/okr subscribe department apen-by`"
    ),
    _section(
        "Unsubscribe to notifications for a department\n"
        "`/okr unsubscribe department department-slug`\n"
        "Example: `/okr unsubscribe dep apen-by`"
    ),
    _section(
        "Subscribe to notifications for a product\n"
        "`/okr subscribe product product-slug`\n"
        "Example: `/okr subscribe product oslonokkelen`"
    ),
    _section(
        "Unsubscribe to notifications for a product\n"
        "`/okr unsubscribe product product-slug`\n"
        "Example: `/okr unsubscribe product oslonokkelen`"
    ),
    _section(
        "Subscribe to an organization or department and everything below it\n"
        "`/okr subscribe/all organization organization-slug`\n"
        "Undo it with `/okr unsubscribe/all organization organization-slug`"
    ),
    _section("List the subscriptions of this channel\n`/okr list`"),
]


@dataclass
class CommandResponse:
    """Reply to a slash command.

    Exactly one of `text` and `blocks` is set for error and help replies;
    both are None when the command succeeded and the confirmation went
    through the notifier.
    """

    text: str | None = None
    blocks: list[dict[str, Any]] | None = None

    @property
    def is_empty(self) -> bool:
        return self.text is None and self.blocks is None

    @classmethod
    def help(cls) -> "CommandResponse":
        return cls(blocks=HELP_BLOCKS)


def describe_error(error: SubscriptionError, command: ParsedSubscriptionCommand) -> str:
    """Turn an engine error into the text shown to the user."""
    if isinstance(error, NodeNotFoundError):
        return (
            f"Could not find the {error.kind.value}, "
            "are you sure you've typed in the correct name?"
        )
    if isinstance(error, SubscriptionNotFoundError):
        return f"No subscription found for {error.slug}"
    if isinstance(error, AlreadySubscribedError):
        return f"You have already subscribed to {error.slug} in this channel"
    if isinstance(error, NotSubscribedError):
        return f"This channel does not have a subscription to {error.slug}"
    if isinstance(error, NoDeepSubscriptionError):
        return f"You do not subscribe to everything for {error.slug}"
    if isinstance(error, InvalidScopeError):
        return f"You can only run {command.action.value} on a department or organization"
    if isinstance(error, StoreError):
        return (
            f"Could not save the subscription for {error.slug}, "
            "please try again later"
        )
    return GENERIC_FAILURE


def describe_cascade(verb: str, result: CascadeResult) -> str:
    """Build the confirmation message for a cascading command."""
    message = f"You have successfully {verb} {result.root}"
    if result.updated:
        message += f" and {len(result.updated)} departments and products below it"
    if result.failed:
        message += f". Could not update: {', '.join(sorted(result.failed_slugs))}"
    return message


class CommandDispatcher:
    """Dispatches parsed `/okr` commands to the subscription engine.

    Attributes:
        engine: SubscriptionEngine applying the changes.
        notifier: Notifier used for confirmation messages.
    """

    def __init__(
        self, engine: SubscriptionEngine, notifier: NotificationProtocol
    ) -> None:
        self.engine = engine
        self.notifier = notifier

    async def dispatch(
        self,
        text: str | None,
        channel_id: str,
        channel_name: str = "",
        command_id: str | None = None,
    ) -> CommandResponse:
        """Handle one slash command.

        Args:
            text: Command text after the slash command.
            channel_id: Channel the command was issued in.
            channel_name: Channel name, for logging only.
            command_id: Correlation ID for log lines.

        Returns:
            CommandResponse to send back as the slash-command reply.
        """
        set_command_context(channel_id, command_id)

        parsed = parse_subscription_command(text or "")
        if parsed is None:
            logger.info("Invalid command %r in %s, sending help", text, channel_name)
            return CommandResponse.help()

        logger.info(
            "Handling %s %s %s in %s",
            parsed.action.value,
            parsed.kind.value if parsed.kind else "-",
            parsed.slug or "-",
            channel_name or channel_id,
        )

        try:
            message = await self._run(parsed, channel_id)
        except SubscriptionError as e:
            logger.info("Command failed: %s", e)
            return CommandResponse(text=describe_error(e, parsed))
        except Exception:
            logger.exception("Unexpected error handling %s", parsed.action.value)
            return CommandResponse(text=GENERIC_FAILURE)

        await self.notifier.send(channel_id, message)
        return CommandResponse()

    async def _run(self, parsed: ParsedSubscriptionCommand, channel_id: str) -> str:
        """Run the engine operation and return the confirmation message."""
        if parsed.action is Action.LIST:
            records = await self.engine.list_subscriptions(channel_id)
            if not records:
                return "This channel has no subscriptions"
            lines = [
                f"• {r.slug} ({r.node_kind.value}"
                f"{', everything below' if r.find(channel_id).deep else ''})"
                for r in records
            ]
            return "This channel is subscribed to:\n" + "\n".join(lines)

        if parsed.kind is None:
            raise ValueError(f"{parsed.action.value} requires a scope")

        if parsed.action is Action.SUBSCRIBE:
            await self.engine.subscribe(parsed.kind, parsed.slug, channel_id)
            return f"You have successfully subscribed to {parsed.slug}"

        if parsed.action is Action.UNSUBSCRIBE:
            await self.engine.unsubscribe(parsed.kind, parsed.slug, channel_id)
            return f"You have successfully unsubscribed from {parsed.slug}"

        if parsed.action is Action.SUBSCRIBE_ALL:
            result = await self.engine.subscribe_all(parsed.kind, parsed.slug, channel_id)
            return describe_cascade("subscribed to", result)

        result = await self.engine.unsubscribe_all(parsed.kind, parsed.slug, channel_id)
        return describe_cascade("unsubscribed from", result)
