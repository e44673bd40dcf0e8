"""Tests for subscription command parsing."""

from src.core.subscriptions.models import NodeKind
from src.core.subscriptions.parser import Action, parse_subscription_command


class TestParser:
    """Test suite for the `/okr` command parser."""

    def test_parse_subscribe(self) -> None:
        result = parse_subscription_command("subscribe organization oslo-origo")
        assert result is not None
        assert result.action is Action.SUBSCRIBE
        assert result.kind is NodeKind.ORGANIZATION
        assert result.slug == "oslo-origo"

    def test_parse_unsubscribe_product(self) -> None:
        result = parse_subscription_command("unsubscribe product oslonokkelen")
        assert result is not None
        assert result.action is Action.UNSUBSCRIBE
        assert result.kind is NodeKind.PRODUCT

    def test_parse_cascade_actions(self) -> None:
        subscribe_all = parse_subscription_command("subscribe/all department apen-by")
        unsubscribe_all = parse_subscription_command("unsubscribe/all organization oslo-origo")

        assert subscribe_all.action is Action.SUBSCRIBE_ALL
        assert subscribe_all.action.is_cascade
        assert unsubscribe_all.action is Action.UNSUBSCRIBE_ALL
        assert unsubscribe_all.kind is NodeKind.ORGANIZATION

    def test_parse_cascade_on_product_is_kept_for_engine(self) -> None:
        """Test product scope on /all parses so the engine can reject it."""
        result = parse_subscription_command("subscribe/all product some-slug")
        assert result is not None
        assert result.kind is NodeKind.PRODUCT

    def test_parse_scope_aliases(self) -> None:
        assert parse_subscription_command("unsubscribe dep apen-by").kind is NodeKind.DEPARTMENT
        assert parse_subscription_command("subscribe dept apen-by").kind is NodeKind.DEPARTMENT
        assert parse_subscription_command("subscribe org oslo-origo").kind is NodeKind.ORGANIZATION
        assert parse_subscription_command("subscribe prod datahub").kind is NodeKind.PRODUCT

    def test_action_and_scope_are_case_insensitive(self) -> None:
        result = parse_subscription_command("SUBSCRIBE/ALL Organization oslo-origo")
        assert result is not None
        assert result.action is Action.SUBSCRIBE_ALL
        assert result.kind is NodeKind.ORGANIZATION

    def test_slug_case_is_preserved(self) -> None:
        result = parse_subscription_command("subscribe product Oslo-Nokkelen")
        assert result is not None
        assert result.slug == "Oslo-Nokkelen"

    def test_list_is_case_insensitive(self) -> None:
        result = parse_subscription_command("LIST")
        assert result is not None
        assert result.action is Action.LIST

    def test_parse_extra_whitespace(self) -> None:
        result = parse_subscription_command("  subscribe   product\tdatahub  ")
        assert result is not None
        assert result.slug == "datahub"

    def test_parse_list(self) -> None:
        result = parse_subscription_command("list")
        assert result is not None
        assert result.action is Action.LIST
        assert result.kind is None

    def test_parse_list_with_arguments(self) -> None:
        assert parse_subscription_command("list organization oslo-origo") is None

    def test_parse_empty_string(self) -> None:
        assert parse_subscription_command("") is None

    def test_parse_whitespace_only(self) -> None:
        assert parse_subscription_command("   ") is None

    def test_parse_unknown_action(self) -> None:
        assert parse_subscription_command("follow organization oslo-origo") is None

    def test_parse_unknown_scope(self) -> None:
        assert parse_subscription_command("subscribe team oslo-origo") is None

    def test_parse_missing_slug(self) -> None:
        assert parse_subscription_command("subscribe organization") is None

    def test_parse_too_many_tokens(self) -> None:
        assert parse_subscription_command("subscribe organization oslo origo") is None
