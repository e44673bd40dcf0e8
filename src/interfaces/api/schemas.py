# src/interfaces/api/schemas.py
"""Pydantic models for FastAPI response validation."""

from pydantic import BaseModel, Field

from src.core.subscriptions.models import SubscriptionRecord


class ChannelSubscriptionResponse(BaseModel):
    """A channel entry on a subscription record.

    Attributes:
        channel_id: Slack channel ID.
        deep: Whether the subscription cascades to descendants.
        cascaded_from: Ancestor slug whose cascade created the entry.
    """

    channel_id: str = Field(..., description="Slack channel ID")
    deep: bool = Field(False, description="Subscription cascades to descendants")
    cascaded_from: str | None = Field(
        None, description="Ancestor slug whose cascade created this entry"
    )


class SubscriptionRecordResponse(BaseModel):
    """Response body for GET /subscriptions/{slug}."""

    slug: str = Field(..., description="Node slug")
    node_kind: str = Field(..., description="organization, department or product")
    channels: list[ChannelSubscriptionResponse] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: SubscriptionRecord) -> "SubscriptionRecordResponse":
        return cls(
            slug=record.slug,
            node_kind=record.node_kind.value,
            channels=[
                ChannelSubscriptionResponse(
                    channel_id=c.channel_id,
                    deep=c.deep,
                    cascaded_from=c.cascaded_from,
                )
                for c in record.channels
            ],
        )


class HealthResponse(BaseModel):
    status: str = Field(..., description="Service health")
    storage_backend: str = Field(..., description="Configured storage backend")
