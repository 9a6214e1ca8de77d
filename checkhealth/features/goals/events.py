"""
checkhealth/features/goals/events.py

goal.created notification. The channel name and the payload projection are a
compatibility contract with downstream consumers and are not configurable.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from redis import Redis

from checkhealth.core.config import settings
from checkhealth.core.errors import GoalEventPublishError
from checkhealth.models.goal import Goal

logger = logging.getLogger("checkhealth")

GOAL_CREATED_CHANNEL = "goal.created"


class GoalCreatedEvent(BaseModel):
    """Goal was created by a user."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    goal_id: int = Field(alias="goalId")
    user_id: str = Field(alias="userId")
    category: str
    title: str
    description: Optional[str] = None

    @classmethod
    def from_goal(cls, goal: Goal) -> "GoalCreatedEvent":
        return cls(
            goal_id=goal.goal_id,
            user_id=goal.user_id,
            category=goal.category.value if goal.category is not None else None,
            title=goal.title,
            description=goal.description,
        )


class MessageTransport(Protocol):
    def send(self, channel: str, payload: str) -> None:
        ...


class RedisTransport:
    """Publish payloads on a Redis pub/sub channel."""

    def __init__(self, redis_url: Optional[str] = None, client: Optional[Redis] = None):
        self._client = client or Redis.from_url(
            redis_url or settings.REDIS_URL,
            socket_connect_timeout=2,
            socket_timeout=2,
        )

    def send(self, channel: str, payload: str) -> None:
        receivers = self._client.publish(channel, payload)
        logger.debug(f"[events] published to {channel} ({receivers} subscribers)")


class InMemoryTransport:
    """Keeps sent messages in a list; used in development and tests."""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    def send(self, channel: str, payload: str) -> None:
        self.sent.append((channel, payload))

    def clear(self) -> None:
        self.sent.clear()


def get_transport() -> MessageTransport:
    kind = (settings.EVENT_TRANSPORT or "memory").lower()
    if kind == "redis":
        return RedisTransport()
    return InMemoryTransport()


class GoalEventPublisher:
    """Serializes goal events and hands them to the transport."""

    def __init__(self, transport: MessageTransport):
        self.transport = transport

    def publish_goal_created(self, goal: Optional[Goal]) -> str:
        """
        Publish the goal.created event.

        Returns:
            The JSON payload that was sent.

        Raises:
            GoalEventPublishError: when the goal cannot be projected
            (None goal, missing category) or the transport fails.
        """
        if goal is None:
            raise GoalEventPublishError(f"Failed to serialize {GOAL_CREATED_CHANNEL} event: goal is None")

        try:
            payload = GoalCreatedEvent.from_goal(goal).model_dump_json(by_alias=True)
        except PydanticValidationError as exc:
            raise GoalEventPublishError(f"Failed to serialize {GOAL_CREATED_CHANNEL} event") from exc

        try:
            self.transport.send(GOAL_CREATED_CHANNEL, payload)
        except Exception as exc:
            raise GoalEventPublishError(f"Failed to publish {GOAL_CREATED_CHANNEL} event") from exc

        return payload
