"""
In-process domain event bus.

Use cases publish events after their work is done; handlers subscribe by
event name. Handlers run sequentially in subscription order. A failing
handler is logged and skipped so it never fails the publisher.

Events currently published:
- user.created (UserService.create)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List

from userauth.models.base import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    """
    Base event.

    Attributes:
        name: Event name used for subscription
        occurred_at: When the event happened (UTC)
    """
    name: str
    occurred_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "occurred_at": self.occurred_at.isoformat()}


@dataclass(frozen=True)
class UserCreatedEvent(DomainEvent):
    """Published once a user has been persisted."""
    name: str = "user.created"
    user_id: str = ""
    email: str = ""
    user_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            **super().to_dict(),
            "user_id": self.user_id,
            "email": self.email,
            "user_name": self.user_name,
        }


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBus:
    """
    Minimal async pub/sub keyed by event name.

    Example:
        bus = EventBus()
        bus.subscribe("user.created", log_user_created)
        await bus.publish(UserCreatedEvent(user_id="...", email="...", user_name="..."))
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_name, []).append(handler)
        logger.debug(
            "Event handler subscribed",
            extra={"event_name": event_name, "handler": getattr(handler, "__name__", repr(handler))}
        )

    def handlers_for(self, event_name: str) -> List[EventHandler]:
        return list(self._handlers.get(event_name, []))

    async def publish(self, event: DomainEvent) -> int:
        """
        Deliver an event to every handler subscribed to its name.

        Returns:
            Number of handlers that completed without raising
        """
        delivered = 0
        for handler in self.handlers_for(event.name):
            try:
                await handler(event)
                delivered += 1
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    extra={
                        "event_name": event.name,
                        "handler": getattr(handler, "__name__", repr(handler)),
                        "error": str(e),
                    },
                    exc_info=True
                )
        return delivered


async def log_user_created(event: DomainEvent) -> None:
    logger.info("User created", extra={"event": event.to_dict()})


def create_event_bus() -> EventBus:
    """Event bus with the default handlers registered."""
    bus = EventBus()
    bus.subscribe(UserCreatedEvent.name, log_user_created)
    return bus


event_bus = create_event_bus()
