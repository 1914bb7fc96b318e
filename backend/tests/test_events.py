"""
Tests for the in-process event bus.
"""

import logging

from userauth.services.events import (
    DomainEvent,
    EventBus,
    UserCreatedEvent,
    create_event_bus,
    log_user_created,
)


class TestEventBus:
    async def test_publish_delivers_to_subscribers_in_order(self):
        # Arrange
        bus = EventBus()
        received = []

        async def first(event):
            received.append(("first", event.name))

        async def second(event):
            received.append(("second", event.name))

        bus.subscribe("user.created", first)
        bus.subscribe("user.created", second)

        # Act
        delivered = await bus.publish(UserCreatedEvent(user_id="u1", email="a@b.c", user_name="ab"))

        # Assert
        assert delivered == 2
        assert received == [("first", "user.created"), ("second", "user.created")]

    async def test_publish_without_subscribers(self):
        assert await EventBus().publish(DomainEvent(name="nothing.happened")) == 0

    async def test_failing_handler_does_not_stop_others(self, caplog):
        # Arrange
        bus = EventBus()
        received = []

        async def broken(event):
            raise RuntimeError("handler crashed")

        async def working(event):
            received.append(event)

        bus.subscribe("user.created", broken)
        bus.subscribe("user.created", working)

        # Act
        with caplog.at_level(logging.ERROR, logger="userauth.services.events"):
            delivered = await bus.publish(UserCreatedEvent(user_id="u1"))

        # Assert
        assert delivered == 1
        assert len(received) == 1
        assert any(r.getMessage() == "Event handler failed" for r in caplog.records)

    def test_handlers_for_returns_copy(self):
        bus = EventBus()

        async def handler(event):
            pass

        bus.subscribe("user.created", handler)
        bus.handlers_for("user.created").clear()

        assert bus.handlers_for("user.created") == [handler]


class TestUserCreatedEvent:
    def test_to_dict(self):
        event = UserCreatedEvent(user_id="u1", email="jane@example.com", user_name="jane")

        data = event.to_dict()

        assert data["name"] == "user.created"
        assert data["user_id"] == "u1"
        assert data["email"] == "jane@example.com"
        assert data["user_name"] == "jane"
        assert data["occurred_at"] == event.occurred_at.isoformat()


class TestDefaultBus:
    def test_logs_user_created_by_default(self):
        assert create_event_bus().handlers_for("user.created") == [log_user_created]

    async def test_log_user_created(self, caplog):
        with caplog.at_level(logging.INFO, logger="userauth.services.events"):
            await log_user_created(UserCreatedEvent(user_id="u1", email="a@b.c", user_name="ab"))

        record = next(r for r in caplog.records if r.getMessage() == "User created")
        assert record.event["user_id"] == "u1"
