"""In-memory async event bus used to decouple practice sessions from the app.

Events are never stored; a handler that fails is logged and does not affect the
other handlers or the publisher.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)


class DomainEvent:
    """Base class for all domain events.

    Not a dataclass itself, so dataclass subclasses can declare required
    fields and call ``super().__init__()`` from ``__post_init__``.
    """

    def __init__(self, event_id: str = "", occurred_at: datetime | None = None):
        """Initialize domain event with auto-generated ID and timestamp.

        Args:
            event_id: Unique event identifier (auto-generated if empty)
            occurred_at: Event timestamp (auto-generated if None)
        """
        self.event_id = event_id or str(uuid4())
        self.occurred_at = occurred_at or datetime.now(UTC)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(event_id={self.event_id})"

    @property
    def event_name(self) -> str:
        """Return the name of this event type."""
        return self.__class__.__name__


class EventBus:
    """Async publish/subscribe bus keyed by event type.

    Handlers registered for a base event class also receive its subclasses.
    Sync and async handlers are both accepted.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[Callable[..., Any]]] = {}

    async def publish(self, event: DomainEvent) -> int:
        """Publish event to every matching handler concurrently.

        Args:
            event: Domain event to publish

        Returns:
            Number of handlers the event was delivered to
        """
        handlers = self._handlers_for(type(event))
        if not handlers:
            logger.debug(f"No handlers registered for {event.event_name}")
            return 0

        logger.debug(f"Publishing {event.event_name} to {len(handlers)} handlers")
        await asyncio.gather(
            *[self._handle_event(handler, event) for handler in handlers]
        )
        return len(handlers)

    async def _handle_event(
        self, handler: Callable[..., Any], event: DomainEvent
    ) -> None:
        try:
            result = handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            handler_name = getattr(handler, "__name__", repr(handler))
            logger.error(
                f"Event handler {handler_name} failed for {event.event_name}: {e}"
            )

    def _handlers_for(self, event_type: type[DomainEvent]) -> list[Callable[..., Any]]:
        handlers: list[Callable[..., Any]] = []
        for klass in event_type.__mro__:
            handlers.extend(self._handlers.get(klass, []))
        return handlers

    def subscribe(
        self, event_type: type[DomainEvent], handler: Callable[..., Any]
    ) -> None:
        """Subscribe handler to event type (and its subclasses).

        Args:
            event_type: Type of domain event to subscribe to
            handler: Handler function (sync or async)
        """
        self._handlers.setdefault(event_type, []).append(handler)
        handler_name = getattr(handler, "__name__", repr(handler))
        logger.debug(f"Subscribed {handler_name} to {event_type.__name__}")

    def unsubscribe(
        self, event_type: type[DomainEvent], handler: Callable[..., Any]
    ) -> bool:
        """Remove a handler. Returns False when it was not subscribed."""
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            handler_name = getattr(handler, "__name__", repr(handler))
            logger.warning(f"Handler {handler_name} not found for {event_type.__name__}")
            return False
        handlers.remove(handler)
        return True

    def get_handler_count(self, event_type: type[DomainEvent]) -> int:
        """Number of handlers registered directly for an event type."""
        return len(self._handlers.get(event_type, []))

    def clear_subscriptions(self) -> None:
        """Drop all subscriptions."""
        self._handlers.clear()
