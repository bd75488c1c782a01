"""In-memory event bus for UI events.

Surfaces publish events such as TagsChanged or LoggedIn here instead of
bubbling DOM events; listeners subscribe per event type.
"""

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import TypeVar

from webmarker.domain.events.ui_events import DomainEvent

logger = logging.getLogger(__name__)

TEvent = TypeVar("TEvent", bound=DomainEvent)

EventHandler = Callable[[TEvent], Awaitable[None]]


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class EventBus:
    """Publish/subscribe hub keyed by event type.

    Handlers are awaited in subscription order. A failing handler is logged
    and the remaining handlers still run.

    Example:
        ```python
        bus = EventBus()

        async def on_tags_changed(event: TagsChanged):
            print(event.chips)

        bus.subscribe(TagsChanged, on_tags_changed)
        await bus.publish(TagsChanged(occurred_at=datetime.now(UTC), chips=("a",)))
        ```

    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[EventHandler]] = defaultdict(list)

    def subscribe(
        self,
        event_type: type[TEvent],
        handler: EventHandler[TEvent],
    ) -> Callable[[], None]:
        """Subscribe a handler to a specific event type.

        Args:
            event_type: The type of event to subscribe to (e.g., TagsChanged).
            handler: Async function to call when event is published.

        Returns:
            A callable that removes the subscription again.

        """
        self._handlers[event_type].append(handler)
        logger.debug(
            "event_handler_subscribed",
            extra={
                "event_type": event_type.__name__,
                "handler": _handler_name(handler),
                "total_handlers": len(self._handlers[event_type]),
            },
        )
        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(
        self,
        event_type: type[TEvent],
        handler: EventHandler[TEvent],
    ) -> None:
        """Unsubscribe a handler from an event type."""
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(
                    "event_handler_unsubscribed",
                    extra={"event_type": event_type.__name__, "handler": _handler_name(handler)},
                )
            except ValueError:
                logger.warning(
                    "event_handler_not_found",
                    extra={"event_type": event_type.__name__, "handler": _handler_name(handler)},
                )

    async def publish(self, event: DomainEvent) -> None:
        """Publish an event to all handlers subscribed to its type.

        Args:
            event: The event to publish.

        """
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            logger.debug(
                "event_published_no_handlers",
                extra={"event_type": event_type.__name__, "event_id": event.aggregate_id},
            )
            return

        logger.debug(
            "event_published",
            extra={
                "event_type": event_type.__name__,
                "event_id": event.aggregate_id,
                "handler_count": len(handlers),
            },
        )

        for handler in handlers:
            try:
                await handler(event)
            except Exception as exc:
                logger.exception(
                    "event_handler_failed",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": _handler_name(handler),
                        "error": str(exc),
                    },
                )

    def clear_handlers(self, event_type: type[TEvent] | None = None) -> None:
        """Clear handlers for one event type, or all handlers when None."""
        if event_type is not None:
            self._handlers.pop(event_type, None)
        else:
            self._handlers.clear()

    def get_handler_count(self, event_type: type[TEvent]) -> int:
        return len(self._handlers.get(event_type, []))
