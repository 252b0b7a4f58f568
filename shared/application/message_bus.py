"""
Message Bus

Event sink used by the booking, payment and refund services to announce
what happened. Services receive the sink as an explicit argument; the
default bus below is wired with subscribers (notifications, real-time
fan-out) when the apps start.
"""

from typing import Any, Callable, Dict, List, Protocol
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]

ALL_EVENTS = "*"


class EventSink(Protocol):
    """Anything that can receive a named event with a payload."""

    def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        ...


class MessageBus:
    """
    Routes published events to subscribed handlers (1:N)

    Delivery is best effort: errors in handlers are logged and never
    propagate to the publisher.
    """

    def __init__(self):
        self._event_handlers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_name: str, handler: EventHandler):
        """
        Register an event handler

        Multiple handlers can be registered for the same event name.
        ``ALL_EVENTS`` receives every event.
        """
        handlers = self._event_handlers.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Registered event handler {handler.__name__} for {event_name}")

    def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        self.publish_events([DomainEvent(name=event_name, payload=payload)])

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        All registered handlers for each event name will be called.
        """
        for event in events:
            handlers = self._event_handlers.get(event.name, []) + self._event_handlers.get(ALL_EVENTS, [])

            if not handlers:
                logger.warning(f"No handlers registered for event {event.name}")
                continue

            logger.info(f"Publishing event: {event.name} (ID: {event.event_id})")

            for handler in handlers:
                try:
                    handler(event)
                    logger.debug(f"Event {event.name} handled by {handler.__name__}")
                except Exception as e:
                    logger.error(
                        f"Error in event handler {handler.__name__} "
                        f"for event {event.name}: {e}",
                        exc_info=True
                    )


# Default bus instance, injected into services by the API layer
message_bus = MessageBus()


def get_event_sink() -> MessageBus:
    return message_bus
