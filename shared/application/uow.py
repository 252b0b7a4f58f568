"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.
"""

from typing import Any, Dict, List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Wraps ``transaction.atomic()`` and hands collected events to the
    injected event sink once the transaction has committed. Events
    collected in a rolled back transaction are discarded.

    Usage:
        with DjangoUnitOfWork(sink) as uow:
            booking = Booking.objects.select_for_update().get(pk=booking_id)
            booking.mark_payment_succeeded()
            uow.collect("booking_confirmed", booking_payload(booking))
        # Events are published after commit
    """

    def __init__(self, sink):
        self.sink = sink
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def collect(self, event_name: str, payload: Dict[str, Any]):
        self._events.append(DomainEvent(name=event_name, payload=payload))

    def commit(self):
        """
        Schedule event publishing after commit

        Events are published using Django's transaction.on_commit()
        to ensure they're only sent after database commit succeeds.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        if self._events:
            logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def _publish_events(self, events: List[DomainEvent]):
        """Called after successful transaction commit."""
        if self.sink is None:
            return

        logger.info(f"Publishing {len(events)} domain events after commit")

        for event in events:
            try:
                self.sink.publish(event.name, event.payload)
            except Exception as e:
                # The transaction is already committed; delivery is best effort
                logger.error(f"Error publishing event {event.name}: {e}", exc_info=True)
