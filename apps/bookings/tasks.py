"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from shared.application.message_bus import get_event_sink

from .application.command_handlers import complete_finished_bookings

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings_task() -> dict[str, int]:
    """
    Mark confirmed bookings whose check-out has passed as completed.

    Runs daily through Celery Beat.

    Returns:
        dict: {"completed": number of completed bookings}
    """
    completed = complete_finished_bookings(get_event_sink())
    logger.info(f"Periodic completion finished: {len(completed)} bookings completed")
    return {"completed": len(completed)}
