"""Call-site guard for publishing domain events."""

import logging

from musicstats.domain.events import StatsEvent
from musicstats.domain.ports import IEventPublisher

logger = logging.getLogger(__name__)


# Hey future me - the primary operation has ALREADY succeeded when this runs. A broken broker
# must never turn a saved result into a 500, so anything the publisher raises is logged here
# and dropped. Returns whether the publish went through, mostly for tests.
async def publish_safely(publisher: IEventPublisher | None, event: StatsEvent) -> bool:
    """Publish an event, logging instead of raising on failure."""
    if publisher is None:
        return False
    try:
        await publisher.publish(event)
    except Exception:
        logger.exception(
            "Failed to publish %s event for user %s",
            event.event_type.value,
            event.user_id,
            extra={"event": event.event_type.value, "user_id": event.user_id},
        )
        return False
    return True
