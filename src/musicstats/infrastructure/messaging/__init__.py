"""Kafka messaging: statistics event publisher, topic bootstrap, user events."""

from musicstats.infrastructure.messaging.publisher import (
    KafkaEventPublisher,
    NullEventPublisher,
)
from musicstats.infrastructure.messaging.topics import ensure_topics
from musicstats.infrastructure.messaging.user_consumer import (
    UserEventConsumer,
    extract_user_platform,
)

__all__ = [
    "KafkaEventPublisher",
    "NullEventPublisher",
    "UserEventConsumer",
    "ensure_topics",
    "extract_user_platform",
]
