"""Event publishers for the statistics topic."""

import json
import logging
from typing import Any

from confluent_kafka import KafkaException, Producer

from musicstats.config import KafkaSettings
from musicstats.domain.events import StatsEvent
from musicstats.domain.ports import IEventPublisher

logger = logging.getLogger(__name__)


class KafkaEventPublisher(IEventPublisher):
    """Publishes statistics events as JSON to Kafka."""

    def __init__(self, producer: Producer, topic: str, flush_timeout: float = 5.0) -> None:
        """
        Args:
            producer: confluent-kafka producer (owned by the lifespan)
            topic: Topic the events go to
            flush_timeout: Seconds close() waits for in-flight messages
        """
        self._producer = producer
        self._topic = topic
        self._flush_timeout = flush_timeout

    @classmethod
    def from_settings(cls, settings: KafkaSettings) -> "KafkaEventPublisher":
        producer = Producer(
            {
                "bootstrap.servers": settings.bootstrap_servers,
                "client.id": settings.client_id,
            }
        )
        return cls(producer, settings.topic)

    @property
    def topic(self) -> str:
        return self._topic

    def _delivery_report(self, err: Any, msg: Any) -> None:
        """Callback for message delivery reports."""
        if err is not None:
            logger.error(
                "Event delivery failed: %s",
                err,
                extra={"topic": self._topic},
            )
        else:
            logger.debug(
                "Event delivered to %s [partition %s] at offset %s",
                msg.topic(),
                msg.partition(),
                msg.offset(),
            )

    # Hey future me - produce() only enqueues into librdkafka's buffer, it doesn't block on the
    # broker. poll(0) fires pending delivery callbacks. Failures are LOGGED, never raised: the
    # stats were already saved or deleted by the time we publish.
    async def publish(self, event: StatsEvent) -> None:
        if event.user_id is None:
            logger.warning("Skipping %s event without user id", event.event_type.value)
            return

        try:
            self._producer.produce(
                self._topic,
                key=event.key,
                value=json.dumps(event.to_message()),
                callback=self._delivery_report,
            )
            self._producer.poll(0)
        except (KafkaException, BufferError, TypeError, ValueError) as e:
            logger.error(
                "Error producing %s event for user %s: %s",
                event.event_type.value,
                event.user_id,
                e,
                extra={"topic": self._topic, "user_id": event.user_id},
            )
            return

        logger.info(
            "Published %s for user %s",
            event.event_type.value,
            event.user_id,
            extra={"topic": self._topic, "user_id": event.user_id},
        )

    def close(self) -> None:
        """Flush outstanding messages."""
        remaining = self._producer.flush(self._flush_timeout)
        if remaining:
            logger.warning("%d event(s) not delivered before shutdown", remaining)


class NullEventPublisher(IEventPublisher):
    """Publisher used when Kafka is disabled; events are only logged."""

    async def publish(self, event: StatsEvent) -> None:
        logger.debug(
            "Kafka disabled, dropping %s for user %s",
            event.event_type.value,
            event.user_id,
        )

    def close(self) -> None:
        return None
