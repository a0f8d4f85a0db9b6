"""Kafka topic bootstrap run once at startup."""

import asyncio
import logging
from collections.abc import Sequence

from confluent_kafka import KafkaError, KafkaException
from confluent_kafka.admin import AdminClient, NewTopic

from musicstats.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# Yo, the broker container often comes up AFTER us in docker-compose. We try a fixed number of
# times with a fixed pause, then give up loudly with ConfigurationError. This is the only retry
# loop in the whole service - don't add more.
async def ensure_topics(
    admin: AdminClient,
    topics: Sequence[str],
    *,
    retries: int = 5,
    delay: float = 5.0,
    num_partitions: int = 1,
    replication_factor: int = 1,
) -> list[str]:
    """Create the topics that don't exist yet.

    Args:
        admin: confluent-kafka admin client
        topics: Topic names that must exist
        retries: Attempts before giving up
        delay: Seconds between attempts

    Returns:
        Names of the topics that were created

    Raises:
        ConfigurationError: Broker unreachable after all attempts
    """
    last_error: Exception | None = None
    for attempt in range(1, retries + 1):
        try:
            metadata = await asyncio.to_thread(admin.list_topics, timeout=10)
            missing = [topic for topic in topics if topic not in metadata.topics]
            if missing:
                futures = admin.create_topics(
                    [
                        NewTopic(
                            topic,
                            num_partitions=num_partitions,
                            replication_factor=replication_factor,
                        )
                        for topic in missing
                    ]
                )
                for topic, future in futures.items():
                    try:
                        await asyncio.to_thread(future.result)
                    except KafkaException as e:
                        # Another instance may have created it in the meantime
                        if e.args and e.args[0].code() == KafkaError.TOPIC_ALREADY_EXISTS:
                            continue
                        raise
                logger.info("Created Kafka topics: %s", ", ".join(missing))
            else:
                logger.info("Kafka topics already exist: %s", ", ".join(topics))
            return missing
        except KafkaException as e:
            last_error = e
            logger.warning(
                "Kafka topic init attempt %d/%d failed: %s",
                attempt,
                retries,
                e,
                extra={"attempt": attempt, "retries": retries},
            )
            if attempt < retries:
                await asyncio.sleep(delay)

    raise ConfigurationError(
        f"Kafka topics could not be initialized after {retries} attempts: {last_error}"
    )
