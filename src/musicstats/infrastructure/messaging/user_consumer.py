"""Consumer for user profile events.

The user service publishes profile updates on the `user` topic. Each message
carries the user id and the social/streaming accounts the user connected; the
first streaming platform we support becomes the user's platform link.

Expected payload:
    {
        "user": {"user_id": 42, ...},
        "social_media": [{"social_media_name": "Spotify"}, ...]
    }
"""

import asyncio
import json
import logging
from collections.abc import Iterable
from typing import Any

from confluent_kafka import Consumer, KafkaError

from musicstats.application.services.user_service import UserService
from musicstats.config import KafkaSettings
from musicstats.domain.entities import MusicPlatform
from musicstats.domain.exceptions import DomainException
from musicstats.domain.validation import DEFAULT_ALLOWED_PLATFORMS, parse_user_id

logger = logging.getLogger(__name__)


def extract_user_platform(
    payload: Any, allowed_platforms: Iterable[str] = DEFAULT_ALLOWED_PLATFORMS
) -> tuple[int, MusicPlatform] | None:
    """Pull (user_id, platform) out of a user event, or None if it has neither."""
    if not isinstance(payload, dict):
        return None
    user = payload.get("user")
    if not isinstance(user, dict):
        return None
    try:
        user_id = parse_user_id(user.get("user_id"))
    except DomainException:
        return None

    allowed = {platform.lower() for platform in allowed_platforms}
    for account in payload.get("social_media") or []:
        if not isinstance(account, dict):
            continue
        name = str(account.get("social_media_name") or "").strip().lower()
        if name in allowed:
            return user_id, MusicPlatform(name)
    return None


class UserEventConsumer:
    """Background task that keeps platform links in sync with user events."""

    def __init__(
        self,
        consumer: Consumer,
        user_service: UserService,
        topic: str,
        poll_timeout: float = 1.0,
        allowed_platforms: Iterable[str] = DEFAULT_ALLOWED_PLATFORMS,
    ) -> None:
        self._consumer = consumer
        self._user_service = user_service
        self._topic = topic
        self._poll_timeout = poll_timeout
        self._allowed = tuple(allowed_platforms)
        self._running = False
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: KafkaSettings,
        user_service: UserService,
        allowed_platforms: Iterable[str] = DEFAULT_ALLOWED_PLATFORMS,
    ) -> "UserEventConsumer":
        consumer = Consumer(
            {
                "bootstrap.servers": settings.bootstrap_servers,
                "client.id": settings.client_id,
                "group.id": settings.group_id,
                "auto.offset.reset": "earliest",
            }
        )
        return cls(
            consumer,
            user_service,
            settings.user_topic,
            poll_timeout=settings.poll_timeout,
            allowed_platforms=allowed_platforms,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        self._consumer.subscribe([self._topic])
        self._running = True
        self._task = asyncio.create_task(self._run(), name="user-event-consumer")
        logger.info("User event consumer subscribed to '%s'", self._topic)

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            await self._task
            self._task = None
        self._consumer.close()
        logger.info("User event consumer stopped")

    # Hey future me - Consumer.poll() is BLOCKING, so it runs in a worker thread. One bad
    # message must not kill the loop: errors are logged and we move on to the next poll.
    async def _run(self) -> None:
        while self._running:
            msg = await asyncio.to_thread(self._consumer.poll, self._poll_timeout)
            if msg is None:
                continue
            if msg.error():
                if msg.error().code() == KafkaError._PARTITION_EOF:
                    continue
                logger.error("Kafka consumer error: %s", msg.error())
                continue
            try:
                await self.handle_message(msg.value())
            except Exception:
                logger.exception("Failed to process user event from '%s'", self._topic)

    async def handle_message(self, raw: bytes | str | None) -> bool:
        """Apply one user event; returns True if a platform link was stored."""
        if raw is None:
            return False
        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            payload = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Skipping malformed user event: %s", e)
            return False

        extracted = extract_user_platform(payload, self._allowed)
        if extracted is None:
            logger.debug("User event without a supported platform, skipping")
            return False

        user_id, platform = extracted
        await self._user_service.link_platform(user_id, platform.value)
        return True
