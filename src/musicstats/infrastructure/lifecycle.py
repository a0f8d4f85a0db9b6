"""Application lifecycle: the composition root.

Everything with a lifecycle (DB engine, Kafka producer/consumer, the shared
Spotify client used for consent URLs) is created here on startup, stored on
app.state, and torn down on shutdown. Nothing else in the code base builds
these objects or keeps them in module globals.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from confluent_kafka.admin import AdminClient
from fastapi import FastAPI

from musicstats.application.services.user_service import UserService
from musicstats.application.strategies import StrategyFactory, build_default_registry
from musicstats.config import Settings, get_settings
from musicstats.domain.ports import IEventPublisher
from musicstats.infrastructure.integrations.spotify_client import SpotifyClient
from musicstats.infrastructure.messaging import (
    KafkaEventPublisher,
    NullEventPublisher,
    UserEventConsumer,
    ensure_topics,
)
from musicstats.infrastructure.observability import configure_logging
from musicstats.infrastructure.persistence import Database, UserPlatformRepository

logger = logging.getLogger(__name__)


async def _start_kafka(app: FastAPI, settings: Settings, db: Database) -> None:
    kafka = settings.kafka
    admin = AdminClient({"bootstrap.servers": kafka.bootstrap_servers})
    await ensure_topics(
        admin,
        [kafka.topic, kafka.user_topic],
        retries=kafka.topic_init_retries,
        delay=kafka.topic_init_delay,
    )

    app.state.event_publisher = KafkaEventPublisher.from_settings(kafka)

    user_service = UserService(
        UserPlatformRepository(db.session_scope), settings.api.allowed_platforms
    )
    consumer = UserEventConsumer.from_settings(
        kafka, user_service, settings.api.allowed_platforms
    )
    await consumer.start()
    app.state.user_consumer = consumer


# Listen future me, everything before `yield` is startup, everything after is shutdown. The
# try/finally makes sure the engine and producer are released even if startup blew up halfway.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    db = Database(settings)
    app.state.db = db
    app.state.event_publisher = NullEventPublisher()
    app.state.user_consumer = None
    auth_client = SpotifyClient(settings.spotify)
    app.state.spotify_auth_client = auth_client
    try:
        if settings.database.auto_create_tables:
            await db.create_tables()
        logger.info("Database initialized: %s", settings.database.url)

        app.state.strategy_factory = StrategyFactory(
            build_default_registry(lambda: SpotifyClient(settings.spotify))
        )

        if settings.kafka.enabled:
            await _start_kafka(app, settings, db)
        else:
            logger.info("Kafka disabled, events will not be published")

        yield
    finally:
        logger.info("Shutting down application")
        consumer: UserEventConsumer | None = app.state.user_consumer
        if consumer is not None:
            await consumer.stop()
        publisher: IEventPublisher = app.state.event_publisher
        if isinstance(publisher, KafkaEventPublisher):
            publisher.close()
        await auth_client.close()
        await db.close()
