from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from localegen.codecs.registry import CodecRegistry, default_registry
from localegen.core.config import AppSettings
from localegen.core.database import create_engine_and_session_factory
from localegen.integrations.llm import TranslationEndpointClient
from localegen.integrations.storage import LocalFileStorage
from localegen.services.generation import BatchGenerationService
from localegen.services.translation import TranslationService
from localegen.services.translation_memory import TranslationMemoryService


logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Explicitly constructed components shared by the HTTP layer and the CLI."""

    settings: AppSettings
    registry: CodecRegistry
    storage: LocalFileStorage
    engine: AsyncEngine | None = None
    session_factory: async_sessionmaker[AsyncSession] | None = None
    translation_service: TranslationService | None = None
    generation_service: BatchGenerationService | None = None

    async def aclose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


def build_generation_service(
    settings: AppSettings,
    session_factory: async_sessionmaker[AsyncSession],
    registry: CodecRegistry,
    *,
    client: TranslationEndpointClient | None = None,
) -> BatchGenerationService:
    memory = TranslationMemoryService(session_factory)
    translation_service = TranslationService(
        memory,
        client or TranslationEndpointClient(settings),
        chunk_size=settings.translation_chunk_size,
    )
    return BatchGenerationService(translation_service, registry, settings.generation_dir)


def build_container(settings: AppSettings) -> ServiceContainer:
    """Wire the pipeline from settings. Without a database the generator stays unset."""
    container = ServiceContainer(
        settings=settings,
        registry=default_registry(),
        storage=LocalFileStorage(settings.upload_dir),
    )
    if not settings.database_url:
        logger.warning("DATABASE_URL not configured; batch generation is disabled.")
        return container

    engine, session_factory = create_engine_and_session_factory(settings)
    container.engine = engine
    container.session_factory = session_factory
    container.generation_service = build_generation_service(
        settings, session_factory, container.registry
    )
    container.translation_service = container.generation_service.translation_service
    return container
