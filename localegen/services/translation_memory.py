from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from localegen.core.database import session_scope
from localegen.models import TranslationMemory


logger = logging.getLogger(__name__)


class TranslationMemoryService:
    """Persistent cache of translations keyed by source text and language pair.

    Each call opens its own session, so the service can be shared by many
    concurrent translation tasks. ``record`` is a plain read-then-write and is
    not atomic across concurrent writers of the same triple.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def lookup(
        self,
        source_text: str,
        source_language: str,
        target_language: str,
    ) -> str | None:
        """Return the stored translation for the triple, if any."""
        stmt = (
            select(TranslationMemory.translated_text)
            .where(*self._match(source_text, source_language, target_language))
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalars().first()

    async def record(
        self,
        source_text: str,
        translated_text: str,
        source_language: str,
        target_language: str,
    ) -> None:
        """Insert a new memory row, or bump the usage count of the existing one."""
        conditions = self._match(source_text, source_language, target_language)
        async with session_scope(self._session_factory) as session:
            existing = await session.execute(
                select(func.count(TranslationMemory.id)).where(*conditions)
            )
            if existing.scalar_one():
                await session.execute(
                    update(TranslationMemory)
                    .where(*conditions)
                    .values(usage_count=TranslationMemory.usage_count + 1)
                )
                logger.debug(
                    "Incremented translation memory usage (%s->%s)",
                    source_language,
                    target_language,
                )
                return

            session.add(
                TranslationMemory(
                    source_text=source_text,
                    translated_text=translated_text,
                    source_language=source_language,
                    target_language=target_language,
                    usage_count=1,
                )
            )

    async def usage_count(
        self,
        source_text: str,
        source_language: str,
        target_language: str,
    ) -> int:
        """Return the summed usage count for the triple (0 when unknown)."""
        stmt = select(func.coalesce(func.sum(TranslationMemory.usage_count), 0)).where(
            *self._match(source_text, source_language, target_language)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def count_records(
        self,
        *,
        source_language: str | None = None,
        target_language: str | None = None,
    ) -> int:
        stmt = select(func.count(TranslationMemory.id))
        if source_language:
            stmt = stmt.where(TranslationMemory.source_language == source_language)
        if target_language:
            stmt = stmt.where(TranslationMemory.target_language == target_language)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    @staticmethod
    def _match(source_text: str, source_language: str, target_language: str) -> list:
        return [
            TranslationMemory.source_text == source_text,
            TranslationMemory.source_language == source_language,
            TranslationMemory.target_language == target_language,
        ]
