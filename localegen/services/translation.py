from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError

from localegen.codecs.entries import TranslationEntry
from localegen.core.errors import ExternalServiceError
from localegen.integrations.llm import TranslationEndpointClient
from localegen.services.translation_memory import TranslationMemoryService


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5


class TranslationStatus(str, Enum):
    CACHED = "cached"
    TRANSLATED = "translated"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class TranslationOutcome:
    """Result of translating one entry.

    ``PASSTHROUGH`` carries the original entry after the endpoint failed.
    """

    entry: TranslationEntry
    status: TranslationStatus


@dataclass
class TranslationStats:
    cached: int = 0
    translated: int = 0
    passthrough: int = 0

    def observe(self, status: TranslationStatus) -> None:
        if status is TranslationStatus.CACHED:
            self.cached += 1
        elif status is TranslationStatus.TRANSLATED:
            self.translated += 1
        else:
            self.passthrough += 1

    @property
    def total(self) -> int:
        return self.cached + self.translated + self.passthrough


class TranslationService:
    """Translate entries against the endpoint, consulting translation memory first."""

    def __init__(
        self,
        memory: TranslationMemoryService,
        client: TranslationEndpointClient,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1.")
        self._memory = memory
        self._client = client
        self._chunk_size = chunk_size
        self.stats = TranslationStats()

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    async def translate_one(
        self,
        entry: TranslationEntry,
        source_language: str,
        target_language: str,
    ) -> TranslationOutcome:
        """Translate a single entry. Never raises for endpoint failures."""
        outcome = await self._translate_one(entry, source_language, target_language)
        self.stats.observe(outcome.status)
        return outcome

    async def translate_batch(
        self,
        entries: Sequence[TranslationEntry],
        source_language: str,
        target_language: str,
    ) -> list[TranslationEntry]:
        """Translate ``entries`` in sequential chunks, each chunk concurrently.

        The result has the same length and order as ``entries``.
        """
        translated: list[TranslationEntry] = []
        for start in range(0, len(entries), self._chunk_size):
            chunk = entries[start : start + self._chunk_size]
            outcomes = await asyncio.gather(
                *(
                    self.translate_one(entry, source_language, target_language)
                    for entry in chunk
                )
            )
            translated.extend(outcome.entry for outcome in outcomes)
        return translated

    async def _translate_one(
        self,
        entry: TranslationEntry,
        source_language: str,
        target_language: str,
    ) -> TranslationOutcome:
        try:
            cached = await self._memory.lookup(entry.value, source_language, target_language)
        except SQLAlchemyError as exc:
            logger.warning(
                "Translation memory lookup failed for key %s; treating as miss.",
                entry.key,
                exc_info=exc,
            )
            cached = None

        if cached is not None:
            logger.debug("Found cached translation for '%s' (%s)", entry.key, target_language)
            return TranslationOutcome(entry.with_value(cached), TranslationStatus.CACHED)

        logger.debug("Sending translation request for key: %s (%s)", entry.key, target_language)
        try:
            content = await self._client.translate(
                entry.value,
                source_language=source_language,
                target_language=target_language,
            )
        except ExternalServiceError as exc:
            logger.warning(
                "Translation failed for key %s (%s->%s): %s",
                entry.key,
                source_language,
                target_language,
                exc,
            )
            return TranslationOutcome(entry, TranslationStatus.PASSTHROUGH)

        translated_text = content.strip()
        try:
            await self._memory.record(
                entry.value, translated_text, source_language, target_language
            )
        except SQLAlchemyError as exc:
            logger.warning(
                "Failed to record translation memory for key %s.",
                entry.key,
                exc_info=exc,
            )
        return TranslationOutcome(entry.with_value(translated_text), TranslationStatus.TRANSLATED)
