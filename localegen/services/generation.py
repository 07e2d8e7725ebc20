from __future__ import annotations

import asyncio
import logging
import re
import shutil
import uuid
import zipfile
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from localegen.codecs.entries import OutputFormat, TranslationEntry
from localegen.codecs.registry import CodecRegistry
from localegen.core.errors import GenerationNotFoundError, GenerationStorageError
from localegen.services.translation import TranslationService


logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMATS: tuple[OutputFormat, ...] = (OutputFormat.JSON,)
ARTIFACT_STEM = "strings"

_LANGUAGE_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


class BatchGenerationService:
    """Translate parsed entries into every requested language and format, then zip the result.

    Layout under ``base_dir``::

        {generation_id}/{language}/strings.{ext}
        {generation_id}.zip
    """

    def __init__(
        self,
        translation_service: TranslationService,
        registry: CodecRegistry,
        base_dir: Path | str,
    ):
        self._translation_service = translation_service
        self._registry = registry
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Batch generation output directory: %s", self._base_dir.resolve())

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def translation_service(self) -> TranslationService:
        return self._translation_service

    async def process_batch(
        self,
        entries: Sequence[TranslationEntry],
        source_language: str,
        target_languages: Iterable[str],
        output_formats: Mapping[str, Sequence[OutputFormat]] | None = None,
    ) -> str:
        """Run one generation and return its identifier once the archive is written."""
        languages = self._normalize_languages(target_languages)
        requested = {
            language.strip(): formats for language, formats in (output_formats or {}).items()
        }
        plan = {language: self._formats_for(language, requested) for language in languages}
        for formats in plan.values():
            for format in formats:
                # Raises FormatNotImplementedError before any work starts.
                self._registry.get_codec(format, operation="generator")

        generation_id = str(uuid.uuid4())
        generation_dir = self._base_dir / generation_id
        archive_path = self._archive_path(generation_id)
        logger.info(
            "Started processing batch %s: %d entries, languages=%s",
            generation_id,
            len(entries),
            ",".join(languages) or "-",
        )

        try:
            await asyncio.to_thread(generation_dir.mkdir, parents=True, exist_ok=False)
            results = await asyncio.gather(
                *(
                    self._generate_language(
                        generation_dir, entries, source_language, language, plan[language]
                    )
                    for language in languages
                ),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            await asyncio.to_thread(_write_archive, generation_dir, archive_path)
        except OSError as exc:
            logger.error("Generation %s failed while writing artifacts", generation_id, exc_info=exc)
            await asyncio.to_thread(self._discard, generation_dir, archive_path)
            raise GenerationStorageError(
                f"Failed to write artifacts for generation {generation_id}: {exc}"
            ) from exc
        except Exception:
            await asyncio.to_thread(self._discard, generation_dir, archive_path)
            raise

        logger.info("Created zip archive: %s", archive_path)
        return generation_id

    def get_zip_file(self, generation_id: str) -> Path:
        """Return the archive path for ``generation_id``; existence is not checked."""
        try:
            normalized = str(uuid.UUID(generation_id))
        except (ValueError, TypeError, AttributeError) as exc:
            raise GenerationNotFoundError(f"Generation {generation_id!r} not found") from exc
        path = self._archive_path(normalized)
        logger.debug("Requested zip file: %s. Exists: %s", path, path.exists())
        return path

    async def _generate_language(
        self,
        generation_dir: Path,
        entries: Sequence[TranslationEntry],
        source_language: str,
        language: str,
        formats: Sequence[OutputFormat],
    ) -> None:
        translated = await self._translation_service.translate_batch(
            entries, source_language, language
        )
        language_dir = generation_dir / language
        for format in formats:
            content = self._registry.encode(format, language, translated)
            target = language_dir / f"{ARTIFACT_STEM}.{format.extension}"
            await asyncio.to_thread(_write_text, target, content)
        logger.debug("Wrote %d format(s) for %s", len(formats), language)

    def _archive_path(self, generation_id: str) -> Path:
        return self._base_dir / f"{generation_id}.zip"

    @staticmethod
    def _formats_for(
        language: str, output_formats: Mapping[str, Sequence[OutputFormat]]
    ) -> list[OutputFormat]:
        requested = output_formats.get(language)
        if requested is None:
            requested = DEFAULT_OUTPUT_FORMATS
        formats: list[OutputFormat] = []
        for value in requested:
            format = OutputFormat.parse(value)
            if format not in formats:
                formats.append(format)
        return formats

    @staticmethod
    def _normalize_languages(target_languages: Iterable[str]) -> list[str]:
        languages: list[str] = []
        for language in target_languages:
            code = language.strip()
            if not _LANGUAGE_PATTERN.match(code):
                raise ValueError(f"Invalid target language code '{language}'.")
            if code not in languages:
                languages.append(code)
        return languages

    @staticmethod
    def _discard(generation_dir: Path, archive_path: Path) -> None:
        shutil.rmtree(generation_dir, ignore_errors=True)
        try:
            archive_path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove partial archive %s", archive_path)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _write_archive(source_dir: Path, archive_path: Path) -> None:
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path in sorted(source_dir.rglob("*")):
            if path.is_file():
                archive.write(path, arcname=path.relative_to(source_dir).as_posix())
