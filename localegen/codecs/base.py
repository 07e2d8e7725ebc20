from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from localegen.codecs.entries import OutputFormat, ParseResult, TranslationEntry


class Codec(ABC):
    """Decode/encode pair for one localization file format."""

    format: OutputFormat

    @abstractmethod
    def decode(self, content: str) -> ParseResult:
        """Return the entries found in ``content`` in first-seen order."""

    @abstractmethod
    def encode(self, entries: Sequence[TranslationEntry], language: str) -> str:
        """Render ``entries`` in the given order."""

    def _result(self, entries: list[TranslationEntry]) -> ParseResult:
        return ParseResult(entries=tuple(entries), format=self.format)
