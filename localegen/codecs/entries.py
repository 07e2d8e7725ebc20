"""Value types shared by codecs, the translation service and the packager."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping


class OutputFormat(str, Enum):
    """Localization file formats understood by the pipeline."""

    XML = "XML"
    JSON = "JSON"
    STRINGS = "STRINGS"
    ARB = "ARB"
    YAML = "YAML"
    PROPERTIES = "PROPERTIES"
    TXT = "TXT"

    @property
    def extension(self) -> str:
        return self.value.lower()

    @classmethod
    def parse(cls, value: str | OutputFormat) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            raise ValueError(f"Unknown output format '{value}'.") from exc


@dataclass(frozen=True)
class TranslationEntry:
    """One translatable key/value pair extracted from a source file."""

    key: str
    value: str
    comment: str | None = None
    plurals: Mapping[str, str] | None = None

    def with_value(self, value: str) -> TranslationEntry:
        return replace(self, value=value)


@dataclass(frozen=True)
class ParseResult:
    entries: tuple[TranslationEntry, ...]
    format: OutputFormat
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def keys(self) -> list[str]:
        return [entry.key for entry in self.entries]
