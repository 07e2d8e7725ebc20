from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Iterable, Sequence

from localegen.codecs.base import Codec
from localegen.codecs.entries import OutputFormat, ParseResult, TranslationEntry
from localegen.codecs.formats import (
    JsonCodec,
    PlainTextCodec,
    PropertiesCodec,
    StringsCodec,
    XmlCodec,
)
from localegen.core.errors import FormatNotImplementedError, UnsupportedFormatError


logger = logging.getLogger(__name__)


class CodecRegistry:
    """Lookup tables from file suffix and output format to the matching codec."""

    def __init__(self) -> None:
        self._codecs: dict[OutputFormat, Codec] = {}
        self._suffixes: dict[str, OutputFormat] = {}

    def register(self, codec: Codec, *, suffixes: Iterable[str] = ()) -> None:
        """Register ``codec`` for its format and map ``suffixes`` to that format."""
        self._codecs[codec.format] = codec
        for suffix in suffixes:
            self.register_suffix(suffix, codec.format)

    def register_suffix(self, suffix: str, format: OutputFormat) -> None:
        """Map a suffix to a format, whether or not a codec exists for it yet."""
        self._suffixes[self._normalize_suffix(suffix)] = format

    def resolve_format(self, file_name: str) -> OutputFormat:
        suffix = PurePath(file_name).suffix.lower()
        try:
            return self._suffixes[suffix]
        except KeyError:
            raise UnsupportedFormatError(file_name) from None

    def supports(self, format: OutputFormat) -> bool:
        return format in self._codecs

    def get_codec(self, format: OutputFormat, *, operation: str = "codec") -> Codec:
        codec = self._codecs.get(format)
        if codec is None:
            raise FormatNotImplementedError(format.value, operation)
        return codec

    def decode(self, file_name: str, content: str) -> ParseResult:
        format = self.resolve_format(file_name)
        codec = self.get_codec(format, operation="parser")
        result = codec.decode(content)
        logger.debug("Decoded %d entries from %s as %s", len(result.entries), file_name, format.value)
        return result

    def encode(
        self,
        format: OutputFormat,
        language: str,
        entries: Sequence[TranslationEntry],
    ) -> str:
        codec = self.get_codec(format, operation="generator")
        return codec.encode(entries, language)

    @property
    def suffixes(self) -> dict[str, OutputFormat]:
        return dict(self._suffixes)

    @property
    def formats(self) -> list[OutputFormat]:
        return [format for format in OutputFormat if format in self._codecs]

    @staticmethod
    def _normalize_suffix(suffix: str) -> str:
        normalized = suffix.strip().lower()
        return normalized if normalized.startswith(".") else f".{normalized}"


def default_registry() -> CodecRegistry:
    """Return a registry wired with every built-in codec."""
    registry = CodecRegistry()
    registry.register(XmlCodec(), suffixes=(".xml",))
    registry.register(JsonCodec(), suffixes=(".json",))
    registry.register(JsonCodec(OutputFormat.ARB), suffixes=(".arb",))
    registry.register(StringsCodec(), suffixes=(".strings",))
    registry.register(PropertiesCodec(), suffixes=(".properties",))
    registry.register(PlainTextCodec(), suffixes=(".txt",))
    # YAML is recognised but has no codec yet.
    registry.register_suffix(".yaml", OutputFormat.YAML)
    registry.register_suffix(".yml", OutputFormat.YAML)
    return registry
