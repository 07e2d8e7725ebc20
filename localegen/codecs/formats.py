"""Concrete codecs for Android XML, JSON/ARB, iOS strings, Java properties and plain text.

Decoders scan with regular expressions rather than full parsers so that hand-authored
files round-trip through the same narrow grammar the encoders emit.
"""

from __future__ import annotations

import json
import re
from typing import Any, Sequence

from localegen.codecs.base import Codec
from localegen.codecs.entries import OutputFormat, ParseResult, TranslationEntry
from localegen.core.errors import CodecError


_XML_STRING_PATTERN = re.compile(r'<string name="([^"]+)">([^<]+)</string>')
_STRINGS_PAIR_PATTERN = re.compile(r'"([^"]+)"\s*=\s*"([^"]+)";')


class XmlCodec(Codec):
    """Android ``strings.xml`` resources."""

    format = OutputFormat.XML

    def decode(self, content: str) -> ParseResult:
        entries = [
            TranslationEntry(key=match.group(1), value=match.group(2))
            for match in _XML_STRING_PATTERN.finditer(content)
        ]
        return self._result(entries)

    def encode(self, entries: Sequence[TranslationEntry], language: str) -> str:
        body = "\n".join(
            f'    <string name="{entry.key}">{entry.value}</string>' for entry in entries
        )
        return f"<resources>\n{body}\n</resources>"


class JsonCodec(Codec):
    """Flat JSON bundles, including Flutter ARB files with ``@key`` metadata."""

    format = OutputFormat.JSON

    def __init__(self, format: OutputFormat = OutputFormat.JSON) -> None:
        self.format = format

    def decode(self, content: str) -> ParseResult:
        try:
            document = json.loads(content)
        except json.JSONDecodeError as exc:
            raise CodecError(f"Invalid JSON document: {exc.msg}") from exc
        if not isinstance(document, dict):
            raise CodecError("JSON localization files must contain a top-level object.")

        entries: list[TranslationEntry] = []
        for key, value in document.items():
            if key.startswith("@"):
                continue
            metadata = document.get(f"@{key}")
            entries.append(
                TranslationEntry(
                    key=key,
                    value=self._coerce_value(value),
                    comment=_compact_json(metadata) if metadata is not None else None,
                )
            )
        return self._result(entries)

    def encode(self, entries: Sequence[TranslationEntry], language: str) -> str:
        pairs = ",\n  ".join(f'"{entry.key}": "{entry.value}"' for entry in entries)
        return f"{{\n  {pairs}\n}}"

    @staticmethod
    def _coerce_value(value: Any) -> str:
        # Strings stay JSON-escaped so encode can write them back verbatim.
        text = _compact_json(value)
        if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
            return text[1:-1]
        return text


class StringsCodec(Codec):
    """iOS ``Localizable.strings`` files."""

    format = OutputFormat.STRINGS

    def decode(self, content: str) -> ParseResult:
        entries = [
            TranslationEntry(key=match.group(1), value=match.group(2))
            for match in _STRINGS_PAIR_PATTERN.finditer(content)
        ]
        return self._result(entries)

    def encode(self, entries: Sequence[TranslationEntry], language: str) -> str:
        return "\n".join(f'"{entry.key}" = "{entry.value}";' for entry in entries)


class PropertiesCodec(Codec):
    """Java ``.properties`` bundles; lines without ``=`` are ignored."""

    format = OutputFormat.PROPERTIES

    def decode(self, content: str) -> ParseResult:
        entries: list[TranslationEntry] = []
        for line in content.splitlines():
            if not line.strip():
                continue
            key, separator, value = line.partition("=")
            if not separator:
                continue
            entries.append(TranslationEntry(key=key.strip(), value=value.strip()))
        return self._result(entries)

    def encode(self, entries: Sequence[TranslationEntry], language: str) -> str:
        return "\n".join(f"{entry.key}={entry.value}" for entry in entries)


class PlainTextCodec(Codec):
    """Values-only passthrough. Encoding drops keys, so the format is lossy."""

    format = OutputFormat.TXT
    content_key = "content"

    def decode(self, content: str) -> ParseResult:
        return self._result([TranslationEntry(key=self.content_key, value=content)])

    def encode(self, entries: Sequence[TranslationEntry], language: str) -> str:
        return "\n".join(entry.value for entry in entries)


def _compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
