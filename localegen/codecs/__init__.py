"""Format-agnostic decoding and encoding of localization resources."""

from localegen.codecs.base import Codec  # noqa: F401
from localegen.codecs.entries import OutputFormat, ParseResult, TranslationEntry  # noqa: F401
from localegen.codecs.registry import CodecRegistry, default_registry  # noqa: F401

__all__ = [
    "Codec",
    "CodecRegistry",
    "OutputFormat",
    "ParseResult",
    "TranslationEntry",
    "default_registry",
]
