"""Error taxonomy shared by the codec, translation and packaging layers."""

from __future__ import annotations


class LocalegenError(RuntimeError):
    """Base class for failures raised by the generation pipeline."""


class UnsupportedFormatError(LocalegenError):
    """Raised when a file name matches none of the known format suffixes."""

    def __init__(self, file_name: str) -> None:
        super().__init__(f"Unsupported format: {file_name}")
        self.file_name = file_name


class FormatNotImplementedError(LocalegenError):
    """Raised for a known format that has no codec registered."""

    def __init__(self, format_name: str, operation: str = "codec") -> None:
        super().__init__(f"{operation.capitalize()} for {format_name} not implemented")
        self.format_name = format_name
        self.operation = operation


class CodecError(LocalegenError):
    """Raised when content cannot be decoded by the codec of its format."""


class ExternalServiceError(LocalegenError):
    """Raised when the translation endpoint fails or answers with garbage."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GenerationStorageError(LocalegenError):
    """Raised when generated artifacts cannot be written to disk."""


class NotFoundError(LocalegenError, LookupError):
    """Raised when a requested resource does not exist."""


class SourceFileNotFoundError(NotFoundError):
    """Raised when an uploaded source file id cannot be resolved."""


class GenerationNotFoundError(NotFoundError):
    """Raised when a generation archive cannot be resolved."""
