"""SQLAlchemy models and declarative base."""

from localegen.models.base import Base  # noqa: F401
from localegen.models.entities import TranslationMemory  # noqa: F401

__all__ = [
    "Base",
    "TranslationMemory",
]
