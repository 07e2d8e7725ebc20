from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path, PurePath

from localegen.core.errors import SourceFileNotFoundError


logger = logging.getLogger(__name__)


class LocalFileStorage:
    """Persist uploaded source files on the local filesystem as ``{file_id}.{ext}``."""

    def __init__(self, base_dir: Path | str):
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def save(self, file_name: str, content: bytes) -> str:
        """Store ``content`` and return the generated file id."""
        file_id = str(uuid.uuid4())
        extension = PurePath(file_name).suffix.lower()
        target = self._base_dir / f"{file_id}{extension}"
        await asyncio.to_thread(target.write_bytes, content)
        logger.info("Stored upload %s as %s (%d bytes)", file_name, target.name, len(content))
        return file_id

    async def get(self, file_id: str) -> bytes | None:
        path = self.locate(file_id)
        if path is None:
            return None
        return await asyncio.to_thread(path.read_bytes)

    def locate(self, file_id: str) -> Path | None:
        """Return the stored path for ``file_id`` or ``None`` when unknown."""
        try:
            normalized = str(uuid.UUID(file_id))
        except (ValueError, TypeError, AttributeError):
            return None
        for candidate in self._base_dir.glob(f"{normalized}*"):
            if candidate.is_file() and candidate.stem == normalized:
                return candidate
        return None

    def file_name(self, file_id: str) -> str | None:
        """Return the stored file name, whose suffix selects the codec."""
        path = self.locate(file_id)
        return path.name if path else None

    async def load(self, file_id: str) -> tuple[str, bytes]:
        """Return ``(file_name, content)`` for a stored upload."""
        path = self.locate(file_id)
        if path is None:
            raise SourceFileNotFoundError(f"Source file {file_id!r} not found")
        content = await asyncio.to_thread(path.read_bytes)
        return path.name, content
