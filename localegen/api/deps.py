from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from localegen.codecs.registry import CodecRegistry
from localegen.core.config import AppSettings
from localegen.core.container import ServiceContainer
from localegen.integrations.storage import LocalFileStorage
from localegen.services.generation import BatchGenerationService


def get_container(request: Request) -> ServiceContainer:
    """Return the components wired by ``create_app``."""
    return request.app.state.container


def get_app_settings(request: Request) -> AppSettings:
    return get_container(request).settings


def get_codec_registry(request: Request) -> CodecRegistry:
    return get_container(request).registry


def get_file_storage(request: Request) -> LocalFileStorage:
    return get_container(request).storage


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Provide the session factory, or 503 when no database is configured."""
    session_factory = get_container(request).session_factory
    if session_factory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection is not configured.",
        )
    return session_factory


def get_generation_service(request: Request) -> BatchGenerationService:
    """Provide the BatchGenerationService, or 503 when it cannot be wired."""
    service = get_container(request).generation_service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Batch generation is not configured.",
        )
    return service
