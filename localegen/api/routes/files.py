from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse

from localegen.api.deps import (
    get_app_settings,
    get_codec_registry,
    get_file_storage,
    get_generation_service,
)
from localegen.codecs.registry import CodecRegistry
from localegen.core.config import AppSettings
from localegen.core.errors import (
    CodecError,
    FormatNotImplementedError,
    GenerationNotFoundError,
    GenerationStorageError,
    SourceFileNotFoundError,
    UnsupportedFormatError,
)
from localegen.integrations.storage import LocalFileStorage
from localegen.schemas.generation import (
    GenerationRequest,
    GenerationResponse,
    UploadResponse,
)
from localegen.services.generation import BatchGenerationService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Store a localization source file for later generation.",
)
async def upload_source_file(
    file: UploadFile = File(...),
    source_language: str | None = Form(default=None, alias="sourceLanguage"),
    storage: LocalFileStorage = Depends(get_file_storage),
    settings: AppSettings = Depends(get_app_settings),
) -> UploadResponse:
    payload = await file.read()
    file_name = file.filename or ""
    if not payload or not file_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )

    file_id = await storage.save(file_name, payload)
    return UploadResponse(
        file_id=file_id,
        file_name=file_name,
        source_language=source_language or settings.default_source_language,
    )


@router.post(
    "/generate",
    response_model=GenerationResponse,
    status_code=status.HTTP_200_OK,
    summary="Translate an uploaded file into every requested language and format.",
)
async def generate_translations(
    payload: GenerationRequest,
    storage: LocalFileStorage = Depends(get_file_storage),
    registry: CodecRegistry = Depends(get_codec_registry),
    generator: BatchGenerationService = Depends(get_generation_service),
    settings: AppSettings = Depends(get_app_settings),
) -> GenerationResponse:
    try:
        file_name, content = await storage.load(payload.source_file_id)
    except SourceFileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Source file not found",
        ) from exc

    try:
        parse_result = registry.decode(file_name, content.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Source file is not valid UTF-8 text.",
        ) from exc
    except UnsupportedFormatError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except FormatNotImplementedError as exc:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail=str(exc)) from exc
    except CodecError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    try:
        generation_id = await generator.process_batch(
            list(parse_result.entries),
            payload.source_language or settings.default_source_language,
            payload.target_languages,
            payload.output_formats,
        )
    except FormatNotImplementedError as exc:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except GenerationStorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error processing file: {exc}",
        ) from exc

    return GenerationResponse(generation_id=generation_id)


@router.get(
    "/download/{generation_id}",
    response_class=FileResponse,
    summary="Download the archive produced by a generation.",
)
async def download_generation(
    generation_id: str,
    generator: BatchGenerationService = Depends(get_generation_service),
) -> FileResponse:
    try:
        archive = generator.get_zip_file(generation_id)
    except GenerationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    if not archive.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Generation not found",
        )

    return FileResponse(
        archive,
        media_type="application/zip",
        filename=f"{generation_id}.zip",
    )
