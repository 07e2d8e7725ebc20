from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from localegen.codecs.entries import OutputFormat


class UploadResponse(BaseModel):
    file_id: str = Field(..., alias="fileId", description="Identifier of the stored source file.")
    file_name: str = Field(..., alias="fileName", description="Original uploaded file name.")
    source_language: str = Field(
        ..., alias="sourceLanguage", description="Language code of the uploaded source text."
    )

    model_config = ConfigDict(populate_by_name=True)


class GenerationRequest(BaseModel):
    source_file_id: str = Field(..., alias="sourceFileId")
    target_languages: list[str] = Field(
        ...,
        alias="targetLanguages",
        min_length=1,
        description="Language codes to translate into.",
    )
    output_formats: dict[str, list[OutputFormat]] = Field(
        default_factory=dict,
        alias="outputFormats",
        description="Formats per language; languages without an entry receive JSON.",
    )
    source_language: str | None = Field(
        default=None,
        alias="sourceLanguage",
        description="Language code of the source file. Defaults to the configured language.",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("output_formats", mode="before")
    @classmethod
    def _uppercase_formats(cls, value):
        if isinstance(value, dict):
            return {
                language: [
                    item.upper() if isinstance(item, str) else item for item in formats or []
                ]
                for language, formats in value.items()
            }
        return value


class GenerationResponse(BaseModel):
    generation_id: str = Field(..., alias="generationId")

    model_config = ConfigDict(populate_by_name=True)
