from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from localegen.codecs.registry import default_registry
from localegen.core.app import create_app
from localegen.core.config import AppSettings
from localegen.core.container import ServiceContainer
from localegen.integrations.storage import LocalFileStorage
from localegen.services.generation import BatchGenerationService
from localegen.services.translation import TranslationService
from stubs import StubEndpointClient, StubTranslationMemory


SOURCE_XML = (
    "<resources>\n"
    '    <string name="greeting">Hello</string>\n'
    '    <string name="farewell">Goodbye</string>\n'
    "</resources>"
)


@pytest.fixture()
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        UPLOAD_DIR=str(tmp_path / "uploads"),
        GENERATION_DIR=str(tmp_path / "generated"),
        DATABASE_URL=None,
        _env_file=None,
    )


def _container(settings: AppSettings, *, with_generator: bool = True) -> ServiceContainer:
    registry = default_registry()
    container = ServiceContainer(
        settings=settings,
        registry=registry,
        storage=LocalFileStorage(settings.upload_dir),
    )
    if with_generator:
        translation_service = TranslationService(StubTranslationMemory(), StubEndpointClient())
        container.translation_service = translation_service
        container.generation_service = BatchGenerationService(
            translation_service, registry, settings.generation_dir
        )
    return container


@pytest.fixture()
def client(settings: AppSettings):
    app = create_app(container=_container(settings))
    with TestClient(app) as test_client:
        yield test_client


def _upload(client: TestClient, name: str, content: bytes, **form: str) -> dict:
    response = client.post(
        "/api/v1/upload",
        files={"file": (name, content, "application/octet-stream")},
        data=form,
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_upload_returns_identifier_and_language(client: TestClient, settings: AppSettings) -> None:
    payload = _upload(client, "strings.xml", SOURCE_XML.encode("utf-8"), sourceLanguage="de")

    assert payload["fileName"] == "strings.xml"
    assert payload["sourceLanguage"] == "de"
    assert (settings.upload_dir / f"{payload['fileId']}.xml").is_file()


def test_upload_defaults_source_language(client: TestClient) -> None:
    payload = _upload(client, "app.json", b'{"title": "Hi"}')

    assert payload["sourceLanguage"] == "en"


def test_upload_rejects_empty_file(client: TestClient) -> None:
    response = client.post(
        "/api/v1/upload",
        files={"file": ("strings.xml", b"", "application/xml")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded"


def test_generate_then_download_archive(client: TestClient) -> None:
    uploaded = _upload(client, "strings.xml", SOURCE_XML.encode("utf-8"))

    response = client.post(
        "/api/v1/generate",
        json={
            "sourceFileId": uploaded["fileId"],
            "targetLanguages": ["fr", "de"],
            "outputFormats": {"fr": ["xml", "json"]},
        },
    )
    assert response.status_code == 200, response.text
    generation_id = response.json()["generationId"]

    download = client.get(f"/api/v1/download/{generation_id}")
    assert download.status_code == 200
    assert download.headers["content-type"] == "application/zip"
    assert f'filename="{generation_id}.zip"' in download.headers["content-disposition"]

    with zipfile.ZipFile(io.BytesIO(download.content)) as bundle:
        assert sorted(bundle.namelist()) == [
            "de/strings.json",
            "fr/strings.json",
            "fr/strings.xml",
        ]
        assert bundle.read("de/strings.json").decode("utf-8") == (
            '{\n  "greeting": "[de] Hello",\n  "farewell": "[de] Goodbye"\n}'
        )


def test_generate_unknown_source_file_returns_404(client: TestClient) -> None:
    response = client.post(
        "/api/v1/generate",
        json={
            "sourceFileId": "3f8d7a4e-2d7f-4e7c-9b1a-0c7c1c2b9f11",
            "targetLanguages": ["fr"],
        },
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Source file not found"


def test_generate_unsupported_source_returns_400(client: TestClient) -> None:
    uploaded = _upload(client, "notes.docx", b"binary")

    response = client.post(
        "/api/v1/generate",
        json={"sourceFileId": uploaded["fileId"], "targetLanguages": ["fr"]},
    )

    assert response.status_code == 400
    assert "Unsupported format" in response.json()["detail"]


def test_generate_yaml_source_returns_501(client: TestClient) -> None:
    uploaded = _upload(client, "strings.yaml", b"greeting: Hello")

    response = client.post(
        "/api/v1/generate",
        json={"sourceFileId": uploaded["fileId"], "targetLanguages": ["fr"]},
    )

    assert response.status_code == 501


def test_generate_yaml_output_returns_501(client: TestClient, settings: AppSettings) -> None:
    uploaded = _upload(client, "strings.xml", SOURCE_XML.encode("utf-8"))

    response = client.post(
        "/api/v1/generate",
        json={
            "sourceFileId": uploaded["fileId"],
            "targetLanguages": ["fr"],
            "outputFormats": {"fr": ["yaml"]},
        },
    )

    assert response.status_code == 501
    assert list(settings.generation_dir.iterdir()) == []


def test_generate_malformed_json_returns_422(client: TestClient) -> None:
    uploaded = _upload(client, "app.json", b"{not json")

    response = client.post(
        "/api/v1/generate",
        json={"sourceFileId": uploaded["fileId"], "targetLanguages": ["fr"]},
    )

    assert response.status_code == 422


def test_generate_invalid_language_returns_400(client: TestClient) -> None:
    uploaded = _upload(client, "strings.xml", SOURCE_XML.encode("utf-8"))

    response = client.post(
        "/api/v1/generate",
        json={"sourceFileId": uploaded["fileId"], "targetLanguages": ["../fr"]},
    )

    assert response.status_code == 400


def test_generate_requires_target_languages(client: TestClient) -> None:
    uploaded = _upload(client, "strings.xml", SOURCE_XML.encode("utf-8"))

    response = client.post(
        "/api/v1/generate",
        json={"sourceFileId": uploaded["fileId"], "targetLanguages": []},
    )

    assert response.status_code == 422


@pytest.mark.parametrize(
    "generation_id",
    ["3f8d7a4e-2d7f-4e7c-9b1a-0c7c1c2b9f11", "not-a-generation"],
)
def test_download_unknown_generation_returns_404(client: TestClient, generation_id: str) -> None:
    response = client.get(f"/api/v1/download/{generation_id}")

    assert response.status_code == 404


def test_generation_routes_unavailable_without_generator(settings: AppSettings) -> None:
    app = create_app(container=_container(settings, with_generator=False))

    with TestClient(app) as client:
        uploaded = _upload(client, "strings.xml", SOURCE_XML.encode("utf-8"))
        response = client.post(
            "/api/v1/generate",
            json={"sourceFileId": uploaded["fileId"], "targetLanguages": ["fr"]},
        )
        download = client.get("/api/v1/download/3f8d7a4e-2d7f-4e7c-9b1a-0c7c1c2b9f11")

    assert response.status_code == 503
    assert response.json()["detail"] == "Batch generation is not configured."
    assert download.status_code == 503
