from __future__ import annotations

import uuid
import zipfile
from pathlib import Path

import pytest

from localegen.codecs.entries import OutputFormat, TranslationEntry
from localegen.codecs.registry import default_registry
from localegen.core.errors import (
    FormatNotImplementedError,
    GenerationNotFoundError,
    GenerationStorageError,
)
from localegen.services import generation as generation_module
from localegen.services.generation import BatchGenerationService
from localegen.services.translation import TranslationService
from stubs import StubEndpointClient, StubTranslationMemory


ENTRIES = [
    TranslationEntry("title", "Welcome"),
    TranslationEntry("cta", "Get started"),
]


def _service(base_dir: Path, client: StubEndpointClient | None = None) -> BatchGenerationService:
    translation_service = TranslationService(StubTranslationMemory(), client or StubEndpointClient())
    return BatchGenerationService(translation_service, default_registry(), base_dir)


@pytest.mark.asyncio
async def test_process_batch_writes_language_tree_and_archive(tmp_path: Path) -> None:
    service = _service(tmp_path / "generated")

    generation_id = await service.process_batch(
        ENTRIES,
        "en",
        ["fr", "de", "ja"],
        {"fr": [OutputFormat.XML, OutputFormat.JSON], "de": [OutputFormat.PROPERTIES]},
    )

    uuid.UUID(generation_id)
    generation_dir = tmp_path / "generated" / generation_id
    assert sorted(path.name for path in generation_dir.iterdir()) == ["de", "fr", "ja"]
    assert sorted(path.name for path in (generation_dir / "fr").iterdir()) == [
        "strings.json",
        "strings.xml",
    ]
    assert [path.name for path in (generation_dir / "de").iterdir()] == ["strings.properties"]
    assert [path.name for path in (generation_dir / "ja").iterdir()] == ["strings.json"]

    xml = (generation_dir / "fr" / "strings.xml").read_text(encoding="utf-8")
    assert xml == (
        "<resources>\n"
        '    <string name="title">[fr] Welcome</string>\n'
        '    <string name="cta">[fr] Get started</string>\n'
        "</resources>"
    )

    archive = service.get_zip_file(generation_id)
    assert archive == tmp_path / "generated" / f"{generation_id}.zip"
    with zipfile.ZipFile(archive) as bundle:
        assert sorted(bundle.namelist()) == [
            "de/strings.properties",
            "fr/strings.json",
            "fr/strings.xml",
            "ja/strings.json",
        ]
        assert bundle.read("de/strings.properties").decode("utf-8") == (
            "title=[de] Welcome\ncta=[de] Get started"
        )


@pytest.mark.asyncio
async def test_arb_output_uses_arb_extension(tmp_path: Path) -> None:
    service = _service(tmp_path)

    generation_id = await service.process_batch(
        ENTRIES, "en", ["es"], {"es": [OutputFormat.ARB, OutputFormat.ARB, OutputFormat.TXT]}
    )

    language_dir = tmp_path / generation_id / "es"
    assert sorted(path.name for path in language_dir.iterdir()) == ["strings.arb", "strings.txt"]
    assert (language_dir / "strings.txt").read_text(encoding="utf-8") == (
        "[es] Welcome\n[es] Get started"
    )


@pytest.mark.asyncio
async def test_untranslated_entries_still_written(tmp_path: Path) -> None:
    client = StubEndpointClient(failing={"Get started"})
    service = _service(tmp_path, client)

    generation_id = await service.process_batch(ENTRIES, "en", ["it"], {})

    content = (tmp_path / generation_id / "it" / "strings.json").read_text(encoding="utf-8")
    assert content == '{\n  "title": "[it] Welcome",\n  "cta": "Get started"\n}'


@pytest.mark.asyncio
async def test_unbuilt_format_fails_before_any_work(tmp_path: Path) -> None:
    client = StubEndpointClient()
    service = _service(tmp_path, client)

    with pytest.raises(FormatNotImplementedError):
        await service.process_batch(ENTRIES, "en", ["fr"], {"fr": [OutputFormat.YAML]})

    assert client.calls == []
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("language", ["../escape", "fr/CA", ""])
async def test_invalid_language_codes_are_rejected(tmp_path: Path, language: str) -> None:
    service = _service(tmp_path)

    with pytest.raises(ValueError):
        await service.process_batch(ENTRIES, "en", [language], {})

    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_write_failure_discards_partial_generation(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    original_write = generation_module._write_text

    def failing_write(path: Path, content: str) -> None:
        if path.parent.name == "de":
            raise PermissionError(13, "Permission denied", str(path))
        original_write(path, content)

    monkeypatch.setattr(generation_module, "_write_text", failing_write)
    service = _service(tmp_path)

    with pytest.raises(GenerationStorageError):
        await service.process_batch(ENTRIES, "en", ["fr", "de"], {})

    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_duplicate_languages_are_generated_once(tmp_path: Path) -> None:
    client = StubEndpointClient()
    service = _service(tmp_path, client)

    generation_id = await service.process_batch(ENTRIES, "en", ["fr", "fr"], {})

    assert [path.name for path in (tmp_path / generation_id).iterdir()] == ["fr"]
    assert len(client.calls) == len(ENTRIES)


@pytest.mark.asyncio
async def test_languages_are_translated_concurrently(tmp_path: Path) -> None:
    client = StubEndpointClient(default_delay=0.01)
    service = _service(tmp_path, client)
    entries = [TranslationEntry(f"key{index}", f"text {index}") for index in range(5)]

    await service.process_batch(entries, "en", ["fr", "de"], {})

    assert len(client.calls) == 10
    assert client.max_in_flight == 10


@pytest.mark.asyncio
async def test_explicit_empty_format_list_writes_no_artifacts(tmp_path: Path) -> None:
    service = _service(tmp_path)

    generation_id = await service.process_batch(
        ENTRIES, "en", [" fr ", "de"], {" fr ": [OutputFormat.XML], "de": []}
    )

    generation_dir = tmp_path / generation_id
    assert [path.name for path in generation_dir.iterdir()] == ["fr"]
    assert [path.name for path in (generation_dir / "fr").iterdir()] == ["strings.xml"]
    with zipfile.ZipFile(service.get_zip_file(generation_id)) as bundle:
        assert bundle.namelist() == ["fr/strings.xml"]


def test_get_zip_file_rejects_non_uuid_identifiers(tmp_path: Path) -> None:
    service = _service(tmp_path)

    with pytest.raises(GenerationNotFoundError):
        service.get_zip_file("../../etc/passwd")


def test_get_zip_file_is_a_pure_lookup(tmp_path: Path) -> None:
    service = _service(tmp_path)
    generation_id = str(uuid.uuid4())

    path = service.get_zip_file(generation_id)

    assert path == tmp_path / f"{generation_id}.zip"
    assert not path.exists()
