"""Command line access to the batch translation pipeline."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from localegen.codecs.entries import OutputFormat
from localegen.codecs.registry import CodecRegistry, default_registry
from localegen.core.config import get_settings
from localegen.core.container import build_container
from localegen.core.database import init_database
from localegen.core.errors import LocalegenError
from localegen.services.translation_memory import TranslationMemoryService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localegen",
        description="Translate localization files into multi-language archives.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Translate a local source file and package the results.",
    )
    generate_parser.add_argument("path", type=Path, help="Localization source file.")
    generate_parser.add_argument(
        "--target",
        dest="targets",
        action="append",
        required=True,
        help="Target language code (repeatable).",
    )
    generate_parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        default=[],
        help="Per-language formats as LANG=FMT[,FMT] (repeatable; default JSON).",
    )
    generate_parser.add_argument(
        "--source",
        default=None,
        help="Source language code (default: DEFAULT_SOURCE_LANGUAGE).",
    )
    generate_parser.set_defaults(command="generate")

    subparsers.add_parser("formats", help="List known file suffixes and codecs.")
    subparsers.add_parser("stats", help="Show translation memory row count.")
    subparsers.add_parser("migrate", help="Upgrade the database schema to head.")

    return parser


def parse_format_options(raw_options: list[str]) -> dict[str, list[OutputFormat]]:
    """Parse ``fr=xml,json`` style options into a language -> formats mapping."""
    mapping: dict[str, list[OutputFormat]] = {}
    for raw in raw_options:
        language, separator, formats = raw.partition("=")
        if not separator or not language.strip() or not formats.strip():
            raise ValueError(f"Invalid format option '{raw}', expected LANG=FMT[,FMT].")
        mapping.setdefault(language.strip(), []).extend(
            OutputFormat.parse(token) for token in formats.split(",") if token.strip()
        )
    return mapping


def render_formats_table(registry: CodecRegistry) -> str:
    lines = ["Suffix        Format      Codec"]
    for suffix, format in sorted(registry.suffixes.items()):
        codec = "yes" if registry.supports(format) else "not implemented"
        lines.append(f"{suffix:<13} {format.value:<11} {codec}")
    return "\n".join(lines)


async def handle_generate(args: argparse.Namespace) -> int:
    settings = get_settings()
    container = build_container(settings)
    if container.generation_service is None:
        print("DATABASE_URL must be configured to run a generation.")
        return 2

    try:
        content = args.path.read_text(encoding="utf-8")
        parse_result = container.registry.decode(args.path.name, content)
        generation_id = await container.generation_service.process_batch(
            list(parse_result.entries),
            args.source or settings.default_source_language,
            args.targets,
            parse_format_options(args.formats),
        )
        stats = container.generation_service.translation_service.stats
    finally:
        await container.aclose()

    archive = container.generation_service.get_zip_file(generation_id)
    print(
        json.dumps(
            {
                "generationId": generation_id,
                "archive": str(archive),
                "entries": len(parse_result.entries),
                "cached": stats.cached,
                "translated": stats.translated,
                "passthrough": stats.passthrough,
            },
            indent=2,
        )
    )
    return 0


async def handle_stats(args: argparse.Namespace) -> int:
    container = build_container(get_settings())
    if container.session_factory is None:
        print("DATABASE_URL must be configured to read translation memory.")
        return 2
    try:
        total = await TranslationMemoryService(container.session_factory).count_records()
    finally:
        await container.aclose()
    print(f"Translation memory rows: {total}")
    return 0


async def dispatch(args: argparse.Namespace) -> int:
    if args.command == "generate":
        return await handle_generate(args)
    if args.command == "formats":
        print(render_formats_table(default_registry()))
        return 0
    if args.command == "stats":
        return await handle_stats(args)
    if args.command == "migrate":
        await init_database(get_settings())
        return 0
    raise ValueError(f"Unsupported command {args.command}")


def cli() -> int:
    parser = build_parser()
    args = parser.parse_args()
    try:
        return asyncio.run(dispatch(args))
    except (LocalegenError, ValueError, OSError) as exc:
        parser.exit(1, f"error: {exc}\n")
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        return 130


if __name__ == "__main__":
    raise SystemExit(cli())
