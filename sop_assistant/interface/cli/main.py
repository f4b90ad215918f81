"""CLI for the SOP assistant.

Usage:
    python -m sop_assistant.interface.cli.main ask "How do I cancel a SIP?"
    python -m sop_assistant.interface.cli.main rebuild-index --entries entries.json
    python -m sop_assistant.interface.cli.main index-acronyms
    python -m sop_assistant.interface.cli.main validate-questions \
        --source-file sop.xlsx --entries entries.json --category Operations
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from sop_assistant.application.dto.query_dto import AskRequest
from sop_assistant.config.composition import Container
from sop_assistant.config.settings import AppSettings
from sop_assistant.domain.errors import DomainError, ValidationError
from sop_assistant.domain.models import SourceEntry

logger = logging.getLogger(__name__)


def load_entries(path: str) -> list[SourceEntry]:
    """Read parsed entries from a JSON array of objects."""
    with open(path, encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, list):
        raise ValidationError(f"{path}: expected a JSON array of entries")
    entries: list[SourceEntry] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError(f"{path}: every entry must be an object")
        entries.append(
            SourceEntry(
                title=str(item.get("title") or ""),
                content=str(item.get("content") or ""),
                category=str(item.get("category") or "General"),
                section=str(item.get("section") or ""),
                source_file=str(item.get("sourceFile") or item.get("source_file") or ""),
            )
        )
    return entries


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sop-assistant", description="SOP question answering")
    sub = parser.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Answer a question from the SOP index")
    ask.add_argument("question")
    ask.add_argument("--user-id", default=None)
    ask.add_argument(
        "--preferred", action="store_true", help="Question comes from the curated list"
    )

    rebuild = sub.add_parser("rebuild-index", help="Chunk, embed and replace the SOP collection")
    rebuild.add_argument("--entries", required=True, help="JSON file with parsed entries")

    sub.add_parser("index-acronyms", help="Reload the acronym table and re-index it")

    validate = sub.add_parser(
        "validate-questions", help="Generate and store validated FAQ questions"
    )
    validate.add_argument("--source-file", required=True)
    validate.add_argument("--entries", required=True, help="JSON file with parsed entries")
    validate.add_argument("--category", default=None)
    return parser


async def run(args: argparse.Namespace, container: Container) -> int:
    try:
        if args.command == "ask":
            result = await container.get_answer_use_case().execute(
                AskRequest(
                    question=args.question, user_id=args.user_id, is_preferred=args.preferred
                )
            )
            print(result.answer)
            print(f"\nConfidence: {result.confidence:.2f} ({result.confidence_level})")
            for i, source in enumerate(result.sources, 1):
                print(f"[{i}] {source}")
        elif args.command == "rebuild-index":
            summary = await container.get_rebuild_use_case().execute(load_entries(args.entries))
            print(f"Indexed {summary.entry_count} entries as {summary.chunk_count} chunks")
        elif args.command == "index-acronyms":
            count = await container.get_index_acronyms_use_case().execute()
            print(f"Indexed {count} acronyms")
        elif args.command == "validate-questions":
            stored = await container.get_validate_questions_use_case().execute(
                args.source_file, load_entries(args.entries), args.category
            )
            print(f"Stored {stored} validated questions for {args.source_file}")
    except DomainError as ex:
        print(f"[ERROR] {type(ex).__name__}: {ex}", file=sys.stderr)
        return 1
    finally:
        await container.aclose()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = AppSettings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args, Container(settings)))


if __name__ == "__main__":
    sys.exit(main())
