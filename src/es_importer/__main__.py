from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from .backend import BackendError, ElasticsearchBackend
from .config import Settings
from .converters.engine import ConversionError
from .descriptor import ConfigurationError
from .importer import DocumentImporter
from .logging_utils import setup_logging
from .registry import Registry

console = Console()
LOGGER = logging.getLogger("es_importer.cli")


def read_documents(path: Path) -> List[Any]:
    """Read a JSON array, a single JSON object or JSON lines."""
    text = path.read_text(encoding="utf-8")
    stripped = text.lstrip()
    if stripped.startswith("["):
        return json.loads(text)
    try:
        return [json.loads(text)]
    except json.JSONDecodeError:
        return [json.loads(line) for line in text.splitlines() if line.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="es-importer",
        description="Transform documents and index them into Elasticsearch.",
    )
    parser.add_argument(
        "--descriptors",
        help="YAML file with collection descriptors (defaults to $ES_DESCRIPTORS)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-index", help="Create an index from its descriptor")
    create.add_argument("index")

    delete = sub.add_parser("delete-index", help="Delete an index")
    delete.add_argument("index")

    for name, help_text in (
        ("transform", "Print transformed documents without indexing them"),
        ("import", "Index documents"),
    ):
        command = sub.add_parser(name, help=help_text)
        command.add_argument("index")
        command.add_argument("file", type=Path)
        if name == "import":
            command.add_argument(
                "--bulk", action="store_true", help="Send all documents in one bulk request"
            )
    return parser


def run(args: argparse.Namespace, settings: Settings) -> int:
    descriptors = args.descriptors or settings.descriptors_path
    if not descriptors:
        raise ConfigurationError("No descriptors file given (--descriptors or ES_DESCRIPTORS)")
    registry = Registry.from_yaml(descriptors)

    with ElasticsearchBackend(settings) as backend:
        importer = DocumentImporter(registry, backend)

        if args.command == "create-index":
            console.print_json(data=importer.create_collection(args.index))
        elif args.command == "delete-index":
            console.print_json(data=importer.delete_collection(args.index))
        elif args.command == "transform":
            for document in read_documents(args.file):
                console.print_json(
                    data=importer.transform_document(args.index, document), default=str
                )
        elif args.bulk:
            documents = read_documents(args.file)
            with console.status(f"Bulk importing {len(documents)} documents..."):
                response = importer.import_in_bulk(args.index, documents)
            errors = bool(response.get("errors")) if isinstance(response, dict) else False
            console.print(
                f"Bulk request sent: {len(documents)} documents, errors={errors}"
            )
            return 1 if errors else 0
        else:
            documents = read_documents(args.file)
            with console.status(f"Importing {len(documents)} documents..."):
                result = importer.import_documents(args.index, documents)
            console.print(
                f"Imported: {result.imported.count}  Failed: {result.failed.count}  "
                f"Time spent: {result.elapsed:.2f}s"
            )
            for item in result.failed.items:
                console.print(f"  [red]{escape(item.id)}[/red]: {escape(item.error)}")
            return 1 if result.failed.count else 0
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    args = build_parser().parse_args(argv)

    try:
        code = run(args, settings)
    except ConfigurationError as exc:
        LOGGER.error("Configuration error: %s", exc)
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)
    except (BackendError, ConversionError) as exc:
        LOGGER.error("%s: %s", type(exc).__name__, exc)
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        sys.exit(2)
    sys.exit(code)


if __name__ == "__main__":
    main()
