"""Command-line entry point: run the API or paste into a file."""

import argparse
import asyncio
import sys
from pathlib import Path

from imagecomment.clipboard import select_probe
from imagecomment.config import get_settings
from imagecomment.diagnostics import DiagnosticChannel
from imagecomment.hosts.file_host import FileEditorHost
from imagecomment.paste.orchestrator import PasteOrchestrator, PasteOutcome

_SUCCESS = {PasteOutcome.INSERTED, PasteOutcome.SAVED, PasteOutcome.DEFAULT_PASTE}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-comment",
        description="Save clipboard images into a project and reference them "
        "from a code comment.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the local paste API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    paste = sub.add_parser("paste", help="Paste the clipboard image into a file")
    paste.add_argument("file", type=Path, help="Document to insert the comment into")
    paste.add_argument("--line", type=int, default=None, help="1-based line")
    paste.add_argument("--column", type=int, default=None, help="1-based column")
    paste.add_argument("--language", default=None, help="Editor language id")
    paste.add_argument(
        "--workspace",
        type=Path,
        default=None,
        help="Project root (default: nearest dir with .git or pyproject.toml)",
    )
    paste.add_argument(
        "--log-stderr",
        action="store_true",
        help="Write the diagnostic log to stderr instead of the state dir",
    )
    return parser


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "imagecomment.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
    )
    return 0


def _paste(args: argparse.Namespace) -> int:
    settings = get_settings()
    log_path = None if args.log_stderr else settings.log_path
    host = FileEditorHost(
        args.file,
        line=args.line,
        column=args.column,
        language_id=args.language,
        workspace_root=args.workspace.resolve() if args.workspace else None,
    )
    with DiagnosticChannel(log_path) as channel:
        orchestrator = PasteOrchestrator(
            select_probe(logger=channel.logger),
            logger=channel.logger,
        )
        result = asyncio.run(orchestrator.paste_image(host))

    if result.saved_path is not None:
        print(result.saved_path)
    return 0 if result.outcome in _SUCCESS else 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return _serve(args)
    return _paste(args)


if __name__ == "__main__":
    sys.exit(main())
