"""Command line entry point.

Replays a recorded stream of server messages through the router, which is
useful for checking how a particular (often non-conformant) server's
traffic is classified:

    lsp-router replay session.jsonl --server-name pyright --workspace .

The transcript holds one decoded server message per line. Use `-` to read
Content-Length framed messages from stdin instead. Replies the client would
send are written to stdout as JSON lines; diagnostics go to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TextIO

import yaml

from lsp_router import __version__
from lsp_router.config import ConfigLoadError, RouterConfig, load_config
from lsp_router.connection import ServerConnection
from lsp_router.editor import RecordingEditor
from lsp_router.protocol.transport import LSPFramingError, StreamTransport
from lsp_router.router import MessageRouter


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lsp-router",
        description="LSP client message router",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"lsp-router {__version__}",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay = subparsers.add_parser("replay", help="Route a recorded message transcript")
    replay.add_argument("transcript", help="JSON Lines transcript, or - for framed stdin")
    replay.add_argument("--config", "-c", type=Path, help="Router config YAML file")
    replay.add_argument("--settings", "-s", type=Path, help="YAML settings for workspace/configuration")
    replay.add_argument("--server-name", default="server", help="Server name used in diagnostics")
    replay.add_argument(
        "--workspace",
        "-w",
        action="append",
        type=Path,
        help="Workspace folder (repeatable); omit for a session without folders",
    )
    return parser


def _read_transcript(path: Path, transport: StreamTransport) -> Iterator[Any]:
    """Yield decoded messages from a JSON Lines transcript."""
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                transport.log(f"Skipping line {lineno}: invalid JSON ({e})")


def _read_framed(transport: StreamTransport) -> Iterator[Any]:
    """Yield decoded messages from the transport until EOF."""
    while True:
        message = transport.read_message()
        if message is None:
            transport.log("EOF received")
            return
        yield message


def _load_settings(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    try:
        with open(path) as f:
            settings = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigLoadError(f"Failed to load settings: {e}") from e
    if not isinstance(settings, dict):
        raise ConfigLoadError("Settings must be a YAML mapping")
    return settings


def replay(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run the replay command.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        config = load_config(args.config) if args.config else RouterConfig()
        settings = _load_settings(args.settings)
    except ConfigLoadError as e:
        print(f"Error: {e}", file=stderr)
        return 1

    transport = StreamTransport(stderr=stderr, max_message_size=config.max_message_size)

    def send(payload: dict[str, Any]) -> None:
        stdout.write(json.dumps(payload) + "\n")
        stdout.flush()

    editor = RecordingEditor(settings=settings)
    router = MessageRouter()

    if args.transcript == "-":
        messages = _read_framed(transport)
    else:
        transcript = Path(args.transcript)
        if not transcript.exists():
            print(f"Error: Transcript not found: {transcript}", file=stderr)
            return 1
        messages = _read_transcript(transcript, transport)

    with ServerConnection(
        editor,
        send,
        server_name=args.server_name,
        workspace_folders=args.workspace,
        config=config,
        stderr=stderr,
    ) as connection:
        count = 0
        try:
            for message in messages:
                router.handle_message(connection, message)
                count += 1
        except LSPFramingError as e:
            transport.log(f"Error: {e}")
            return 1

        for category, text in editor.shown:
            transport.log(f"{category}: {text}")
        transport.log(
            f"Routed {count} messages: {len(connection.messages)} log entries, "
            f"{len(editor.diagnostics)} documents with diagnostics, {len(editor.reports)} diagnostics"
        )

    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = _build_parser().parse_args(argv)

    try:
        if args.command == "replay":
            return replay(args, sys.stdout, sys.stderr)
    except KeyboardInterrupt:
        print("Interrupted, shutting down", file=sys.stderr)
        return 130  # Standard exit code for SIGINT

    return 1


if __name__ == "__main__":
    sys.exit(main())
