"""Stream transport for LSP communication.

Reads and writes Content-Length framed JSON-RPC messages over binary
streams, as used between an editor and a language server process.
"""

from __future__ import annotations

import json
import sys
from typing import Any, BinaryIO, TextIO

CONTENT_LENGTH = "Content-Length"
HEADER_ENCODING = "ascii"
CONTENT_ENCODING = "utf-8"

# Default maximum body size (10 MB)
DEFAULT_MAX_MESSAGE_SIZE = 10 * 1024 * 1024


class LSPFramingError(Exception):
    """Raised when message framing is invalid or the body is not JSON."""

    pass


def parse_header(header_bytes: bytes) -> dict[str, str]:
    """Parse LSP headers from raw bytes.

    Args:
        header_bytes: Header block without the blank separator line.

    Returns:
        Mapping of header names to values.

    Raises:
        LSPFramingError: If headers are malformed or Content-Length is missing/invalid.
    """
    if not header_bytes:
        raise LSPFramingError("Empty header block")

    try:
        header_text = header_bytes.decode(HEADER_ENCODING)
    except UnicodeDecodeError as e:
        raise LSPFramingError(f"Header contains non-ASCII characters: {e}") from e

    headers: dict[str, str] = {}
    for line in header_text.split("\r\n"):
        if not line:
            continue
        name, sep, value = line.partition(":")
        if not sep:
            raise LSPFramingError(f"Malformed header line (no colon): {line!r}")
        if not name.strip():
            raise LSPFramingError(f"Empty header name in line: {line!r}")
        headers[name.strip()] = value.strip()

    if CONTENT_LENGTH not in headers:
        raise LSPFramingError("Missing required Content-Length header")

    try:
        length = int(headers[CONTENT_LENGTH])
    except ValueError as e:
        raise LSPFramingError(f"Invalid Content-Length value: {headers[CONTENT_LENGTH]!r}") from e

    if length < 0:
        raise LSPFramingError(f"Negative Content-Length: {length}")

    return headers


def encode_message(payload: dict[str, Any]) -> bytes:
    """Serialize a payload with its Content-Length header.

    Raises:
        LSPFramingError: If the payload cannot be serialized to JSON.
    """
    try:
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode(CONTENT_ENCODING)
    except (TypeError, ValueError) as e:
        raise LSPFramingError(f"Message cannot be serialized to JSON: {e}") from e

    header = f"{CONTENT_LENGTH}: {len(body)}\r\n\r\n".encode(HEADER_ENCODING)
    return header + body


class StreamTransport:
    """Content-Length framed transport over binary streams.

    Reads server messages from `stdin` and writes client messages to
    `stdout`. Logging goes to stderr to avoid corrupting the protocol stream.
    """

    def __init__(
        self,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
        stderr: TextIO | None = None,
        max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
    ) -> None:
        """Initialize the transport.

        Args:
            stdin: Input byte stream (defaults to sys.stdin.buffer).
            stdout: Output byte stream (defaults to sys.stdout.buffer).
            stderr: Log stream (defaults to sys.stderr).
            max_message_size: Largest accepted body in bytes.
        """
        self._stdin = stdin
        self._stdout = stdout
        self._stderr = stderr
        self._max_message_size = max_message_size

    def read_message(self) -> dict[str, Any] | None:
        """Read one framed message.

        Returns:
            Decoded JSON object, or None on EOF at a message boundary.

        Raises:
            LSPFramingError: If framing is invalid or the body is not a JSON object.
        """
        stdin = self._stdin or sys.stdin.buffer
        header_bytes = b""
        while True:
            line = stdin.readline()
            if not line:
                if not header_bytes:
                    return None
                raise LSPFramingError("Unexpected EOF while reading headers")
            if line in (b"\r\n", b"\n"):
                if not header_bytes:
                    # Tolerate stray blank lines between messages
                    continue
                break
            header_bytes += line

        headers = parse_header(header_bytes.rstrip(b"\r\n"))
        content_length = int(headers[CONTENT_LENGTH])

        if content_length > self._max_message_size:
            raise LSPFramingError(
                f"Message size {content_length} exceeds maximum {self._max_message_size}"
            )

        body = stdin.read(content_length)
        if len(body) < content_length:
            raise LSPFramingError(
                f"Incomplete message body: expected {content_length} bytes, got {len(body)}"
            )

        try:
            message = json.loads(body.decode(CONTENT_ENCODING))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise LSPFramingError(f"Invalid JSON body: {e}") from e

        if not isinstance(message, dict):
            raise LSPFramingError("Message body must be a JSON object")

        return message

    def write_message(self, payload: dict[str, Any]) -> None:
        """Write a framed message to stdout.

        Args:
            payload: JSON-RPC payload to send.
        """
        stdout = self._stdout or sys.stdout.buffer
        stdout.write(encode_message(payload))
        stdout.flush()

    def log(self, message: str) -> None:
        """Write a log message to stderr.

        Args:
            message: Log message.
        """
        stderr = self._stderr or sys.stderr
        stderr.write(f"[LSP] {message}\n")
        stderr.flush()
