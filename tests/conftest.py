"""Pytest configuration and fixtures for router tests."""

import io
from typing import Any

import pytest

from lsp_router.connection import ServerConnection
from lsp_router.editor import RecordingEditor
from lsp_router.router import MessageRouter


@pytest.fixture
def editor() -> RecordingEditor:
    """Editor that records calls, with a few settings for configuration requests."""
    return RecordingEditor(
        settings={
            "python": {"analysis": {"typeCheckingMode": "strict"}},
            "editor": {"tabSize": 4},
        }
    )


@pytest.fixture
def sent() -> list[dict[str, Any]]:
    """Payloads the client sent to the server."""
    return []


@pytest.fixture
def stderr() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def connection(editor: RecordingEditor, sent: list, stderr: io.StringIO) -> ServerConnection:
    """Connection to a fake server named 'pyls' without workspace folders."""
    conn = ServerConnection(
        editor,
        sent.append,
        server_name="pyls",
        server_path="/usr/bin/pyls",
        stderr=stderr,
    )
    yield conn
    conn.close()


@pytest.fixture
def router() -> MessageRouter:
    return MessageRouter()
