"""Tests for server-initiated request handlers."""

import io
from pathlib import Path

import pytest

from lsp_router.connection import ServerConnection
from lsp_router.editor import RecordingEditor, path_to_uri
from lsp_router.router import MessageRouter


def make_connection(editor: RecordingEditor, sent: list, folders=None) -> ServerConnection:
    return ServerConnection(
        editor,
        sent.append,
        server_name="pyls",
        workspace_folders=folders,
        stderr=io.StringIO(),
    )


class TestApplyEdit:
    """Tests for workspace/applyEdit."""

    def test_applies_and_replies_applied(
        self, router: MessageRouter, connection: ServerConnection, editor: RecordingEditor, sent: list
    ):
        """Should pass the edit to the editor and reply applied: true."""
        edit = {"changes": {"file:///a.py": [{"range": {}, "newText": "x"}]}}

        router.handle_message(
            connection, {"id": 1, "method": "workspace/applyEdit", "params": {"label": "fix", "edit": edit}}
        )

        assert editor.edits == [edit]
        assert sent == [{"jsonrpc": "2.0", "id": 1, "result": {"applied": True}}]

    def test_replies_applied_even_when_editor_fails(self, router: MessageRouter, sent: list):
        """Should not reflect the editor's result in the reply."""

        class FailingEditor(RecordingEditor):
            def apply_edit(self, workspace_edit):
                return False

        connection = make_connection(FailingEditor(), sent)

        router.handle_message(connection, {"id": 2, "method": "workspace/applyEdit", "params": {"edit": {}}})

        assert sent[0]["result"] == {"applied": True}


class TestWorkspaceFolders:
    """Tests for workspace/workspaceFolders."""

    def test_no_folder_tracking_replies_null(self, router: MessageRouter, connection: ServerConnection, sent: list):
        """Should reply null when the session has no workspace folders concept."""
        router.handle_message(connection, {"id": 1, "method": "workspace/workspaceFolders"})

        assert sent == [{"jsonrpc": "2.0", "id": 1, "result": None}]

    def test_empty_list_replies_empty(self, router: MessageRouter, editor: RecordingEditor, sent: list):
        """Should reply [] for an empty folder list."""
        connection = make_connection(editor, sent, folders=[])

        router.handle_message(connection, {"id": 1, "method": "workspace/workspaceFolders"})

        assert sent[0]["result"] == []

    def test_two_folders(self, router: MessageRouter, editor: RecordingEditor, sent: list, tmp_path: Path):
        """Should reply name and uri for each folder, in order."""
        first = tmp_path / "project"
        second = tmp_path / "libs" / "shared"
        connection = make_connection(editor, sent, folders=[first, str(second)])

        router.handle_message(connection, {"id": 8, "method": "workspace/workspaceFolders"})

        assert sent[0]["id"] == 8
        assert sent[0]["result"] == [
            {"name": "project", "uri": path_to_uri(first)},
            {"name": "shared", "uri": path_to_uri(second)},
        ]


class TestConfiguration:
    """Tests for workspace/configuration."""

    def test_resolves_items_in_order(
        self, router: MessageRouter, connection: ServerConnection, editor: RecordingEditor, sent: list
    ):
        """Should resolve each item independently and preserve order."""
        items = [
            {"section": "editor.tabSize"},
            {"section": "missing.section"},
            {"scopeUri": "file:///a.py", "section": "python.analysis"},
        ]

        router.handle_message(
            connection, {"id": 5, "method": "workspace/configuration", "params": {"items": items}}
        )

        assert editor.configuration_requests == items
        assert sent == [
            {
                "jsonrpc": "2.0",
                "id": 5,
                "result": [4, None, {"typeCheckingMode": "strict"}],
            }
        ]

    def test_missing_items_replies_empty(self, router: MessageRouter, connection: ServerConnection, sent: list):
        """Should reply an empty list when no items are given."""
        router.handle_message(connection, {"id": 6, "method": "workspace/configuration"})

        assert sent[0]["result"] == []


class TestAcknowledgements:
    """Tests for acknowledgement-only requests."""

    @pytest.mark.parametrize(
        "method",
        ["window/workDoneProgress/create", "client/registerCapability", "client/unregisterCapability"],
    )
    def test_replies_empty_result(
        self, router: MessageRouter, connection: ServerConnection, editor: RecordingEditor, sent: list, method
    ):
        """Should reply with an empty success object."""
        router.handle_message(connection, {"id": "ack-1", "method": method, "params": {"token": "t"}})

        assert sent == [{"jsonrpc": "2.0", "id": "ack-1", "result": {}}]
        assert editor.reports == []


class TestUnsupportedRefresh:
    """Tests for refresh requests the client does not support."""

    @pytest.mark.parametrize("method", ["workspace/codeLens/refresh", "workspace/semanticTokens/refresh"])
    def test_reports_without_reply(
        self, router: MessageRouter, connection: ServerConnection, editor: RecordingEditor, sent: list, method
    ):
        """Should report and send no reply."""
        router.handle_message(connection, {"id": 3, "method": method})

        assert sent == []
        assert len(editor.reports) == 1
        assert method in editor.reports[0]
