"""Tests for built-in notification handlers."""

import pytest

from lsp_router.config import RouterConfig
from lsp_router.connection import ServerConnection
from lsp_router.editor import RecordingEditor
from lsp_router.router import MessageRouter


def categories(connection: ServerConnection) -> list[tuple[str, str]]:
    return [(entry.category, entry.text) for entry in connection.messages.entries()]


class TestPublishDiagnostics:
    """Tests for textDocument/publishDiagnostics."""

    def test_forwards_uri_and_diagnostics(
        self, router: MessageRouter, connection: ServerConnection, editor: RecordingEditor
    ):
        """Should hand uri and diagnostics list to the editor."""
        diagnostics = [{"range": {}, "severity": 1, "message": "undefined name 'x'"}]

        router.handle_message(
            connection,
            {
                "jsonrpc": "2.0",
                "method": "textDocument/publishDiagnostics",
                "params": {"uri": "file:///src/a.py", "version": 3, "diagnostics": diagnostics},
            },
        )

        assert editor.diagnostics == {"file:///src/a.py": diagnostics}

    def test_missing_diagnostics_clears(self, router: MessageRouter, connection: ServerConnection, editor):
        """Should treat a missing diagnostics list as empty."""
        router.handle_message(
            connection, {"method": "textDocument/publishDiagnostics", "params": {"uri": "file:///b.py"}}
        )

        assert editor.diagnostics == {"file:///b.py": []}


class TestShowMessage:
    """Tests for window/showMessage."""

    @pytest.mark.parametrize(("severity", "category"), [(1, "Error"), (2, "Warning"), (3, "Info")])
    def test_visible_severities(
        self, router: MessageRouter, connection: ServerConnection, editor: RecordingEditor, severity, category
    ):
        """Should map severities 1-3 to distinct visible categories."""
        router.handle_message(
            connection, {"method": "window/showMessage", "params": {"type": severity, "message": "hello"}}
        )

        assert editor.shown == [(category, "hello")]

    @pytest.mark.parametrize("severity", [4, 5, 99])
    def test_log_level_suppressed(self, router: MessageRouter, connection: ServerConnection, editor, severity):
        """Should not show severities of 4 or higher."""
        router.handle_message(
            connection, {"method": "window/showMessage", "params": {"type": severity, "message": "noise"}}
        )

        assert editor.shown == []
        assert editor.reports == []

    def test_missing_type_suppressed(self, router: MessageRouter, connection: ServerConnection, editor):
        """Should drop messages without a recognizable severity."""
        router.handle_message(connection, {"method": "window/showMessage", "params": {"message": "?"}})

        assert editor.shown == []

    @pytest.mark.parametrize("severity", [[1], {}, "1", True])
    def test_malformed_type_suppressed(
        self, router: MessageRouter, connection: ServerConnection, editor: RecordingEditor, severity
    ):
        """Should drop messages whose type is not an integer and keep routing."""
        router.handle_message(
            connection, {"method": "window/showMessage", "params": {"type": severity, "message": "hi"}}
        )
        router.handle_message(connection, {"method": "window/showMessage", "params": {"type": 1, "message": "next"}})

        assert editor.shown == [("Error", "next")]


class TestLogMessage:
    """Tests for window/logMessage."""

    @pytest.mark.parametrize(
        ("severity", "category"), [(1, "Error"), (2, "Warning"), (3, "Info"), (4, "Log")]
    )
    def test_maps_severity(self, router: MessageRouter, connection: ServerConnection, severity, category):
        """Should map severities 1-4 to their categories."""
        router.handle_message(
            connection, {"method": "window/logMessage", "params": {"type": severity, "message": "m"}}
        )

        assert categories(connection) == [(category, "m")]

    @pytest.mark.parametrize("severity", [0, 5, 99, None, "1"])
    def test_out_of_range_defaults_to_log(self, router: MessageRouter, connection: ServerConnection, severity):
        """Should file out-of-range severities under Log."""
        router.handle_message(
            connection, {"method": "window/logMessage", "params": {"type": severity, "message": "m"}}
        )

        assert categories(connection) == [("Log", "m")]

    @pytest.mark.parametrize("severity", [[1], {}, {"level": 1}])
    def test_unhashable_type_defaults_to_log(self, router: MessageRouter, connection: ServerConnection, severity):
        """Should file container severities under Log instead of failing."""
        router.handle_message(
            connection, {"method": "window/logMessage", "params": {"type": severity, "message": "m"}}
        )

        assert categories(connection) == [("Log", "m")]

    def test_does_not_show_message(self, router: MessageRouter, connection: ServerConnection, editor):
        """Should only log, never show."""
        router.handle_message(connection, {"method": "window/logMessage", "params": {"type": 1, "message": "m"}})

        assert editor.shown == []


class TestLogTrace:
    """Tests for $/logTrace."""

    def test_appends_trace(self, router: MessageRouter, connection: ServerConnection):
        """Should log under the trace category."""
        router.handle_message(connection, {"method": "$/logTrace", "params": {"message": "Sending request"}})

        assert categories(connection) == [("trace", "Sending request")]

    def test_includes_verbose(self, router: MessageRouter, connection: ServerConnection):
        """Should append the verbose detail on its own line."""
        router.handle_message(
            connection, {"method": "$/logTrace", "params": {"message": "Received", "verbose": "{...}"}}
        )

        assert categories(connection) == [("trace", "Received\n{...}")]


class TestTelemetry:
    """Tests for telemetry/event once-only reporting."""

    def test_reported_once_per_key(self, router: MessageRouter, connection: ServerConnection, editor):
        """Should report the first event per key and suppress repeats."""
        telemetry = {"method": "telemetry/event", "params": {"name": "startup"}}

        connection.classification_key = "python"
        router.handle_message(connection, telemetry)
        assert len(editor.reports) == 1

        router.handle_message(connection, telemetry)
        assert len(editor.reports) == 1

        connection.classification_key = "go"
        router.handle_message(connection, telemetry)
        assert len(editor.reports) == 2

    def test_reset_allows_reporting_again(self, router: MessageRouter, connection: ServerConnection, editor):
        """Should report again after the suppression state is reset."""
        router.handle_message(connection, {"method": "telemetry/event"})
        connection.reset_notices()
        router.handle_message(connection, {"method": "telemetry/event"})

        assert len(editor.reports) == 2

    def test_not_overridable(self, router: MessageRouter, connection: ServerConnection, editor):
        """Should keep the built-in behavior even with a custom handler."""
        calls = []
        connection.register_notification_handler("telemetry/event", lambda c, n: calls.append(n))

        router.handle_message(connection, {"method": "telemetry/event"})

        assert calls == []
        assert len(editor.reports) == 1

    def test_follows_report_once_setting(self, editor: RecordingEditor, sent: list, stderr):
        """Should report every event when telemetry is not configured as once-only."""
        router = MessageRouter()
        connection = ServerConnection(
            editor, sent.append, server_name="pyls", config=RouterConfig(once_only_notifications=[]), stderr=stderr
        )

        router.handle_message(connection, {"method": "telemetry/event", "params": {"name": "a"}})
        router.handle_message(connection, {"method": "telemetry/event", "params": {"name": "a"}})

        assert len(editor.reports) == 2
