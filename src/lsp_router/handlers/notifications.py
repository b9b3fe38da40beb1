"""Handlers for notifications sent by the language server."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from lsp_router.messagelog import ERROR, INFO, LOG, TRACE, WARNING

if TYPE_CHECKING:
    from lsp_router.connection import ServerConnection
    from lsp_router.protocol.jsonrpc import JsonRpcNotification

# MessageType values from the LSP specification
SHOW_MESSAGE_CATEGORIES = {1: ERROR, 2: WARNING, 3: INFO}
LOG_MESSAGE_CATEGORIES = {1: ERROR, 2: WARNING, 3: INFO, 4: LOG}

# Non-standard or noisy notifications that some servers send regardless of
# the capabilities the client advertised.
IGNORED_NOTIFICATIONS = frozenset(
    {
        "$/progress",
        "$/status/report",
        "$/status/show",
        "indexingStarted",
        "indexingEnded",
        "language/status",
        "$/typescriptVersion",
    }
)


def _params(notification: JsonRpcNotification) -> dict[str, Any]:
    params = notification.params
    return params if isinstance(params, dict) else {}


def _severity(params: dict[str, Any]) -> int | None:
    severity = params.get("type")
    if isinstance(severity, int) and not isinstance(severity, bool):
        return severity
    return None


def publish_diagnostics(connection: ServerConnection, notification: JsonRpcNotification) -> None:
    """Forward textDocument/publishDiagnostics to the editor."""
    params = _params(notification)
    diagnostics = params.get("diagnostics")
    connection.editor.publish_diagnostics(
        params.get("uri", ""),
        diagnostics if isinstance(diagnostics, list) else [],
    )


def show_message(connection: ServerConnection, notification: JsonRpcNotification) -> None:
    """Show window/showMessage to the user.

    Log-level (4) and unrecognized severities are dropped, they are too
    frequent to surface.
    """
    params = _params(notification)
    category = SHOW_MESSAGE_CATEGORIES.get(_severity(params))
    if category is None:
        return
    connection.editor.show_message(category, str(params.get("message", "")))


def log_message(connection: ServerConnection, notification: JsonRpcNotification) -> None:
    """Append window/logMessage to the message log."""
    params = _params(notification)
    category = LOG_MESSAGE_CATEGORIES.get(_severity(params), LOG)
    connection.add_message(category, str(params.get("message", "")))


def log_trace(connection: ServerConnection, notification: JsonRpcNotification) -> None:
    """Append $/logTrace to the message log."""
    params = _params(notification)
    text = str(params.get("message", ""))
    verbose = params.get("verbose")
    if verbose:
        text = f"{text}\n{verbose}"
    connection.add_message(TRACE, text)


def report_unsupported(connection: ServerConnection, notification: JsonRpcNotification) -> None:
    """Report a notification nobody handles.

    Methods listed in `once_only_notifications` are reported once per
    (method, classification key) for the lifetime of the connection.
    """
    text = f"Unsupported notification: {json.dumps(notification.to_dict(), default=str)}"
    if notification.method in connection.config.once_only_notifications:
        connection.report_once((notification.method, connection.classification_key), text)
    else:
        connection.report(text)


def telemetry_event(connection: ServerConnection, notification: JsonRpcNotification) -> None:
    """telemetry/event is not supported; report it like any unhandled notification."""
    report_unsupported(connection, notification)
