"""Connection context for one language-server session.

Holds the outstanding-request table, custom notification handlers, and
per-connection diagnostic suppression state. Created when the session
starts and discarded at shutdown.
"""

from __future__ import annotations

import itertools
import sys
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from lsp_router.config import RouterConfig
from lsp_router.messagelog import MessageLog
from lsp_router.protocol.jsonrpc import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    format_error,
    format_notification,
    format_request,
    format_response,
    request_key,
)

if TYPE_CHECKING:
    from lsp_router.editor import EditorBase
    from lsp_router.protocol.jsonrpc import JsonRpcNotification

Sender = Callable[[dict[str, Any]], None]
ResultCallback = Callable[["PendingRequest", JsonRpcResponse], None]
NotificationHandler = Callable[["ServerConnection", "JsonRpcNotification"], None]


@dataclass
class PendingRequest:
    """A client request awaiting its response."""

    id: int | str
    method: str
    params: Any = None
    on_result: ResultCallback | None = None

    @property
    def key(self) -> str:
        """Key of this request in the pending table."""
        return request_key(self.id)


class ServerConnection:
    """State for one language-server session.

    Not thread-safe: all access must happen on the thread that delivers
    decoded messages.
    """

    def __init__(
        self,
        editor: EditorBase,
        send: Sender,
        server_name: str = "",
        server_path: str | Path = "",
        workspace_folders: list[str | Path] | None = None,
        config: RouterConfig | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        """Initialize the connection.

        Args:
            editor: Editor collaborator receiving all UI-side effects.
            send: Callable transmitting one payload to the server.
            server_name: Server name used in diagnostics.
            server_path: Server executable, used in diagnostics.
            workspace_folders: Tracked workspace folders, or None when the
                session has no notion of workspace folders.
            config: Router configuration (defaults apply when omitted).
            stderr: Stream for router diagnostics (defaults to sys.stderr).
        """
        self.editor = editor
        self.server_name = server_name
        self.server_path = str(server_path)
        self.workspace_folders = workspace_folders
        self.config = config or RouterConfig()
        self.classification_key: Hashable = server_name

        self.pending: dict[str, PendingRequest] = {}
        self.notification_overrides: dict[str, NotificationHandler] = {}
        self.messages = MessageLog(self.config.message_log_path, server_name=server_name)

        self._send = send
        self._stderr = stderr
        self._ids = itertools.count(1)
        self._reported: set[Hashable] = set()

    # Outbound traffic

    def send_request(
        self,
        method: str,
        params: Any = None,
        on_result: ResultCallback | None = None,
    ) -> PendingRequest:
        """Send a request and track it until its response arrives.

        Args:
            method: Request method.
            params: Request parameters.
            on_result: Called with (request, response) on success.

        Returns:
            The tracked request.
        """
        request = PendingRequest(id=next(self._ids), method=method, params=params, on_result=on_result)
        self.pending[request.key] = request
        self._send(format_request(request.id, method, params))
        return request

    def send_notification(self, method: str, params: Any = None) -> None:
        """Send a notification to the server."""
        self._send(format_notification(method, params))

    def send_response(
        self,
        request: JsonRpcRequest,
        result: Any = None,
        error: JsonRpcError | None = None,
    ) -> None:
        """Reply to a server-initiated request.

        Args:
            request: The request being answered.
            result: Success payload (ignored when `error` is given).
            error: Failure to report instead of a result.
        """
        if error is not None:
            payload = format_error(request.id, error.code, error.message, error.data)
        else:
            payload = format_response(request.id, result)
        self._send(payload)

    # Pending requests

    def take_pending(self, key: str) -> PendingRequest | None:
        """Remove and return the pending request for `key`, if any."""
        return self.pending.pop(key, None)

    # Custom notification handlers

    def register_notification_handler(self, method: str, handler: NotificationHandler) -> None:
        """Install a handler for a notification the router does not handle itself.

        Built-in notification handlers always take precedence.

        Raises:
            ValueError: If method is empty.
            TypeError: If handler is not callable.
        """
        if not isinstance(method, str) or not method:
            raise ValueError("method must be non-empty string")
        if not callable(handler):
            raise TypeError("handler must be callable")
        self.notification_overrides[method] = handler

    def unregister_notification_handler(self, method: str) -> None:
        """Remove a custom notification handler. Unknown methods are ignored."""
        self.notification_overrides.pop(method, None)

    # Diagnostics

    def add_message(self, category: str, text: str) -> None:
        """Append an entry to the connection's message log."""
        self.messages.add(category, text)

    def report(self, text: str) -> None:
        """Emit a router diagnostic for this connection.

        Args:
            text: Diagnostic text; the server name is prepended.
        """
        stream = self._stderr or sys.stderr
        label = self.server_name or self.server_path or "server"
        stream.write(f"[LSP:{label}] {text}\n")
        stream.flush()
        self.editor.report(f"{label}: {text}")

    def report_once(self, key: Hashable, text: str) -> bool:
        """Emit a diagnostic only the first time `key` is seen.

        Returns:
            True if the diagnostic was emitted.
        """
        if key in self._reported:
            return False
        self._reported.add(key)
        self.report(text)
        return True

    def reset_notices(self) -> None:
        """Forget which once-only diagnostics have been emitted."""
        self._reported.clear()

    # Lifecycle

    def close(self) -> None:
        """Tear down the session, discarding outstanding requests."""
        self.pending.clear()
        self.messages.close()

    def __enter__(self) -> ServerConnection:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
