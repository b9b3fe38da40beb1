"""Method registry - maps method names to handler functions.

Keeps separate tables for notifications and for server-to-client requests,
plus the set of notifications that are dropped without a diagnostic.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from lsp_router.handlers import notifications, requests

if TYPE_CHECKING:
    from lsp_router.connection import ServerConnection
    from lsp_router.protocol.jsonrpc import JsonRpcNotification, JsonRpcRequest

RequestHandler = Callable[["ServerConnection", "JsonRpcRequest"], None]
NotificationHandler = Callable[["ServerConnection", "JsonRpcNotification"], None]


def _check(method: str, handler: Callable[..., None]) -> None:
    if not isinstance(method, str) or not method:
        raise ValueError("method must be non-empty string")
    if not callable(handler):
        raise TypeError("handler must be callable")


class MethodRegistry:
    """Method-name keyed handler tables."""

    def __init__(self, ignored: Iterable[str] = ()) -> None:
        """Initialize the registry.

        Args:
            ignored: Notification methods to drop silently.
        """
        self._requests: dict[str, RequestHandler] = {}
        self._notifications: dict[str, NotificationHandler] = {}
        self._ignored: set[str] = set(ignored)

    def register_request(self, method: str, handler: RequestHandler) -> None:
        """Register the handler for a server-to-client request.

        Raises:
            ValueError: If method is empty.
            TypeError: If handler is not callable.
        """
        _check(method, handler)
        self._requests[method] = handler

    def register_notification(self, method: str, handler: NotificationHandler) -> None:
        """Register a built-in notification handler.

        Raises:
            ValueError: If method is empty.
            TypeError: If handler is not callable.
        """
        _check(method, handler)
        self._notifications[method] = handler

    def ignore(self, method: str) -> None:
        """Drop a notification method silently."""
        self._ignored.add(method)

    def request_handler(self, method: str) -> RequestHandler | None:
        return self._requests.get(method)

    def notification_handler(self, method: str) -> NotificationHandler | None:
        return self._notifications.get(method)

    def is_ignored(self, method: str) -> bool:
        return method in self._ignored

    @property
    def request_methods(self) -> list[str]:
        return sorted(self._requests)

    @property
    def notification_methods(self) -> list[str]:
        return sorted(self._notifications)


def default_registry() -> MethodRegistry:
    """Build the registry of built-in handlers."""
    registry = MethodRegistry(ignored=notifications.IGNORED_NOTIFICATIONS)

    registry.register_notification("textDocument/publishDiagnostics", notifications.publish_diagnostics)
    registry.register_notification("window/showMessage", notifications.show_message)
    registry.register_notification("window/logMessage", notifications.log_message)
    registry.register_notification("$/logTrace", notifications.log_trace)
    registry.register_notification("telemetry/event", notifications.telemetry_event)

    registry.register_request("workspace/applyEdit", requests.apply_edit)
    registry.register_request("workspace/workspaceFolders", requests.workspace_folders)
    registry.register_request("workspace/configuration", requests.configuration)
    registry.register_request("window/workDoneProgress/create", requests.acknowledge)
    registry.register_request("client/registerCapability", requests.acknowledge)
    registry.register_request("client/unregisterCapability", requests.acknowledge)
    registry.register_request("workspace/codeLens/refresh", requests.unsupported)
    registry.register_request("workspace/semanticTokens/refresh", requests.unsupported)

    return registry
