"""Message router - the entry point for decoded server messages.

Classifies each message as a response, request, or notification and hands
it to exactly one handler. Server non-conformance never raises; problems
are reported as diagnostics on the connection and processing continues.
"""

from __future__ import annotations

import json
from typing import Any

from lsp_router.config import UNKNOWN_REQUESTS_METHOD_NOT_FOUND
from lsp_router.connection import PendingRequest, ServerConnection
from lsp_router.handlers.notifications import report_unsupported
from lsp_router.protocol.jsonrpc import (
    METHOD_NOT_FOUND,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    Message,
    decode_message,
)
from lsp_router.registry import MethodRegistry, default_registry


def _render(value: Any) -> str:
    return json.dumps(value, default=str)


def format_response_error(request: PendingRequest, error: dict[str, Any]) -> str:
    """Describe a failed response for the user.

    Args:
        request: The request the server rejected.
        error: The response's `error` object.

    Returns:
        Diagnostic text with message, code, and data when present.
    """
    message = error.get("message", "")
    text = f"{request.method} request failed: {message} (code {error.get('code')})"
    if error.get("data") is not None:
        text += f", data: {_render(error['data'])}"
    return text


class MessageRouter:
    """Routes decoded messages from a language server.

    Example:
        router = MessageRouter()
        while (message := transport.read_message()) is not None:
            router.handle_message(connection, message)
    """

    def __init__(self, registry: MethodRegistry | None = None) -> None:
        """Initialize the router.

        Args:
            registry: Handler tables (built-ins when omitted).
        """
        self._registry = registry or default_registry()

    @property
    def registry(self) -> MethodRegistry:
        return self._registry

    def handle_message(self, connection: ServerConnection, message: dict[str, Any] | Message) -> None:
        """Handle one message from the server.

        Args:
            connection: Session the message arrived on.
            message: Decoded JSON object, or an already classified message.
        """
        if not isinstance(message, JsonRpcResponse | JsonRpcRequest | JsonRpcNotification):
            try:
                message = decode_message(message)
            except JsonRpcError as e:
                connection.report(f"Unsupported message received: {e.message}: {_render(message)}")
                return

        if isinstance(message, JsonRpcResponse):
            self._handle_response(connection, message)
        elif isinstance(message, JsonRpcRequest):
            self._handle_request(connection, message)
        else:
            self._handle_notification(connection, message)

    def _handle_response(self, connection: ServerConnection, response: JsonRpcResponse) -> None:
        """Complete the pending request matching the response id.

        Responses with unknown ids (late, duplicated, or bogus) are dropped
        without a diagnostic.
        """
        request = connection.take_pending(response.key)
        if request is None:
            return

        if response.is_error:
            connection.report(format_response_error(request, response.error or {}))
            return

        if request.on_result is not None:
            request.on_result(request, response)

    def _handle_request(self, connection: ServerConnection, request: JsonRpcRequest) -> None:
        """Run the registered handler; it is responsible for the reply."""
        handler = self._registry.request_handler(request.method)
        if handler is not None:
            handler(connection, request)
            return

        connection.report(f"Unsupported request: {_render(request.to_dict())}")
        if connection.config.unknown_requests == UNKNOWN_REQUESTS_METHOD_NOT_FOUND:
            connection.send_response(
                request,
                error=JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {request.method}"),
            )

    def _handle_notification(self, connection: ServerConnection, notification: JsonRpcNotification) -> None:
        """Resolve built-in, then custom, then ignore list, else report."""
        method = notification.method

        handler = self._registry.notification_handler(method)
        if handler is None:
            handler = connection.notification_overrides.get(method)
        if handler is not None:
            handler(connection, notification)
            return

        if self._registry.is_ignored(method) or method in connection.config.ignored_notifications:
            return

        report_unsupported(connection, notification)


_default_router = MessageRouter()


def handle_message(connection: ServerConnection, message: dict[str, Any] | Message) -> None:
    """Route one decoded message using the built-in handler tables."""
    _default_router.handle_message(connection, message)
