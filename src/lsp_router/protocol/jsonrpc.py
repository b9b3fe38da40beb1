"""JSON-RPC 2.0 message model for the LSP client side.

Decodes payloads received from a language server into one of three
variants (response, request, notification) and builds outbound payloads.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Maximum message size (1 MB)
MAX_MESSAGE_SIZE = 1_048_576


class JsonRpcError(Exception):
    """JSON-RPC error with code and message."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
            data: Optional additional error data.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire `error` object."""
        error_obj: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error_obj["data"] = self.data
        return error_obj


def request_key(msg_id: Any) -> str:
    """Convert a request id to the key used by the pending-request table."""
    return str(msg_id)


@dataclass
class JsonRpcResponse:
    """Represents a response from the server (has result or error)."""

    id: int | str | None
    result: Any = None
    error: dict[str, Any] | None = None

    @property
    def is_error(self) -> bool:
        """True when the server reported a failure."""
        return self.error is not None

    @property
    def key(self) -> str:
        """Stable key for pending-request lookup."""
        return request_key(self.id)

    def to_dict(self) -> dict[str, Any]:
        """Convert back to wire format."""
        data: dict[str, Any] = {"jsonrpc": "2.0", "id": self.id}
        if self.is_error:
            data["error"] = self.error
        else:
            data["result"] = self.result
        return data


@dataclass
class JsonRpcRequest:
    """Represents a server-initiated request (has id and method)."""

    id: int | str | None
    method: str
    params: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert back to wire format."""
        return format_request(self.id, self.method, self.params)


@dataclass
class JsonRpcNotification:
    """Represents a notification (method, no id)."""

    method: str
    params: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert back to wire format."""
        return format_notification(self.method, self.params)


Message = JsonRpcResponse | JsonRpcRequest | JsonRpcNotification


def decode_message(data: Any) -> Message:
    """Classify a decoded JSON object into a message variant.

    The checks run in a fixed order: a `result` or `error` member makes the
    message a response even if it also carries `method`; otherwise `id` plus
    `method` is a request and `method` alone is a notification. The
    `jsonrpc` version member is not required, since some servers omit it.

    Args:
        data: Decoded JSON value.

    Returns:
        The message variant.

    Raises:
        JsonRpcError: If the value matches none of the three shapes.
    """
    if not isinstance(data, dict):
        raise JsonRpcError(INVALID_REQUEST, "Invalid message: must be an object")

    if "result" in data or "error" in data:
        error = data.get("error")
        if error is not None and not isinstance(error, dict):
            error = {"code": INTERNAL_ERROR, "message": str(error)}
        return JsonRpcResponse(id=data.get("id"), result=data.get("result"), error=error)

    method = data.get("method")
    if "method" in data and not isinstance(method, str):
        raise JsonRpcError(INVALID_REQUEST, "Invalid message: method must be a string")

    if "id" in data and method is not None:
        msg_id = data["id"]
        if msg_id is not None and (not isinstance(msg_id, int | str) or isinstance(msg_id, bool)):
            raise JsonRpcError(INVALID_REQUEST, "Invalid message: id must be integer, string or null")
        return JsonRpcRequest(id=msg_id, method=method, params=data.get("params"))

    if method is not None:
        return JsonRpcNotification(method=method, params=data.get("params"))

    raise JsonRpcError(INVALID_REQUEST, "Invalid message: no result, error or method")


def parse_message(raw: str, max_size: int = MAX_MESSAGE_SIZE) -> Message:
    """Parse a JSON-RPC message from a string.

    Args:
        raw: Raw JSON string.
        max_size: Maximum accepted length of `raw`.

    Returns:
        Parsed message variant.

    Raises:
        JsonRpcError: If the message is invalid.
    """
    # Check message size before parsing to prevent DoS
    if len(raw) > max_size:
        raise JsonRpcError(PARSE_ERROR, f"Message too large: {len(raw)} bytes exceeds {max_size} limit")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise JsonRpcError(PARSE_ERROR, f"Parse error: {e}") from e

    return decode_message(data)


def format_response(msg_id: int | str | None, result: Any) -> dict[str, Any]:
    """Format a successful JSON-RPC response.

    Args:
        msg_id: Request ID to echo back.
        result: Result payload.

    Returns:
        Response payload.
    """
    return {
        "jsonrpc": "2.0",
        "id": msg_id,
        "result": result,
    }


def format_error(
    msg_id: int | str | None,
    code: int,
    message: str,
    data: Any | None = None,
) -> dict[str, Any]:
    """Format a JSON-RPC error response.

    Args:
        msg_id: Request ID (or None for parse errors).
        code: Error code.
        message: Error message.
        data: Optional error data.

    Returns:
        Error response payload.
    """
    return {
        "jsonrpc": "2.0",
        "id": msg_id,
        "error": JsonRpcError(code, message, data).to_dict(),
    }


def format_request(msg_id: int | str | None, method: str, params: Any = None) -> dict[str, Any]:
    """Format a client-to-server JSON-RPC request."""
    request: dict[str, Any] = {
        "jsonrpc": "2.0",
        "id": msg_id,
        "method": method,
    }
    if params is not None:
        request["params"] = params
    return request


def format_notification(method: str, params: Any = None) -> dict[str, Any]:
    """Format a JSON-RPC notification.

    Args:
        method: Notification method name.
        params: Optional parameters.

    Returns:
        Notification payload.
    """
    notification: dict[str, Any] = {
        "jsonrpc": "2.0",
        "method": method,
    }
    if params is not None:
        notification["params"] = params
    return notification
