"""LSP protocol layer: JSON-RPC message model and stream transport."""

from lsp_router.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    Message,
    decode_message,
    format_error,
    format_notification,
    format_request,
    format_response,
    parse_message,
    request_key,
)
from lsp_router.protocol.transport import LSPFramingError, StreamTransport, encode_message, parse_header

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "LSPFramingError",
    "METHOD_NOT_FOUND",
    "Message",
    "PARSE_ERROR",
    "JsonRpcError",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "StreamTransport",
    "decode_message",
    "encode_message",
    "format_error",
    "format_notification",
    "format_request",
    "format_response",
    "parse_header",
    "parse_message",
    "request_key",
]
