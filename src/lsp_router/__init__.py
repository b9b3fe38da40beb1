"""LSP client-side message router.

Classifies decoded JSON-RPC messages from a language server and dispatches
them to response correlation, server-request handlers, or notification
handlers.
"""

from lsp_router.config import ConfigLoadError, RouterConfig, load_config
from lsp_router.connection import PendingRequest, ServerConnection
from lsp_router.editor import EditorBase, RecordingEditor, path_to_uri, uri_to_path
from lsp_router.messagelog import MessageEntry, MessageLog
from lsp_router.registry import MethodRegistry, default_registry
from lsp_router.router import MessageRouter, handle_message

__version__ = "1.0.0"

__all__ = [
    "ConfigLoadError",
    "EditorBase",
    "MessageEntry",
    "MessageLog",
    "MessageRouter",
    "MethodRegistry",
    "PendingRequest",
    "RecordingEditor",
    "RouterConfig",
    "ServerConnection",
    "default_registry",
    "handle_message",
    "load_config",
    "path_to_uri",
    "uri_to_path",
]
