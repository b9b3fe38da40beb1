"""Handlers for requests initiated by the language server.

Every handler sends exactly one reply through `connection.send_response`,
except the unsupported ones, which report and deliberately leave the
request unanswered.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from lsp_router.editor import path_to_uri

if TYPE_CHECKING:
    from lsp_router.connection import ServerConnection
    from lsp_router.protocol.jsonrpc import JsonRpcRequest


def _params(request: JsonRpcRequest) -> dict[str, Any]:
    params = request.params
    return params if isinstance(params, dict) else {}


def apply_edit(connection: ServerConnection, request: JsonRpcRequest) -> None:
    """Handle workspace/applyEdit.

    The reply always claims success; the editor's result is not propagated.
    """
    edit = _params(request).get("edit") or {}
    connection.editor.apply_edit(edit)
    connection.send_response(request, {"applied": True})


def workspace_folders(connection: ServerConnection, request: JsonRpcRequest) -> None:
    """Handle workspace/workspaceFolders."""
    folders = connection.workspace_folders
    if folders is None:
        connection.send_response(request, None)
        return

    result = []
    for folder in folders:
        path = Path(folder)
        result.append({"name": path.name or str(path), "uri": path_to_uri(path)})
    connection.send_response(request, result)


def configuration(connection: ServerConnection, request: JsonRpcRequest) -> None:
    """Handle workspace/configuration, resolving items in request order."""
    items = _params(request).get("items")
    if not isinstance(items, list):
        items = []
    result = [connection.editor.resolve_configuration(item) for item in items]
    connection.send_response(request, result)


def acknowledge(connection: ServerConnection, request: JsonRpcRequest) -> None:
    """Reply with an empty result.

    Used for window/workDoneProgress/create and client/(un)registerCapability.
    """
    connection.send_response(request, {})


def unsupported(connection: ServerConnection, request: JsonRpcRequest) -> None:
    """Report a request the client does not support. No reply is sent."""
    connection.report(f"Unsupported request: {json.dumps(request.to_dict(), default=str)}")
