"""Editor collaborator interface.

The router never touches buffers, diagnostics UI, or settings directly.
Every editor-side effect goes through an `EditorBase` implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse


def path_to_uri(path: str | Path) -> str:
    """Convert a filesystem path to a `file://` URI.

    Relative paths are resolved against the current directory.
    """
    return Path(path).expanduser().absolute().as_uri()


def uri_to_path(uri: str) -> Path:
    """Convert a `file://` URI back to a filesystem path.

    Raises:
        ValueError: If the URI does not use the file scheme.
    """
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ValueError(f"Not a file URI: {uri}")
    return Path(unquote(parsed.path))


class EditorBase(ABC):
    """Abstract base class for the editor side of a connection.

    Example:
        class VimEditor(EditorBase):
            def publish_diagnostics(self, uri, diagnostics):
                set_signs(uri_to_path(uri), diagnostics)
            ...
    """

    @abstractmethod
    def publish_diagnostics(self, uri: str, diagnostics: list[dict[str, Any]]) -> None:
        """Replace the diagnostics shown for a document."""
        pass

    @abstractmethod
    def show_message(self, category: str, text: str) -> None:
        """Show a message to the user.

        Args:
            category: Error, Warning or Info.
            text: Message text.
        """
        pass

    @abstractmethod
    def apply_edit(self, workspace_edit: dict[str, Any]) -> bool:
        """Apply a WorkspaceEdit.

        Returns:
            True if the edit was applied.
        """
        pass

    @abstractmethod
    def resolve_configuration(self, item: dict[str, Any]) -> Any:
        """Resolve one `workspace/configuration` item to its value."""
        pass

    @abstractmethod
    def report(self, text: str) -> None:
        """Surface a router diagnostic to the user."""
        pass


@dataclass
class RecordingEditor(EditorBase):
    """Editor that records every call instead of driving a UI.

    Configuration items are resolved by walking the dotted `section` through
    `settings`; unknown sections resolve to None.
    """

    settings: dict[str, Any] = field(default_factory=dict)
    diagnostics: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    shown: list[tuple[str, str]] = field(default_factory=list)
    edits: list[dict[str, Any]] = field(default_factory=list)
    reports: list[str] = field(default_factory=list)
    configuration_requests: list[dict[str, Any]] = field(default_factory=list)

    def publish_diagnostics(self, uri: str, diagnostics: list[dict[str, Any]]) -> None:
        self.diagnostics[uri] = list(diagnostics)

    def show_message(self, category: str, text: str) -> None:
        self.shown.append((category, text))

    def apply_edit(self, workspace_edit: dict[str, Any]) -> bool:
        self.edits.append(workspace_edit)
        return True

    def resolve_configuration(self, item: dict[str, Any]) -> Any:
        self.configuration_requests.append(item)
        section = item.get("section") if isinstance(item, dict) else None
        if not section:
            return self.settings

        value: Any = self.settings
        for part in section.split("."):
            if not isinstance(value, dict) or part not in value:
                return None
            value = value[part]
        return value

    def report(self, text: str) -> None:
        self.reports.append(text)
