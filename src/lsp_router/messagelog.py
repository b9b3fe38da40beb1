"""Per-connection log of messages sent by the language server.

Entries are kept in memory and, when a file path is configured, appended
to a JSON Lines file that is flushed after each write.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

ERROR = "Error"
WARNING = "Warning"
INFO = "Info"
LOG = "Log"
TRACE = "trace"

CATEGORIES = (ERROR, WARNING, INFO, LOG, TRACE)


def _get_timestamp() -> str:
    """Get current UTC timestamp in ISO 8601 format."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class MessageEntry:
    """A single message log entry."""

    timestamp: str
    category: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "timestamp": self.timestamp,
            "category": self.category,
            "text": self.text,
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())


class MessageLog:
    """Append-only message log for one server connection."""

    def __init__(self, log_path: Path | None = None, server_name: str = "") -> None:
        """Initialize the message log.

        Args:
            log_path: Optional JSON Lines file to mirror entries into.
            server_name: Server name recorded with each file entry.
        """
        self._entries: list[MessageEntry] = []
        self._server_name = server_name
        self._log_path = log_path
        self._file = None
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(log_path, "a", encoding="utf-8")  # noqa: SIM115

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, category: str, text: str) -> MessageEntry:
        """Append an entry.

        Args:
            category: One of Error, Warning, Info, Log, trace.
            text: Message text.

        Returns:
            The stored entry.

        Raises:
            ValueError: If the category is unknown.
        """
        if category not in CATEGORIES:
            raise ValueError(f"Unknown message category: {category}")

        entry = MessageEntry(timestamp=_get_timestamp(), category=category, text=text)
        self._entries.append(entry)

        if self._file is not None and not self._file.closed:
            record = entry.to_dict()
            record["server"] = self._server_name
            self._file.write(json.dumps(record) + "\n")
            self._file.flush()

        return entry

    def entries(self, category: str | None = None) -> list[MessageEntry]:
        """Return entries, optionally filtered by category."""
        if category is None:
            return list(self._entries)
        return [entry for entry in self._entries if entry.category == category]

    def clear(self) -> None:
        """Drop in-memory entries. The file sink is left untouched."""
        self._entries.clear()

    def close(self) -> None:
        """Close the log file."""
        if self._file and not self._file.closed:
            self._file.close()

    def __enter__(self) -> MessageLog:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
