"""File-based ticket description storage adapter."""

import re
from pathlib import Path

SAFE_ID_RE = re.compile(r"^[A-Za-z0-9._-]+$")


class FileTicketStore:
    """
    File-based ticket description storage.

    Implements TicketStore protocol. Each ticket gets a markdown file named
    after its id, so descriptions can be edited offline.
    """

    def __init__(self, tickets_dir: Path | str):
        self.tickets_dir = Path(tickets_dir).expanduser()
        self.tickets_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, ticket_id: str) -> Path:
        """Get the file path for a ticket id."""
        if not SAFE_ID_RE.match(ticket_id) or ticket_id.startswith("."):
            raise ValueError(f"Invalid ticket id: {ticket_id!r}")
        return self.tickets_dir / f"{ticket_id}.md"

    def get_description(self, ticket_id: str) -> str:
        """Read description text. Missing tickets read as ''."""
        path = self._path_for(ticket_id)
        if not path.exists():
            return ""
        return path.read_text(encoding="utf-8")

    def set_description(self, ticket_id: str, text: str) -> None:
        """Write/overwrite description text."""
        self._path_for(ticket_id).write_text(text, encoding="utf-8")

    def exists(self, ticket_id: str) -> bool:
        return self._path_for(ticket_id).exists()
