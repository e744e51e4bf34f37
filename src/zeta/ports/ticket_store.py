"""Ticket store interface."""

from typing import Protocol


class TicketStore(Protocol):
    """Interface for reading and writing an issue's description."""

    def get_description(self, ticket_id: str) -> str:
        """Read the description text. Missing descriptions read as ''."""
        ...

    def set_description(self, ticket_id: str, text: str) -> None:
        """Overwrite the description text."""
        ...
