"""Ports - interfaces/protocols for external dependencies."""

from .ticket_store import TicketStore
from .llm_service import LLMService

__all__ = [
    "TicketStore",
    "LLMService",
]
