"""Adapters - I/O implementations of ports."""

from .linear_api import LinearAdapter, LinearAPIError
from .file_tickets import FileTicketStore
from .openai_chat import OpenAIChatService

__all__ = [
    "LinearAdapter",
    "LinearAPIError",
    "FileTicketStore",
    "OpenAIChatService",
]
