"""Functional core - pure business logic with no I/O."""

from .status_ticket import (
    AppendResult,
    Candidate,
    DateNotFound,
    DayBlock,
    DisambiguationUnavailable,
    NoSectionsFound,
    SafetyViolation,
    Section,
    SectionNotFound,
    StatusDocument,
    StatusTicketError,
    append_to_status_section,
    compose_append,
    segment,
)
from .issues import Issue, search_issues, match_state
from .weekly import day_of_week_number, status_date_label, weekly_ticket_title

__all__ = [
    # Status tickets
    "AppendResult",
    "Candidate",
    "DateNotFound",
    "DayBlock",
    "DisambiguationUnavailable",
    "NoSectionsFound",
    "SafetyViolation",
    "Section",
    "SectionNotFound",
    "StatusDocument",
    "StatusTicketError",
    "append_to_status_section",
    "compose_append",
    "segment",
    # Issues
    "Issue",
    "search_issues",
    "match_state",
    # Weekly
    "day_of_week_number",
    "status_date_label",
    "weekly_ticket_title",
]
