"""Weekly status-ticket calendar logic - pure functions, no I/O."""

import math
from datetime import date, timedelta

DAY_MARKER = "🧩"
PLANNED_SECTION = "Planned items"
COMPLETED_SECTION = "Completed items"
WORKDAYS = 5


def day_of_week_number(as_of: date | None = None) -> int:
    """
    Day slot in the weekly ticket (1=Monday to 5=Friday).

    Weekend logs land in the Friday slot.
    """
    as_of = as_of or date.today()
    return min(as_of.isoweekday(), WORKDAYS)


def week_number(as_of: date | None = None) -> int:
    """Week of the year, counting the partial week containing Jan 1 as week 1."""
    as_of = as_of or date.today()
    jan1 = date(as_of.year, 1, 1)
    past_days = (as_of - jan1).days
    jan1_weekday = jan1.isoweekday() % 7  # Sunday=0
    return math.ceil((past_days + jan1_weekday + 1) / 7)


def weekly_ticket_title(client_name: str, as_of: date | None = None) -> str:
    """Title for a new weekly status ticket, e.g. 'Status Updates - Acme Week 46 November'."""
    as_of = as_of or date.today()
    return f"Status Updates - {client_name} Week {week_number(as_of)} {as_of.strftime('%B')}"


def status_date_label(target: date) -> str:
    """Date text as written in day headers, e.g. 'November 12, 2025'."""
    return f"{target.strftime('%B')} {target.day}, {target.year}"


def week_start(as_of: date | None = None) -> date:
    """Monday of the week containing as_of."""
    as_of = as_of or date.today()
    return as_of - timedelta(days=as_of.weekday())


def log_day(as_of: date | None = None) -> date:
    """Date of the weekly block a log made on as_of belongs to (Saturday/Sunday -> Friday)."""
    as_of = as_of or date.today()
    return week_start(as_of) + timedelta(days=day_of_week_number(as_of) - 1)


def weekly_ticket_description(start: date) -> str:
    """Empty weekly log: one block per workday, each with planned/completed sections."""
    blocks = []
    for i in range(WORKDAYS):
        day = start + timedelta(days=i)
        blocks.append(
            f"{DAY_MARKER}Day {i + 1}: {status_date_label(day)}\n"
            f"A. {PLANNED_SECTION}\n"
            f"\n"
            f"B. {COMPLETED_SECTION}\n"
        )
    return "\n".join(blocks)


def format_entry(content: str, dev_ticket_ids: list[str] | None = None) -> str:
    """Append related dev ticket identifiers to a log entry."""
    content = content.strip()
    ids = [t.strip() for t in dev_ticket_ids or [] if t.strip()]
    if ids:
        return f"{content} ({', '.join(ids)})"
    return content
