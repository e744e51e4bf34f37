"""Shared workflow layer between the CLI and the Linear/OpenAI adapters.

Each function resolves its collaborators from config unless they are passed
in, runs the pure core, and only then performs the single write.
"""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from .adapters.file_tickets import FileTicketStore
from .adapters.linear_api import LinearAdapter, LinearAPIError
from .adapters.openai_chat import OpenAIChatService
from .config import DATA_DIR, Config
from .core.disambiguation import build_prompt, parse_choice
from .core.issues import Issue, looks_like_state_id, match_state, search_issues
from .core.status_ticket import (
    Candidate,
    Disambiguator,
    DisambiguationUnavailable,
    compose_append,
)
from .core.weekly import (
    COMPLETED_SECTION,
    PLANNED_SECTION,
    format_entry,
    log_day,
    status_date_label,
    week_start,
    weekly_ticket_description,
    weekly_ticket_title,
)
from .ports import LLMService, TicketStore

logger = logging.getLogger(__name__)

SECTION_ALIASES = {
    "planned": PLANNED_SECTION,
    "completed": COMPLETED_SECTION,
}


class WorkflowError(Exception):
    """Raised when a workflow cannot find what it needs to act on."""

    pass


@dataclass
class StatusUpdateResult:
    """What was written where."""

    ticket_id: str
    block_header: str
    section_title: str
    inserted: str
    chosen_by: str


def get_linear(config: Config) -> LinearAdapter:
    return LinearAdapter(config)


def get_file_store(config: Config, tickets_dir: str | None = None) -> FileTicketStore:
    """Resolve the offline ticket directory from the argument or config."""
    if tickets_dir:
        return FileTicketStore(Path(tickets_dir))
    if config.tickets_dir:
        return FileTicketStore(Path(config.tickets_dir))
    return FileTicketStore(DATA_DIR / "tickets")


def resolve_section(section: str) -> str:
    """Map 'planned'/'completed' shorthands to their heading titles."""
    return SECTION_ALIASES.get(section.strip().lower(), section.strip())


# ============== Disambiguation ==============


def make_disambiguator(llm: LLMService, date_text: str, section_title: str) -> Disambiguator:
    """Wrap an LLM as a candidate picker. Any failure becomes DisambiguationUnavailable."""

    def choose(candidates: list[Candidate]) -> int:
        prompt = build_prompt(candidates, date_text, section_title)
        try:
            reply = llm.generate(prompt)
        except RuntimeError as e:
            raise DisambiguationUnavailable(str(e)) from e
        return parse_choice(reply, candidates)

    return choose


def get_disambiguator(config: Config, date_text: str, section_title: str) -> Disambiguator | None:
    """OpenAI-backed disambiguator, or None when disabled or no key is set."""
    if not config.disambiguate or not config.openai_api_key:
        return None
    llm = OpenAIChatService(
        api_key=config.openai_api_key,
        model=config.openai_model,
        timeout=config.openai_timeout,
    )
    return make_disambiguator(llm, date_text, section_title)


# ============== Status tickets ==============


def append_to_ticket(
    store: TicketStore,
    ticket_id: str,
    date_text: str,
    section_title: str,
    items: list[str],
    disambiguate: Disambiguator | None = None,
) -> StatusUpdateResult:
    """Read, edit and write back one ticket description. Nothing is written on failure."""
    description = store.get_description(ticket_id)
    result = compose_append(description, date_text, section_title, items, disambiguate)
    store.set_description(ticket_id, result.text)

    logger.info(
        f"Appended {len(items)} item(s) to '{result.section.title}' in "
        f"'{result.block.header}' of {ticket_id} (block chosen by {result.chosen_by})"
    )
    return StatusUpdateResult(
        ticket_id=ticket_id,
        block_header=result.block.header,
        section_title=result.section.title,
        inserted=result.inserted,
        chosen_by=result.chosen_by,
    )


def find_status_ticket(config: Config, client_name: str, linear: LinearAdapter) -> Issue:
    """The client's open weekly status ticket."""
    project_id = config.project_id(client_name)
    ticket = linear.find_active_status_ticket(project_id, config.status_ticket_marker)
    if ticket is None:
        raise WorkflowError(f"No active weekly status ticket found for {client_name}")
    return ticket


def log_status_update(
    config: Config,
    section: str,
    items: list[str],
    client_name: str | None = None,
    ticket_id: str | None = None,
    date_text: str | None = None,
    dev_ticket_ids: list[str] | None = None,
    linear: LinearAdapter | None = None,
    store: TicketStore | None = None,
    disambiguate: Disambiguator | None = None,
    use_llm: bool = True,
    today: date | None = None,
) -> StatusUpdateResult:
    """
    Log planned/completed work into today's block of a status ticket.

    The ticket is either given directly or looked up as the client's active
    status ticket. The date defaults to the header label of today's block,
    which is Friday's on weekends.
    """
    if ticket_id is None:
        if not client_name:
            raise WorkflowError("Either a client name or a ticket id is required")
        linear = linear or get_linear(config)
        ticket_id = find_status_ticket(config, client_name, linear).identifier

    store = store or linear or get_linear(config)
    section_title = resolve_section(section)
    date_text = date_text or status_date_label(log_day(today))
    entries = [format_entry(item, dev_ticket_ids) for item in items if item.strip()]

    if disambiguate is None and use_llm:
        disambiguate = get_disambiguator(config, date_text, section_title)

    return append_to_ticket(store, ticket_id, date_text, section_title, entries, disambiguate)


def active_status_tickets(config: Config, linear: LinearAdapter) -> list[tuple[str, Issue | None]]:
    """Each configured client with its open status ticket, if any."""
    results = []
    for client_name, project_id in config.client_projects.items():
        try:
            ticket = linear.find_active_status_ticket(project_id, config.status_ticket_marker)
        except LinearAPIError as e:
            logger.error(f"Error fetching status ticket for {client_name}: {e}")
            ticket = None
        results.append((client_name, ticket))
    return results


def create_weekly_ticket(
    config: Config,
    client_name: str,
    linear: LinearAdapter,
    today: date | None = None,
) -> Issue:
    """Create this week's status ticket from the Linear template or the built-in layout."""
    today = today or date.today()
    project_id = config.project_id(client_name)
    team_id = linear.project_team_id(project_id)
    me = linear.viewer()

    description = None
    if not config.weekly_template_id:
        description = weekly_ticket_description(week_start(today))

    issue = linear.create_issue(
        title=weekly_ticket_title(client_name, today),
        team_id=team_id,
        description=description,
        project_id=project_id,
        assignee_id=me["id"],
        template_id=config.weekly_template_id or None,
    )
    logger.info(f"Created weekly status ticket {issue.identifier} for {client_name}")
    return issue


# ============== Issue actions ==============


def post_comment(linear: LinearAdapter, identifier: str, body: str) -> dict:
    if not body.strip():
        raise WorkflowError("Comment body must not be empty")
    issue = linear.get_issue(identifier)
    return linear.create_comment(issue.id, body)


def create_issue(
    linear: LinearAdapter,
    title: str,
    description: str | None = None,
    team_id: str | None = None,
) -> Issue:
    """Create an issue, in the user's first team unless one is given."""
    if not title.strip():
        raise WorkflowError("Issue title must not be empty")
    team_id = team_id or linear.default_team_id()
    issue = linear.create_issue(title=title.strip(), team_id=team_id, description=description)
    logger.info(f"Created issue {issue.identifier} in team {team_id}")
    return issue


def set_issue_state(linear: LinearAdapter, identifier: str, state: str) -> str:
    """Move an issue to a state given by UUID or by name. Returns the state id used."""
    issue = linear.get_issue(identifier)
    if looks_like_state_id(state):
        state_id = state
    else:
        if not issue.team_id:
            raise WorkflowError(f"Could not find team for issue {identifier}")
        match = match_state(linear.team_states(issue.team_id), state)
        if match is None:
            raise WorkflowError(f'State "{state}" not found for {identifier}')
        state_id = match["id"]

    linear.update_issue_state(issue.id, state_id)
    logger.info(f"Moved {identifier} to {state}")
    return state_id


def find_issues(linear: LinearAdapter, query: str, limit: int = 5) -> list[Issue]:
    return search_issues(linear.fetch_my_issues(), query, limit)
