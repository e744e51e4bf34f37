"""ZETA CLI - Linear status-ticket assistant."""

import json
import logging
import sys
from pathlib import Path

import click

from .adapters.linear_api import LinearAPIError
from .config import ConfigError, load_config
from .core.status_ticket import StatusTicketError, segment
from .workflows import (
    WorkflowError,
    active_status_tickets,
    append_to_ticket,
    create_issue,
    create_weekly_ticket,
    find_issues,
    get_disambiguator,
    get_file_store,
    get_linear,
    log_status_update,
    post_comment,
    resolve_section,
    set_issue_state,
)

HANDLED_ERRORS = (StatusTicketError, WorkflowError, LinearAPIError, ConfigError, RuntimeError, ValueError)


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="zeta")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """ZETA - Linear status-ticket assistant."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.argument("items", nargs=-1, required=True)
@click.option("--client", "client_name", default=None, help="Client whose active status ticket to update")
@click.option("--ticket", "ticket_id", default=None, help="Status ticket identifier (skips the lookup)")
@click.option("--completed", "section", flag_value="completed", help="Log under Completed items (default)")
@click.option("--planned", "section", flag_value="planned", help="Log under Planned items")
@click.option("--section", "section_title", default=None, help="Any other section title")
@click.option("--date", "-d", "date_text", default=None, help="Date text of the day block, defaults to today")
@click.option("--dev", "dev_ticket_ids", multiple=True, help="Related dev ticket id (repeatable)")
@click.option("--no-llm", is_flag=True, help="Never ask the model to pick between blocks")
def log(items, client_name, ticket_id, section, section_title, date_text, dev_ticket_ids, no_llm):
    """Log work items into today's block of a status ticket."""
    config = load_config()
    try:
        result = log_status_update(
            config,
            section=section_title or section or "completed",
            items=list(items),
            client_name=client_name,
            ticket_id=ticket_id,
            date_text=date_text,
            dev_ticket_ids=list(dev_ticket_ids),
            use_llm=not no_llm,
        )
    except HANDLED_ERRORS as e:
        _fail(e)

    click.echo(f"✓ {result.ticket_id}: {result.block_header} / {result.section_title}")
    click.echo(result.inserted.rstrip("\n"))


@main.command()
@click.argument("ticket_id")
@click.argument("items", nargs=-1, required=True)
@click.option("--date", "-d", "date_text", required=True, help="Date text of the day block")
@click.option("--section", "-s", "section", required=True, help="Section title, or planned/completed")
@click.option("--dir", "tickets_dir", default=None, help="Directory of <ticket>.md files")
@click.option("--no-llm", is_flag=True, help="Never ask the model to pick between blocks")
def append(ticket_id, items, date_text, section, tickets_dir, no_llm):
    """Append items to a locally stored ticket description."""
    config = load_config()
    section_title = resolve_section(section)
    try:
        store = get_file_store(config, tickets_dir)
        if not store.exists(ticket_id):
            raise WorkflowError(f"No stored description for {ticket_id} in {store.tickets_dir}")
        disambiguate = None if no_llm else get_disambiguator(config, date_text, section_title)
        result = append_to_ticket(store, ticket_id, date_text, section_title, list(items), disambiguate)
    except HANDLED_ERRORS as e:
        _fail(e)

    click.echo(f"✓ {result.block_header} / {result.section_title}")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def outline(path: Path, as_json: bool):
    """Show the day blocks and sections of a description file."""
    try:
        doc = segment(path.read_text(encoding="utf-8"))
    except StatusTicketError as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "index": b.index,
                        "day": b.number,
                        "label": b.label,
                        "start": b.start,
                        "end": b.end,
                        "sections": [
                            {"marker": s.marker, "title": s.title, "start": s.start, "end": s.end}
                            for s in b.sections
                        ],
                    }
                    for b in doc.blocks
                ],
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    for block in doc.blocks:
        click.echo(f"[{block.index}] Day {block.number}: {block.label}")
        for s in block.sections:
            lines = [l for l in doc.section_text(s).splitlines() if l.strip()]
            click.echo(f"    {s.marker}. {s.title} ({len(lines)} line{'s' if len(lines) != 1 else ''})")


@main.command()
def tickets():
    """List each client's active status ticket."""
    config = load_config()
    if not config.client_projects:
        click.echo("No clients configured (CLIENT_PROJECTS in zeta.conf)", err=True)
        sys.exit(1)

    try:
        results = active_status_tickets(config, get_linear(config))
    except HANDLED_ERRORS as e:
        _fail(e)

    for client_name, ticket in results:
        if ticket is None:
            click.echo(f"{client_name:16} (none)")
        else:
            click.echo(f"{client_name:16} {ticket.identifier} [{ticket.state}] {ticket.title}")


@main.command("new-week")
@click.argument("client_name")
def new_week(client_name: str):
    """Create this week's status ticket for a client."""
    config = load_config()
    try:
        issue = create_weekly_ticket(config, client_name, get_linear(config))
    except HANDLED_ERRORS as e:
        _fail(e)

    click.echo(f"✓ Created {issue.identifier}: {issue.title}")
    if issue.url:
        click.echo(issue.url)


@main.command()
@click.argument("title")
@click.option("--description", "-m", default=None, help="Issue description (markdown)")
@click.option("--team", "team_id", default=None, help="Team id, defaults to your first team")
def create(title: str, description: str | None, team_id: str | None):
    """Create an issue."""
    config = load_config()
    try:
        issue = create_issue(get_linear(config), title, description, team_id)
    except HANDLED_ERRORS as e:
        _fail(e)

    click.echo(f"✓ Created {issue.identifier}: {issue.title}")
    if issue.url:
        click.echo(issue.url)


@main.command()
@click.argument("identifier")
@click.argument("body")
def comment(identifier: str, body: str):
    """Comment on an issue."""
    config = load_config()
    try:
        created = post_comment(get_linear(config), identifier, body)
    except HANDLED_ERRORS as e:
        _fail(e)

    click.echo(f"✓ Commented on {identifier}" + (f": {created['url']}" if created.get("url") else ""))


@main.command("set-state")
@click.argument("identifier")
@click.argument("state")
def set_state(identifier: str, state: str):
    """Move an issue to a workflow state (name or id)."""
    config = load_config()
    try:
        set_issue_state(get_linear(config), identifier, state)
    except HANDLED_ERRORS as e:
        _fail(e)

    click.echo(f"✓ {identifier} → {state}")


@main.command()
@click.argument("query", default="")
@click.option("--limit", default=5, show_default=True, help="Maximum results")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def find(query: str, limit: int, as_json: bool):
    """Search my open issues by title, description or identifier."""
    config = load_config()
    try:
        issues = find_issues(get_linear(config), query, limit)
    except HANDLED_ERRORS as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "identifier": i.identifier,
                        "title": i.title,
                        "state": i.state,
                        "project": i.project_name,
                        "url": i.url,
                    }
                    for i in issues
                ],
                indent=2,
            )
        )
        return

    if not issues:
        click.echo("No matching issues.")
        return

    for issue in issues:
        click.echo(f"{issue.identifier:10} [{issue.state}] {issue.title}")


if __name__ == "__main__":
    main()
