"""Pure Linear issue logic - no I/O dependencies."""

import re
from dataclasses import dataclass, field

STATE_ID_RE = re.compile(r"^[0-9a-fA-F-]{36}$")


@dataclass
class Issue:
    """A Linear issue, flattened from the GraphQL shape."""

    id: str
    identifier: str
    title: str
    description: str = ""
    url: str = ""
    state: str = "Unknown"
    project_name: str = ""
    team_id: str = ""
    priority: int = 0
    labels: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, node: dict) -> "Issue":
        """Create Issue from a Linear GraphQL issue node."""
        state = node.get("state") or {}
        project = node.get("project") or {}
        team = node.get("team") or {}
        labels = (node.get("labels") or {}).get("nodes", [])
        return cls(
            id=node["id"],
            identifier=node.get("identifier", ""),
            title=node.get("title", ""),
            description=node.get("description") or "",
            url=node.get("url", ""),
            state=state.get("name", "Unknown"),
            project_name=project.get("name", ""),
            team_id=team.get("id", ""),
            priority=node.get("priority") or 0,
            labels=[l["name"] for l in labels],
        )


def search_issues(issues: list[Issue], query: str, limit: int = 5) -> list[Issue]:
    """
    Case-insensitive match on title, description or identifier.

    An empty query matches everything. Pure function - no I/O.
    """
    q = query.strip().lower()
    if q:
        issues = [
            i
            for i in issues
            if q in i.title.lower() or q in i.description.lower() or q in i.identifier.lower()
        ]
    return issues[:limit]


def looks_like_state_id(value: str) -> bool:
    """Workflow state UUIDs are 36 chars of hex and dashes."""
    return bool(STATE_ID_RE.match(value))


def match_state(states: list[dict], name: str) -> dict | None:
    """Find a workflow state by name, ignoring case."""
    wanted = name.strip().lower()
    return next((s for s in states if s["name"].lower() == wanted), None)
