"""Linear API adapter - GraphQL client for issues and descriptions."""

import json
import logging

import requests

from zeta.config import Config, load_config
from zeta.core.issues import Issue

logger = logging.getLogger(__name__)

LINEAR_API_URL = "https://api.linear.app/graphql"
CLOSED_STATES = ["Done", "Canceled", "Completed"]

ISSUE_FIELDS = """
    id
    identifier
    title
    description
    url
    priority
    state { name }
    project { name }
    team { id }
    labels { nodes { name } }
"""


class LinearAPIError(Exception):
    """Raised when Linear API operations fail."""

    pass


class LinearAdapter:
    """
    Linear GraphQL adapter.

    Implements TicketStore protocol. Handles auth headers, requests and
    GraphQL error unwrapping. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, timeout: float = 30.0):
        self.config = config or load_config()
        self.timeout = timeout
        self._session = requests.Session()

    def _graphql(self, query: str, variables: dict | None = None) -> dict:
        """Run a query or mutation and return its data payload."""
        headers = {
            "Authorization": self.config.require_linear_key(),
            "Content-Type": "application/json",
        }
        try:
            resp = self._session.post(
                LINEAR_API_URL,
                headers=headers,
                json={"query": query, "variables": variables or {}},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise LinearAPIError(f"Linear API request failed: {e}") from e

        if resp.status_code != 200:
            raise LinearAPIError(f"Linear API returned {resp.status_code}: {resp.text}")

        data = resp.json()
        if "errors" in data:
            raise LinearAPIError(f"Linear API errors: {json.dumps(data['errors'])}")
        return data["data"]

    def _issue_node(self, ticket_id: str, fields: str) -> dict:
        query = f"""
        query($id: String!) {{
            issue(id: $id) {{ {fields} }}
        }}
        """
        issue = self._graphql(query, {"id": ticket_id}).get("issue")
        if not issue:
            raise LinearAPIError(f"Issue not found: {ticket_id}")
        return issue

    # ---- TicketStore ----

    def get_description(self, ticket_id: str) -> str:
        """Read an issue's description. Accepts UUIDs or identifiers like ENG-123."""
        return self._issue_node(ticket_id, "id description").get("description") or ""

    def set_description(self, ticket_id: str, text: str) -> None:
        """Overwrite an issue's description with a single issueUpdate."""
        mutation = """
        mutation($id: String!, $description: String!) {
            issueUpdate(id: $id, input: { description: $description }) { success }
        }
        """
        data = self._graphql(mutation, {"id": ticket_id, "description": text})
        if not data["issueUpdate"]["success"]:
            raise LinearAPIError(f"Description update rejected for {ticket_id}")
        logger.info(f"Updated description of {ticket_id} ({len(text)} chars)")

    # ---- Issues ----

    def viewer(self) -> dict:
        """The authenticated user."""
        return self._graphql("query { viewer { id name } }")["viewer"]

    def get_issue(self, ticket_id: str) -> Issue:
        return Issue.from_api(self._issue_node(ticket_id, ISSUE_FIELDS))

    def find_active_status_ticket(self, project_id: str, marker: str) -> Issue | None:
        """Newest open issue assigned to me in the project whose title contains marker."""
        query = f"""
        query($projectId: ID!, $marker: String!, $closed: [String!]) {{
            viewer {{
                assignedIssues(
                    filter: {{
                        project: {{ id: {{ eq: $projectId }} }}
                        title: {{ contains: $marker }}
                        state: {{ name: {{ nin: $closed }} }}
                    }}
                    first: 1
                ) {{
                    nodes {{ {ISSUE_FIELDS} }}
                }}
            }}
        }}
        """
        data = self._graphql(
            query, {"projectId": project_id, "marker": marker, "closed": CLOSED_STATES}
        )
        nodes = data["viewer"]["assignedIssues"]["nodes"]
        return Issue.from_api(nodes[0]) if nodes else None

    def fetch_my_issues(self, limit: int = 50) -> list[Issue]:
        """Open issues assigned to me."""
        query = f"""
        query($first: Int!, $closed: [String!]) {{
            viewer {{
                assignedIssues(filter: {{ state: {{ name: {{ nin: $closed }} }} }}, first: $first) {{
                    nodes {{ {ISSUE_FIELDS} }}
                }}
            }}
        }}
        """
        data = self._graphql(query, {"first": limit, "closed": CLOSED_STATES})
        return [Issue.from_api(n) for n in data["viewer"]["assignedIssues"]["nodes"]]

    def create_comment(self, issue_id: str, body: str) -> dict:
        mutation = """
        mutation($issueId: String!, $body: String!) {
            commentCreate(input: { issueId: $issueId, body: $body }) {
                success
                comment { id url }
            }
        }
        """
        result = self._graphql(mutation, {"issueId": issue_id, "body": body})["commentCreate"]
        if not result["success"]:
            raise LinearAPIError(f"Comment creation failed on {issue_id}")
        return result["comment"]

    def create_issue(
        self,
        title: str,
        team_id: str,
        description: str | None = None,
        project_id: str | None = None,
        assignee_id: str | None = None,
        template_id: str | None = None,
    ) -> Issue:
        """Create an issue; optional fields are only sent when set."""
        issue_input = {"title": title, "teamId": team_id}
        if description is not None:
            issue_input["description"] = description
        if project_id:
            issue_input["projectId"] = project_id
        if assignee_id:
            issue_input["assigneeId"] = assignee_id
        if template_id:
            issue_input["templateId"] = template_id

        mutation = f"""
        mutation($input: IssueCreateInput!) {{
            issueCreate(input: $input) {{
                success
                issue {{ {ISSUE_FIELDS} }}
            }}
        }}
        """
        result = self._graphql(mutation, {"input": issue_input})["issueCreate"]
        if not result["success"] or not result.get("issue"):
            raise LinearAPIError(f"Failed to create issue '{title}'")
        return Issue.from_api(result["issue"])

    def project_team_id(self, project_id: str) -> str:
        query = """
        query($id: String!) {
            project(id: $id) { teams(first: 1) { nodes { id } } }
        }
        """
        teams = self._graphql(query, {"id": project_id})["project"]["teams"]["nodes"]
        if not teams:
            raise LinearAPIError(f"Project {project_id} has no team")
        return teams[0]["id"]

    def default_team_id(self) -> str:
        """First team the authenticated user belongs to."""
        query = "query { viewer { teams(first: 1) { nodes { id } } } }"
        teams = self._graphql(query)["viewer"]["teams"]["nodes"]
        if not teams:
            raise LinearAPIError("No team found for user")
        return teams[0]["id"]

    def team_states(self, team_id: str) -> list[dict]:
        query = """
        query($id: String!) {
            team(id: $id) { states { nodes { id name } } }
        }
        """
        return self._graphql(query, {"id": team_id})["team"]["states"]["nodes"]

    def update_issue_state(self, issue_id: str, state_id: str) -> None:
        mutation = """
        mutation($id: String!, $stateId: String!) {
            issueUpdate(id: $id, input: { stateId: $stateId }) { success }
        }
        """
        data = self._graphql(mutation, {"id": issue_id, "stateId": state_id})
        if not data["issueUpdate"]["success"]:
            raise LinearAPIError(f"State update rejected for {issue_id}")
