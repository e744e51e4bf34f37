"""Tests for the Linear GraphQL adapter."""

from unittest.mock import MagicMock

import pytest
import requests

from zeta.adapters.linear_api import LINEAR_API_URL, LinearAdapter, LinearAPIError
from zeta.config import Config, ConfigError


def _response(payload: dict, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


@pytest.fixture
def adapter():
    adapter = LinearAdapter(Config(linear_api_key="lin_test"))
    adapter._session = MagicMock()
    return adapter


def _sent(adapter) -> dict:
    return adapter._session.post.call_args.kwargs


ISSUE_NODE = {
    "id": "uuid-7",
    "identifier": "ACME-7",
    "title": "Status Updates - Acme Week 46 November",
    "description": "🧩Day 1: Nov 10, 2025\n",
    "url": "https://linear.app/acme/issue/ACME-7",
    "priority": 0,
    "state": {"name": "Todo"},
    "project": {"name": "Acme"},
    "team": {"id": "team-1"},
    "labels": {"nodes": []},
}


class TestGraphQL:
    def test_sends_auth_header(self, adapter):
        adapter._session.post.return_value = _response({"data": {"viewer": {"id": "u1", "name": "Dhanush"}}})
        assert adapter.viewer() == {"id": "u1", "name": "Dhanush"}
        sent = _sent(adapter)
        assert adapter._session.post.call_args.args[0] == LINEAR_API_URL
        assert sent["headers"]["Authorization"] == "lin_test"
        assert sent["timeout"] == 30.0

    def test_http_error(self, adapter):
        adapter._session.post.return_value = _response({}, status_code=401)
        with pytest.raises(LinearAPIError, match="401"):
            adapter.viewer()

    def test_graphql_errors(self, adapter):
        adapter._session.post.return_value = _response({"errors": [{"message": "bad query"}]})
        with pytest.raises(LinearAPIError, match="bad query"):
            adapter.viewer()

    def test_network_error(self, adapter):
        adapter._session.post.side_effect = requests.ConnectionError("offline")
        with pytest.raises(LinearAPIError, match="offline"):
            adapter.viewer()

    def test_missing_key(self):
        adapter = LinearAdapter(Config())
        adapter._session = MagicMock()
        with pytest.raises(ConfigError):
            adapter.viewer()
        adapter._session.post.assert_not_called()


class TestTicketStore:
    def test_get_description(self, adapter):
        adapter._session.post.return_value = _response(
            {"data": {"issue": {"id": "uuid-7", "description": "🧩Day 1: Mon\n"}}}
        )
        assert adapter.get_description("ACME-7") == "🧩Day 1: Mon\n"
        assert _sent(adapter)["json"]["variables"] == {"id": "ACME-7"}

    def test_null_description_reads_empty(self, adapter):
        adapter._session.post.return_value = _response({"data": {"issue": {"id": "x", "description": None}}})
        assert adapter.get_description("ACME-7") == ""

    def test_missing_issue(self, adapter):
        adapter._session.post.return_value = _response({"data": {"issue": None}})
        with pytest.raises(LinearAPIError, match="not found"):
            adapter.get_description("ACME-404")

    def test_set_description(self, adapter):
        adapter._session.post.return_value = _response({"data": {"issueUpdate": {"success": True}}})
        adapter.set_description("ACME-7", "new text")
        assert _sent(adapter)["json"]["variables"] == {"id": "ACME-7", "description": "new text"}
        assert adapter._session.post.call_count == 1

    def test_set_description_rejected(self, adapter):
        adapter._session.post.return_value = _response({"data": {"issueUpdate": {"success": False}}})
        with pytest.raises(LinearAPIError):
            adapter.set_description("ACME-7", "new text")


class TestIssues:
    def test_find_active_status_ticket(self, adapter):
        adapter._session.post.return_value = _response(
            {"data": {"viewer": {"assignedIssues": {"nodes": [ISSUE_NODE]}}}}
        )
        ticket = adapter.find_active_status_ticket("project-1", "Status Update")
        assert ticket.identifier == "ACME-7"
        variables = _sent(adapter)["json"]["variables"]
        assert variables["projectId"] == "project-1"
        assert variables["marker"] == "Status Update"
        assert "Done" in variables["closed"]

    def test_find_active_status_ticket_none(self, adapter):
        adapter._session.post.return_value = _response({"data": {"viewer": {"assignedIssues": {"nodes": []}}}})
        assert adapter.find_active_status_ticket("project-1", "Status Update") is None

    def test_create_issue_only_sends_set_fields(self, adapter):
        adapter._session.post.return_value = _response(
            {"data": {"issueCreate": {"success": True, "issue": ISSUE_NODE}}}
        )
        issue = adapter.create_issue("Title", "team-1", template_id="tmpl-1")
        assert issue.identifier == "ACME-7"
        assert _sent(adapter)["json"]["variables"]["input"] == {
            "title": "Title",
            "teamId": "team-1",
            "templateId": "tmpl-1",
        }

    def test_default_team_id(self, adapter):
        adapter._session.post.return_value = _response(
            {"data": {"viewer": {"teams": {"nodes": [{"id": "team-first"}, {"id": "team-2"}]}}}}
        )
        assert adapter.default_team_id() == "team-first"

    def test_default_team_id_without_teams(self, adapter):
        adapter._session.post.return_value = _response({"data": {"viewer": {"teams": {"nodes": []}}}})
        with pytest.raises(LinearAPIError, match="No team"):
            adapter.default_team_id()

    def test_fetch_my_issues_excludes_closed_states(self, adapter):
        adapter._session.post.return_value = _response(
            {"data": {"viewer": {"assignedIssues": {"nodes": [ISSUE_NODE]}}}}
        )
        assert [i.identifier for i in adapter.fetch_my_issues(10)] == ["ACME-7"]
        variables = _sent(adapter)["json"]["variables"]
        assert variables == {"first": 10, "closed": ["Done", "Canceled", "Completed"]}

    def test_create_issue_failure(self, adapter):
        adapter._session.post.return_value = _response({"data": {"issueCreate": {"success": False, "issue": None}}})
        with pytest.raises(LinearAPIError):
            adapter.create_issue("Title", "team-1")

    def test_create_comment(self, adapter):
        adapter._session.post.return_value = _response(
            {"data": {"commentCreate": {"success": True, "comment": {"id": "c1", "url": "u"}}}}
        )
        assert adapter.create_comment("uuid-7", "Done") == {"id": "c1", "url": "u"}

    def test_project_team_id(self, adapter):
        adapter._session.post.return_value = _response(
            {"data": {"project": {"teams": {"nodes": [{"id": "team-1"}]}}}}
        )
        assert adapter.project_team_id("project-1") == "team-1"

    def test_project_without_team(self, adapter):
        adapter._session.post.return_value = _response({"data": {"project": {"teams": {"nodes": []}}}})
        with pytest.raises(LinearAPIError):
            adapter.project_team_id("project-1")

    def test_team_states(self, adapter):
        states = [{"id": "s1", "name": "Todo"}, {"id": "s2", "name": "Done"}]
        adapter._session.post.return_value = _response({"data": {"team": {"states": {"nodes": states}}}})
        assert adapter.team_states("team-1") == states

    def test_fetch_my_issues(self, adapter):
        adapter._session.post.return_value = _response(
            {"data": {"viewer": {"assignedIssues": {"nodes": [ISSUE_NODE]}}}}
        )
        issues = adapter.fetch_my_issues()
        assert [i.identifier for i in issues] == ["ACME-7"]
        assert _sent(adapter)["json"]["variables"]["first"] == 50
