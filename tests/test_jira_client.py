from unittest.mock import AsyncMock, patch

import httpx
import pytest

from people_journal.config import Settings
from people_journal.integrations.base import AuthenticationError
from people_journal.integrations.jira_client import (
    JiraClient, JiraConfig, JiraError, extract_story_points, parse_issue,
)


def _client():
    return JiraClient(JiraConfig(
        server_url="https://example.atlassian.net/",
        email="me@example.com",
        api_token="token"
    ))


def _issue(key, status="In Progress", **fields):
    return {"key": key, "fields": {"summary": f"Summary {key}", "status": {"name": status}, **fields}}


def test_parse_issue_reads_flag_and_epic():
    ticket = parse_issue(_issue("PJ-1", flagged=[{"value": "Impediment"}], customfield_10014="Search"))

    assert ticket.key == "PJ-1"
    assert ticket.summary == "Summary PJ-1"
    assert ticket.status == "In Progress"
    assert ticket.flagged is True
    assert ticket.epic_name == "Search"


def test_parse_issue_tolerates_missing_fields():
    ticket = parse_issue({"key": "PJ-2"})

    assert ticket.summary == ""
    assert ticket.flagged is False
    assert ticket.epic_name is None


def test_story_points_fallback():
    assert extract_story_points(_issue("A", story_points=5, customfield_10016=3)) == 5
    assert extract_story_points(_issue("B", customfield_10016=3.0)) == 3
    assert extract_story_points(_issue("C")) == 0


def test_from_settings_requires_all_credentials():
    partial = Settings(_env_file=None, jira_base_url="https://x.atlassian.net", jira_email=None, jira_api_token=None)
    full = Settings(
        _env_file=None,
        jira_base_url="https://x.atlassian.net",
        jira_email="me@x.com",
        jira_api_token="token"
    )

    assert JiraClient.from_settings(partial) is None
    assert JiraClient.from_settings(full).config.server_url == "https://x.atlassian.net"


def test_board_url():
    assert _client().board_url("acc-1") == "https://example.atlassian.net/jira/people/acc-1"


@pytest.mark.asyncio
async def test_resolve_account_prefers_exact_name():
    client = _client()
    users = [
        {"accountId": "acc-inactive", "displayName": "Alice", "active": False},
        {"accountId": "acc-other", "displayName": "Alice Cooper", "active": True},
        {"accountId": "acc-alice", "displayName": "alice", "active": True},
    ]

    with patch.object(client, "_request_json", AsyncMock(return_value=users)):
        assert await client.resolve_account_id("Alice") == "acc-alice"


@pytest.mark.asyncio
async def test_resolve_account_without_active_users():
    client = _client()

    with patch.object(client, "_request_json", AsyncMock(return_value=[])):
        with pytest.raises(JiraError):
            await client.resolve_account_id("Nobody")


@pytest.mark.asyncio
async def test_fetch_activity_builds_sprint_stats():
    client = _client()
    assigned = [
        _issue("PJ-1", story_points=3),
        _issue("PJ-2", status="Done", story_points=2),
        _issue("PJ-3", flagged=True, customfield_10016=5),
    ]
    completed = [_issue("PJ-9", status="Done")]

    with patch.object(client, "search", AsyncMock(side_effect=[assigned, completed])) as search:
        activity = await client.fetch_activity("acc-1", "2025-03-01")

    assert [t.key for t in activity.assigned] == ["PJ-1", "PJ-3"]
    assert [t.key for t in activity.blocked] == ["PJ-3"]
    assert [t.key for t in activity.completed] == ["PJ-9"]
    assert activity.sprint_stats.points_committed == 10
    assert activity.sprint_stats.points_completed == 2
    assert activity.sprint_stats.carryover == 8
    assert activity.board_url == "https://example.atlassian.net/jira/people/acc-1"
    assert 'resolved >= "2025-03-01"' in search.await_args_list[1].args[0]


@pytest.mark.asyncio
async def test_fetch_activity_survives_failed_search():
    client = _client()

    with patch.object(client, "search", AsyncMock(side_effect=JiraError("boom", "jira"))):
        activity = await client.fetch_activity("acc-1", "2025-03-01")

    assert activity.has_tickets is False
    assert activity.sprint_stats is None


@pytest.mark.asyncio
async def test_unauthorized_response_raises_authentication_error():
    client = _client()
    response = httpx.Response(401, json={"errorMessages": ["nope"]})
    http_client = AsyncMock()
    http_client.__aenter__.return_value = http_client
    http_client.__aexit__.return_value = False
    http_client.request.return_value = response

    with patch("people_journal.integrations.base.httpx.AsyncClient", return_value=http_client):
        with pytest.raises(AuthenticationError) as exc_info:
            await client.search("assignee = currentUser()")

    assert exc_info.value.status_code == 401
