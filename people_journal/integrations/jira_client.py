from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, field_validator

from .base import BaseIntegration, IntegrationConfig, IntegrationError
from ..config import Settings
from ..schemas import JiraSprintStats, JiraTicket

ISSUE_FIELDS = [
    "summary", "status", "priority", "flagged",
    "customfield_10014",  # epic name
    "story_points", "customfield_10016",
]


# Jira-specific models
class JiraConfig(IntegrationConfig):
    """Jira integration configuration."""

    name: str = "jira"
    server_url: str = Field(..., description="Jira server URL")
    email: str
    api_token: str
    max_results: int = Field(default=50, ge=1, le=100)

    @field_validator('server_url')
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        if not v.startswith(('http://', 'https://')):
            raise ValueError('Server URL must start with http:// or https://')
        return v.rstrip('/')


class JiraActivity(BaseModel):
    """A report's current JIRA activity for the prep briefing."""

    assigned: List[JiraTicket] = Field(default_factory=list)
    completed: List[JiraTicket] = Field(default_factory=list)
    blocked: List[JiraTicket] = Field(default_factory=list)
    sprint_stats: Optional[JiraSprintStats] = None
    board_url: Optional[str] = None

    @property
    def has_tickets(self) -> bool:
        return bool(self.assigned or self.completed or self.blocked)


class JiraError(IntegrationError):
    """Jira-specific error."""
    pass


def _string_field(data: Optional[Dict[str, Any]], key: str) -> str:
    if not data:
        return ""
    value = data.get(key)
    return value if isinstance(value, str) else ""


def parse_issue(issue: Dict[str, Any]) -> JiraTicket:
    """Convert a raw search hit to a ticket"""
    ticket = JiraTicket(key=_string_field(issue, "key"))

    fields = issue.get("fields")
    if not isinstance(fields, dict):
        return ticket

    ticket.summary = _string_field(fields, "summary")
    status = fields.get("status")
    if isinstance(status, dict):
        ticket.status = _string_field(status, "name")

    # Flagged comes back as a list of flag options, truthy if non-empty
    flagged = fields.get("flagged")
    if isinstance(flagged, list):
        ticket.flagged = len(flagged) > 0
    elif isinstance(flagged, bool):
        ticket.flagged = flagged

    epic_name = _string_field(fields, "customfield_10014")
    if epic_name:
        ticket.epic_name = epic_name
    return ticket


def extract_story_points(issue: Dict[str, Any]) -> int:
    fields = issue.get("fields")
    if not isinstance(fields, dict):
        return 0
    for key in ("story_points", "customfield_10016"):
        value = fields.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            return int(value)
    return 0


class JiraClient(BaseIntegration[JiraConfig]):
    """
    Read-only Jira Cloud client used to enrich prep briefings.

    Authenticates with email + API token (basic auth).
    """

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["JiraClient"]:
        """Client for the configured instance, or None if JIRA is not set up"""
        if not settings.jira_configured:
            return None
        return cls(JiraConfig(
            server_url=settings.jira_base_url,
            email=settings.jira_email,
            api_token=settings.jira_api_token
        ))

    def _client_kwargs(self) -> Dict[str, Any]:
        return {
            "base_url": self.config.server_url,
            "auth": httpx.BasicAuth(self.config.email, self.config.api_token),
        }

    async def _request_json(self, method: str, path: str, **kwargs) -> Any:
        response = await self._make_request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise JiraError(
                f"jira: failed to parse response from {path}",
                self.config.name,
                response.status_code
            ) from e

    def board_url(self, account_id: str) -> str:
        return f"{self.config.server_url}/jira/people/{account_id}"

    async def resolve_account_id(self, display_name: str) -> str:
        """Find the account id of an active user by display name.

        An exact (case-insensitive) name match wins, otherwise the first
        active user returned by the search.
        """
        users = await self._request_json(
            "GET", "/rest/api/3/user/search", params={"query": display_name}
        )
        active = [u for u in users or [] if isinstance(u, dict) and u.get("active") is True]
        if not active:
            raise JiraError(f"jira: no active users found for {display_name!r}", self.config.name)

        for user in active:
            if _string_field(user, "displayName").lower() == display_name.lower():
                return _string_field(user, "accountId")
        return _string_field(active[0], "accountId")

    async def search(self, jql: str, fields: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        data = await self._request_json(
            "POST",
            "/rest/api/3/search/jql",
            json={
                "jql": jql,
                "fields": fields or ISSUE_FIELDS,
                "maxResults": self.config.max_results,
            }
        )
        issues = data.get("issues") if isinstance(data, dict) else None
        return [issue for issue in issues or [] if isinstance(issue, dict)]

    async def fetch_activity(self, account_id: str, since_date: str) -> JiraActivity:
        """Assigned, completed-since and blocked tickets plus sprint points.

        A failing query is logged and treated as returning no issues.
        """
        activity = JiraActivity(board_url=self.board_url(account_id))

        assigned_issues = await self._search_or_empty(
            f'assignee = "{account_id}" AND sprint in openSprints() ORDER BY status ASC, rank ASC'
        )
        committed = completed = 0
        for issue in assigned_issues:
            ticket = parse_issue(issue)
            points = extract_story_points(issue)
            committed += points
            if ticket.status.lower() == "done":
                completed += points
                continue
            if ticket.flagged:
                activity.blocked.append(ticket)
            activity.assigned.append(ticket)

        completed_issues = await self._search_or_empty(
            f'assignee = "{account_id}" AND status = Done AND resolved >= "{since_date}" '
            'ORDER BY resolved DESC'
        )
        activity.completed = [parse_issue(issue) for issue in completed_issues]

        if assigned_issues or completed_issues:
            activity.sprint_stats = JiraSprintStats(
                points_committed=committed,
                points_completed=completed,
                carryover=max(committed - completed, 0)
            )

        self._logger.info(
            "Got %d assigned, %d completed, %d blocked tickets",
            len(activity.assigned), len(activity.completed), len(activity.blocked)
        )
        return activity

    async def _search_or_empty(self, jql: str) -> List[Dict[str, Any]]:
        try:
            return await self.search(jql)
        except IntegrationError as e:
            self._logger.warning("JIRA search failed: %s", e)
            return []
