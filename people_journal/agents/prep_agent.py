from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence
import logging

from .base_agent import BaseAgent
from ..integrations.jira_client import JiraActivity
from ..schemas import ActionItem, EntryRead, PrepActionItem, ScorePoint, TagCount
from ..services.cache_service import cache_key

logger = logging.getLogger(__name__)

NO_ENTRIES_BRIEFING = "No entries yet for this team member."
NO_API_KEY_BRIEFING = "No API key configured. Showing structured data only."
FAILED_BRIEFING = "Failed to generate AI briefing. Showing structured data only."


@dataclass
class PrepAggregates:
    """Briefing data derived from entries without the model"""

    open_items_mine: List[PrepActionItem] = field(default_factory=list)
    open_items_theirs: List[PrepActionItem] = field(default_factory=list)
    recent_tags: List[TagCount] = field(default_factory=list)
    unresolved_blockers: List[str] = field(default_factory=list)
    morale_scores: List[ScorePoint] = field(default_factory=list)
    growth_scores: List[ScorePoint] = field(default_factory=list)


def prep_cache_key(
    member_id: str,
    day: date,
    entries: Sequence[EntryRead],
    jira_account_id: Optional[str] = None
) -> str:
    """Fingerprint of the member, the calendar day and the entry set"""
    parts = [member_id, day.strftime("%Y-%m-%d")]
    for entry in entries:
        parts.append(entry.id)
        if entry.updated_at:
            parts.append(entry.updated_at)
    if jira_account_id:
        parts.append(jira_account_id)
    return cache_key(*parts)


def compute_aggregates(entries: Sequence[EntryRead]) -> PrepAggregates:
    aggregates = PrepAggregates()
    tag_counts: Counter = Counter()

    for entry in entries:
        for item in entry.action_items_mine:
            if not item.completed:
                aggregates.open_items_mine.append(PrepActionItem(text=item.text, date=entry.date))
        for item in entry.action_items_theirs:
            if not item.completed:
                aggregates.open_items_theirs.append(PrepActionItem(text=item.text, date=entry.date))
        tag_counts.update(entry.tags)
        aggregates.unresolved_blockers.extend(entry.blockers)
        if entry.morale_score is not None:
            aggregates.morale_scores.append(ScorePoint(date=entry.date, score=entry.morale_score))
        if entry.growth_score is not None:
            aggregates.growth_scores.append(ScorePoint(date=entry.date, score=entry.growth_score))

    # Stable sort: equal counts keep first-seen order
    aggregates.recent_tags = [
        TagCount(tag=tag, count=count)
        for tag, count in sorted(tag_counts.items(), key=lambda pair: -pair[1])
    ]
    return aggregates


def _checkbox(item: ActionItem) -> str:
    return "[x]" if item.completed else "[ ]"


class PrepAgent(BaseAgent):
    """Writes the pre-1:1 briefing from a member's recent entries"""

    def build_prompt(
        self,
        member_name: str,
        entries: Sequence[EntryRead],
        jira: Optional[JiraActivity] = None
    ) -> str:
        has_jira = jira is not None and jira.has_tickets
        lines: List[str] = []

        if has_jira:
            lines.append(
                f"You are helping an engineering manager prepare for a 1:1 meeting with {member_name}. "
                f"Below are the last {len(entries)} meeting entries (newest first). "
                "Generate a concise bullet-point briefing with these three sections:\n\n"
                "**Follow up on**\n"
                "**Watch for**\n"
                "**Bring up**\n\n"
                "Follow up on = open action items and unresolved topics to revisit.\n"
                "Watch for = morale/growth concerns or patterns worth probing.\n"
                "Bring up = topics grounded in their current JIRA activity worth discussing.\n\n"
                "When an action item from a previous 1:1 clearly maps to a JIRA ticket, reference the "
                "ticket status instead of treating it as a separate open item.\n\n"
                "Keep bullets short and scannable. No narrative prose.\n"
                "Use this exact format, section headers as **bold text** on their own line, bullets as - dashes:\n\n"
                "**Follow up on**\n- bullet one\n- bullet two\n\n**Watch for**\n- bullet one\n\n"
                "**Bring up**\n- bullet one\n"
            )
        else:
            lines.append(
                f"You are helping an engineering manager prepare for a 1:1 meeting with {member_name}. "
                f"Below are the last {len(entries)} meeting entries (newest first). "
                "Generate a concise bullet-point briefing with these two sections:\n\n"
                "**Follow up on**\n"
                "**Watch for**\n\n"
                "Follow up on = open action items and unresolved topics to revisit.\n"
                "Watch for = morale/growth concerns or patterns worth probing.\n\n"
                "Keep bullets short and scannable. No narrative prose.\n"
                "Use this exact format, section headers as **bold text** on their own line, bullets as - dashes:\n\n"
                "**Follow up on**\n- bullet one\n- bullet two\n\n**Watch for**\n- bullet one\n"
            )

        for index, entry in enumerate(entries, start=1):
            lines.append(f"--- Entry {index} ({entry.date}) ---")
            if entry.summary is not None:
                lines.append(f"Summary: {entry.summary}")
            if entry.morale_score is not None:
                morale = f"Morale: {entry.morale_score}/5"
                if entry.morale_rationale is not None:
                    morale += f" ({entry.morale_rationale})"
                lines.append(morale)
            if entry.growth_score is not None:
                growth = f"Growth: {entry.growth_score}/5"
                if entry.growth_rationale is not None:
                    growth += f" ({entry.growth_rationale})"
                lines.append(growth)
            if entry.tags:
                lines.append(f"Tags: {', '.join(entry.tags)}")
            if entry.action_items_mine:
                lines.append("My action items:")
                lines.extend(f"  {_checkbox(a)} {a.text}" for a in entry.action_items_mine)
            if entry.action_items_theirs:
                lines.append(f"{member_name}'s action items:")
                lines.extend(f"  {_checkbox(a)} {a.text}" for a in entry.action_items_theirs)
            if entry.blockers:
                lines.append(f"Blockers: {'; '.join(entry.blockers)}")
            if entry.wins:
                lines.append(f"Wins: {'; '.join(entry.wins)}")
            if entry.notable_quotes:
                lines.append(f"Notable quotes: {'; '.join(entry.notable_quotes)}")
            lines.append("")

        if has_jira:
            lines.extend(self._jira_section(jira))

        return "\n".join(lines) + "\n"

    def _jira_section(self, jira: JiraActivity) -> List[str]:
        lines = ["--- Current JIRA Activity ---"]

        if jira.assigned:
            lines.append("Assigned tickets (current sprint):")
            for ticket in jira.assigned:
                line = f"  - {ticket.key}: {ticket.summary} [{ticket.status}"
                if ticket.flagged:
                    line += ", flagged"
                line += "]"
                if ticket.epic_name:
                    line += f" (Epic: {ticket.epic_name})"
                lines.append(line)

        if jira.completed:
            lines.append("Recently completed:")
            for ticket in jira.completed:
                line = f"  - {ticket.key}: {ticket.summary}"
                if ticket.epic_name:
                    line += f" (Epic: {ticket.epic_name})"
                lines.append(line)

        if jira.blocked:
            lines.append("Blocked/flagged:")
            lines.extend(f"  - {t.key}: {t.summary}" for t in jira.blocked)

        if jira.sprint_stats is not None:
            stats = jira.sprint_stats
            lines.append(
                f"Sprint stats: {stats.points_completed}/{stats.points_committed} points completed"
            )

        lines.append("")
        return lines

    async def execute(
        self,
        member_name: str,
        entries: Sequence[EntryRead],
        jira: Optional[JiraActivity] = None
    ) -> str:
        prompt = self.build_prompt(member_name, entries, jira)
        text = await self._call_llm(prompt)
        return text.strip()
