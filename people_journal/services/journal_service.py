"""
Journal Service - the command surface the UI calls

Each command holds the store lock only for its own database work. LLM and
JIRA calls always run with the lock released.
"""
from datetime import date
from typing import Callable, List, Optional

from pydantic import ValidationError

from ..agents.extraction_agent import ExtractionAgent
from ..agents.prep_agent import (
    FAILED_BRIEFING, NO_API_KEY_BRIEFING, NO_ENTRIES_BRIEFING,
    PrepAgent, compute_aggregates, prep_cache_key,
)
from ..config import Settings
from ..core.exceptions import InvalidRequestError, LLMConfigurationError, LLMError
from ..database import JournalStore
from ..integrations.base import IntegrationError
from ..integrations.jira_client import JiraActivity, JiraClient
from ..schemas import (
    AppConfig, DeleteResult, EntryCreate, EntryRead, EntryUpdate,
    ExtractionResult, PrepNotesResult, PrepResponse, TeamMemberCreate,
    TeamMemberRead, TeamMemberUpdate,
)
from .cache_service import EXTRACT_CATEGORY, PREP_CATEGORY, CacheService, cache_key
from .entry_service import EntryService
from .llm_provider import LLMProvider, get_llm_provider
from .team_service import TeamService
from ..utils.logging import get_logger

logger = get_logger(__name__)

LLMFactory = Callable[[Settings], LLMProvider]
JiraFactory = Callable[[Settings], Optional[JiraClient]]


class JournalService:
    """All journal commands over one shared store"""

    def __init__(
        self,
        store: JournalStore,
        settings: Settings,
        llm_factory: LLMFactory = get_llm_provider,
        jira_factory: JiraFactory = JiraClient.from_settings,
        clock: Callable[[], date] = date.today
    ):
        self.store = store
        self.settings = settings
        self.llm_factory = llm_factory
        self.jira_factory = jira_factory
        self.clock = clock

    # Team members

    async def list_team_members(self) -> List[TeamMemberRead]:
        async with self.store.session() as db:
            members = await TeamService(db).list_members()
            return [TeamMemberRead.model_validate(m) for m in members]

    async def create_team_member(self, data: TeamMemberCreate) -> TeamMemberRead:
        async with self.store.session() as db:
            member = await TeamService(db).create_member(data)
            return TeamMemberRead.model_validate(member)

    async def update_team_member(self, member_id: str, data: TeamMemberUpdate) -> TeamMemberRead:
        async with self.store.session() as db:
            member = await TeamService(db).update_member(member_id, data)
            return TeamMemberRead.model_validate(member)

    async def delete_team_member(self, member_id: str) -> DeleteResult:
        async with self.store.session() as db:
            await TeamService(db).delete_member(member_id)
        return DeleteResult(deleted=True)

    async def update_prep_notes(self, member_id: str, prep_notes: str) -> PrepNotesResult:
        async with self.store.session() as db:
            await TeamService(db).update_prep_notes(member_id, prep_notes)
        return PrepNotesResult(prep_notes=prep_notes)

    # Entries

    async def list_entries(self, member_id: Optional[str] = None) -> List[EntryRead]:
        async with self.store.session() as db:
            entries = await EntryService(db).list_entries(member_id)
            return [EntryRead.model_validate(e) for e in entries]

    async def get_entry(self, entry_id: str) -> EntryRead:
        async with self.store.session() as db:
            entry = await EntryService(db).require_entry(entry_id)
            return EntryRead.model_validate(entry)

    async def create_entry(self, data: EntryCreate) -> EntryRead:
        async with self.store.session() as db:
            entry = await EntryService(db).create_entry(data)
            return EntryRead.model_validate(entry)

    async def update_entry(self, entry_id: str, data: EntryUpdate) -> EntryRead:
        async with self.store.session() as db:
            entry = await EntryService(db).update_entry(entry_id, data)
            return EntryRead.model_validate(entry)

    async def delete_entry(self, entry_id: str) -> DeleteResult:
        async with self.store.session() as db:
            await EntryService(db).delete_entry(entry_id)
        return DeleteResult(deleted=True)

    # AI

    async def extract_transcript(self, transcript: str, member_name: str) -> ExtractionResult:
        """Structured insight for a transcript, served from cache when possible"""
        if not transcript or not member_name:
            raise InvalidRequestError("transcript and member_name are required")

        key = cache_key(member_name, transcript)
        async with self.store.session() as db:
            cached = await CacheService(db).get_json(key, EXTRACT_CATEGORY)
        if cached is not None:
            try:
                logger.info("Extraction cache hit")
                return ExtractionResult.model_validate(cached)
            except ValidationError as e:
                logger.warning(f"Ignoring cached extraction that no longer validates: {e}")

        agent = ExtractionAgent(self.llm_factory(self.settings))
        result = await agent.execute(transcript=transcript, member_name=member_name)

        async with self.store.session() as db:
            await CacheService(db).set(key, EXTRACT_CATEGORY, result.model_dump_json())
        return result

    async def fetch_prep(self, member_id: str, force: bool = False) -> PrepResponse:
        """Briefing for the next 1:1 with ``member_id``.

        Aggregates are always returned. The narrative falls back to a fixed
        message when no LLM is configured or the call fails, and such
        degraded responses are not cached.
        """
        if not member_id:
            raise InvalidRequestError("member_id is required")

        async with self.store.session() as db:
            member = await TeamService(db).require_member(member_id)
            member_name = member.name
            jira_account_id = member.jira_account_id
            rows = await EntryService(db).list_entries(member_id, limit=self.settings.prep_entry_limit)
            entries = [EntryRead.model_validate(e) for e in rows]

        if not entries:
            return PrepResponse(briefing=NO_ENTRIES_BRIEFING)

        jira_client = self.jira_factory(self.settings)
        if jira_client is not None and not jira_account_id:
            jira_account_id = await self._resolve_jira_account(jira_client, member_id, member_name)

        key = prep_cache_key(member_id, self.clock(), entries, jira_account_id)
        if not force:
            async with self.store.session() as db:
                cached = await CacheService(db).get_json(key, PREP_CATEGORY)
            if cached is not None:
                try:
                    response = PrepResponse.model_validate(cached)
                    logger.info(f"Prep cache hit for {member_id}")
                    return response
                except ValidationError as e:
                    logger.warning(f"Ignoring cached prep that no longer validates: {e}")

        aggregates = compute_aggregates(entries)
        response = PrepResponse(
            briefing="",
            open_items_mine=aggregates.open_items_mine,
            open_items_theirs=aggregates.open_items_theirs,
            recent_tags=aggregates.recent_tags,
            unresolved_blockers=aggregates.unresolved_blockers,
            morale_scores=aggregates.morale_scores,
            growth_scores=aggregates.growth_scores
        )

        # Oldest of the loaded entries bounds the "recently completed" query
        since_date = entries[-1].date[:10]
        jira = None
        if jira_client is not None and jira_account_id:
            jira = await self._fetch_jira_activity(jira_client, member_id, jira_account_id, since_date)
        if jira is not None and jira.has_tickets:
            response.jira_assigned = jira.assigned
            response.jira_completed = jira.completed
            response.jira_blocked = jira.blocked
            response.jira_sprint_stats = jira.sprint_stats
            response.jira_board_url = jira.board_url

        degraded = False
        try:
            agent = PrepAgent(self.llm_factory(self.settings))
            response.briefing = await agent.execute(member_name, entries, jira)
        except LLMConfigurationError:
            response.briefing = NO_API_KEY_BRIEFING
            degraded = True
        except LLMError as e:
            logger.error(f"Prep briefing failed for {member_id}: {e}")
            response.briefing = FAILED_BRIEFING
            degraded = True

        if not degraded:
            async with self.store.session() as db:
                await CacheService(db).set(key, PREP_CATEGORY, response.model_dump_json())
        return response

    async def _resolve_jira_account(
        self,
        client: JiraClient,
        member_id: str,
        member_name: str
    ) -> Optional[str]:
        """Look up and persist the member's JIRA account id, or None on failure"""
        try:
            account_id = await client.resolve_account_id(member_name)
        except IntegrationError as e:
            logger.warning(f"JIRA account lookup failed for {member_id}: {e}")
            return None

        async with self.store.session() as db:
            await TeamService(db).set_jira_account_id(member_id, account_id)
        logger.info(f"Resolved JIRA account for {member_id}")
        return account_id

    async def _fetch_jira_activity(
        self,
        client: JiraClient,
        member_id: str,
        account_id: str,
        since_date: str
    ) -> Optional[JiraActivity]:
        """JIRA activity for the member, or None when unavailable"""
        try:
            return await client.fetch_activity(account_id, since_date)
        except IntegrationError as e:
            logger.warning(f"JIRA enrichment failed for {member_id}: {e}")
            return None

    # Config

    def get_config(self) -> AppConfig:
        return AppConfig(
            ai_configured=self.settings.ai_provider_name is not None,
            ai_provider=self.settings.ai_provider_name,
            jira_configured=self.settings.jira_configured,
            jira_base_url=self.settings.jira_base_url if self.settings.jira_configured else None
        )
