"""Request and response models for the command surface."""
from typing import Annotated, Any, List, Optional

from pydantic import (
    BaseModel, BeforeValidator, ConfigDict, Field, ValidationError,
    ValidatorFunctionWrapHandler, field_validator, model_validator,
)

from .utils.logging import get_logger

logger = get_logger(__name__)


def _none_to_empty_list(value: Any) -> Any:
    return [] if value is None else value


def _action_item_texts(value: Any) -> Any:
    if value is None:
        return []
    if not isinstance(value, list):
        return value
    return [item.get("text", "") if isinstance(item, dict) else item for item in value]


StrList = Annotated[List[str], BeforeValidator(_none_to_empty_list)]
ActionItemTexts = Annotated[List[str], BeforeValidator(_action_item_texts)]


# Shared
class ActionItem(BaseModel):
    text: str
    completed: bool = False

    @model_validator(mode="before")
    @classmethod
    def _from_plain_text(cls, value: Any) -> Any:
        # Extraction output lists action items as bare strings
        if isinstance(value, str):
            return {"text": value, "completed": False}
        return value


ActionItemList = Annotated[List[ActionItem], BeforeValidator(_none_to_empty_list)]


class DeleteResult(BaseModel):
    deleted: bool


# Team members
class TeamMemberCreate(BaseModel):
    name: str = ""
    role: str = ""
    color: str = ""


# Only fields present in the payload are applied
class TeamMemberUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    color: Optional[str] = None
    jira_account_id: Optional[str] = None


class TeamMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    role: str
    color: str
    jira_account_id: Optional[str] = None
    prep_notes: Optional[str] = None


class PrepNotesUpdate(BaseModel):
    prep_notes: str = ""


class PrepNotesResult(BaseModel):
    prep_notes: str


# Entries
class EntryFields(BaseModel):
    summary: Optional[str] = None
    morale_score: Optional[int] = Field(default=None, ge=1, le=5)
    growth_score: Optional[int] = Field(default=None, ge=1, le=5)
    morale_rationale: Optional[str] = None
    growth_rationale: Optional[str] = None
    tags: StrList = Field(default_factory=list)
    action_items_mine: ActionItemList = Field(default_factory=list)
    action_items_theirs: ActionItemList = Field(default_factory=list)
    notable_quotes: StrList = Field(default_factory=list)
    blockers: StrList = Field(default_factory=list)
    wins: StrList = Field(default_factory=list)
    private_note: Optional[str] = None
    transcript: Optional[str] = None


class EntryCreate(EntryFields):
    id: Optional[str] = None
    member_id: str
    date: Optional[str] = None


class EntryUpdate(EntryFields):
    """Partial update: callers send only the fields to change.

    Explicit ``null`` clears a scalar field and empties a list field.
    """


class EntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    member_id: str
    date: str
    summary: Optional[str] = None
    morale_score: Optional[int] = None
    growth_score: Optional[int] = None
    morale_rationale: Optional[str] = None
    growth_rationale: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    action_items_mine: List[ActionItem] = Field(default_factory=list)
    action_items_theirs: List[ActionItem] = Field(default_factory=list)
    notable_quotes: List[str] = Field(default_factory=list)
    blockers: List[str] = Field(default_factory=list)
    wins: List[str] = Field(default_factory=list)
    private_note: Optional[str] = None
    transcript: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator(
        "tags", "action_items_mine", "action_items_theirs",
        "notable_quotes", "blockers", "wins",
        mode="wrap"
    )
    @classmethod
    def _unreadable_list_as_empty(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        # A stored list whose items have the wrong shape reads back empty
        try:
            return handler(value)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable stored list: {e.error_count()} invalid item(s)")
            return []


# Extraction
class ExtractRequest(BaseModel):
    transcript: str = ""
    member_name: str = ""


class ExtractionResult(BaseModel):
    """Structured insight the model returns for a transcript"""

    summary: Optional[str] = None
    tags: StrList = Field(default_factory=list)
    action_items_mine: ActionItemTexts = Field(default_factory=list)
    action_items_theirs: ActionItemTexts = Field(default_factory=list)
    morale_score: Optional[int] = None
    morale_rationale: Optional[str] = None
    growth_score: Optional[int] = None
    growth_rationale: Optional[str] = None
    notable_quotes: StrList = Field(default_factory=list)
    blockers: StrList = Field(default_factory=list)
    wins: StrList = Field(default_factory=list)


# Prep briefing
class PrepRequest(BaseModel):
    member_id: str = ""
    force: bool = False


class PrepActionItem(BaseModel):
    text: str
    date: str


class TagCount(BaseModel):
    tag: str
    count: int


class ScorePoint(BaseModel):
    date: str
    score: int


class JiraTicket(BaseModel):
    key: str
    summary: str = ""
    status: str = ""
    flagged: bool = False
    epic_name: Optional[str] = None


class JiraSprintStats(BaseModel):
    points_committed: int = 0
    points_completed: int = 0
    carryover: int = 0


class PrepResponse(BaseModel):
    briefing: str
    open_items_mine: List[PrepActionItem] = Field(default_factory=list)
    open_items_theirs: List[PrepActionItem] = Field(default_factory=list)
    recent_tags: List[TagCount] = Field(default_factory=list)
    unresolved_blockers: List[str] = Field(default_factory=list)
    morale_scores: List[ScorePoint] = Field(default_factory=list)
    growth_scores: List[ScorePoint] = Field(default_factory=list)
    jira_assigned: Optional[List[JiraTicket]] = None
    jira_completed: Optional[List[JiraTicket]] = None
    jira_blocked: Optional[List[JiraTicket]] = None
    jira_sprint_stats: Optional[JiraSprintStats] = None
    jira_board_url: Optional[str] = None


# Config
class AppConfig(BaseModel):
    ai_configured: bool
    ai_provider: Optional[str] = None
    jira_configured: bool
    jira_base_url: Optional[str] = None
