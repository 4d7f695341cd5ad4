from sqlalchemy import Column, String, Integer, Text, ForeignKey
from .base import BaseModel, JSONList


class Entry(BaseModel):
    """One recorded 1:1 meeting with a team member"""
    __tablename__ = "entries"

    member_id = Column(String, ForeignKey("team_members.id"), nullable=False)
    date = Column(String, nullable=False)  # ISO date or RFC3339

    summary = Column(Text, nullable=True)

    # 1-5 by convention, not enforced
    morale_score = Column(Integer, nullable=True)
    growth_score = Column(Integer, nullable=True)
    morale_rationale = Column(Text, nullable=True)
    growth_rationale = Column(Text, nullable=True)

    # Serialized lists
    tags = Column(JSONList, default=list)
    action_items_mine = Column(JSONList, default=list)  # [{"text", "completed"}]
    action_items_theirs = Column(JSONList, default=list)
    notable_quotes = Column(JSONList, default=list)
    blockers = Column(JSONList, default=list)
    wins = Column(JSONList, default=list)

    private_note = Column(Text, nullable=True)
    transcript = Column(Text, nullable=True)

    created_at = Column(String, nullable=True)
    updated_at = Column(String, nullable=True)


# Columns a partial update may touch
UPDATABLE_FIELDS = (
    "summary", "morale_score", "growth_score", "morale_rationale", "growth_rationale",
    "tags", "action_items_mine", "action_items_theirs", "notable_quotes",
    "blockers", "wins", "private_note", "transcript",
)

LIST_FIELDS = (
    "tags", "action_items_mine", "action_items_theirs",
    "notable_quotes", "blockers", "wins",
)
