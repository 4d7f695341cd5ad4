from sqlalchemy import Column, String, Text
from .base import BaseModel


class TeamMember(BaseModel):
    """A direct report whose 1:1s are tracked"""
    __tablename__ = "team_members"

    name = Column(String, nullable=False)
    role = Column(String, nullable=False)
    color = Column(String, nullable=False)  # hex, e.g. "#E07A5F"

    # Added after the first release, see database.ADDITIVE_COLUMNS
    jira_account_id = Column(String, nullable=True)
    prep_notes = Column(Text, nullable=True)
