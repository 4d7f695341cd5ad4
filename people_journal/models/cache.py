from sqlalchemy import Column, String, Text
from .base import Base


class CacheRecord(Base):
    """Memoized result of an AI call, keyed by a fingerprint of its inputs"""
    __tablename__ = "cache"

    key = Column(String, primary_key=True)
    category = Column(String, primary_key=True)  # "extract" or "prep"
    value = Column(Text, nullable=False)
    created_at = Column(String, nullable=False)
