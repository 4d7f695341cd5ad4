from sqlalchemy import Column, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator
from datetime import datetime, timezone
from typing import Any, List, Optional
import json
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def utc_now_iso() -> str:
    """Current UTC time as an RFC3339 string with microseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class JSONList(TypeDecorator):
    """A list stored as serialized JSON text.

    ``None`` is stored as ``"[]"``. Text that does not decode to a JSON array
    reads back as an empty list.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[List[Any]], dialect) -> str:
        if value is None:
            return "[]"
        return json.dumps(list(value))

    def process_result_value(self, value: Optional[str], dialect) -> List[Any]:
        if not value:
            return []
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Discarding malformed list column value: %r", value[:80])
            return []
        if not isinstance(decoded, list):
            return []
        return decoded


class BaseModel(Base):
    __abstract__ = True

    id = Column(String, primary_key=True)
