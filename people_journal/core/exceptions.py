"""Error taxonomy for the journal.

Every failure that reaches a caller of the command surface is one of these.
The API layer maps them to HTTP status codes via ``status_code``.
"""
from typing import Any, Optional


class JournalError(Exception):
    """Base exception for journal errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(JournalError):
    """Unknown team member or entry id."""

    status_code = 404

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.identifier = identifier


class ConstraintViolationError(JournalError):
    """A write violated a database constraint (e.g. missing team member)."""

    status_code = 409


class InvalidRequestError(JournalError):
    """Required command input is missing or empty."""

    status_code = 400


class LLMError(JournalError):
    """Base class for failures talking to the LLM vendor."""

    status_code = 502


class LLMConfigurationError(LLMError):
    """No LLM credential is configured."""

    status_code = 500


class LLMTransportError(LLMError):
    """The request never produced an HTTP response."""


class LLMResponseError(LLMError):
    """The vendor answered with a non-success status or an unusable body."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[Any] = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ExtractionParseError(LLMError):
    """Model output is not valid JSON for the extraction schema."""
