from datetime import date
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from people_journal.config import Settings
from people_journal.core.exceptions import LLMConfigurationError
from people_journal.database import JournalStore
from people_journal.services.journal_service import JournalService

TODAY = date(2025, 3, 14)


class FakeLLM:
    """Stands in for an LLMProvider; ``complete`` is an AsyncMock"""

    name = "fake"

    def __init__(self, reply: str = ""):
        self.complete = AsyncMock(return_value=reply)


def no_jira(settings):
    return None


def no_llm(settings):
    raise LLMConfigurationError("No API key configured")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep exported settings (ANTHROPIC_BASE_URL, JIRA_*, ...) out of tests"""
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'journal.db'}",
        seed_default_members=False,
        anthropic_api_key=None,
        openai_api_key=None,
        jira_base_url=None,
        jira_email=None,
        jira_api_token=None,
    )


@pytest_asyncio.fixture
async def store(settings):
    store = JournalStore(settings.database_url)
    await store.init(seed_defaults=False)
    yield store
    await store.dispose()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def journal(store, settings, fake_llm):
    return JournalService(
        store,
        settings,
        llm_factory=lambda s: fake_llm,
        jira_factory=no_jira,
        clock=lambda: TODAY
    )
