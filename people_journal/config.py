from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional
import os


PLACEHOLDER_SECRET = "your-key-here"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )
    # Application
    app_name: str = "People Journal"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3001)

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./people-journal.db")
    database_echo: bool = Field(default=False)
    seed_default_members: bool = Field(default=True)

    # Anthropic (preferred when configured)
    anthropic_api_key: Optional[str] = Field(default=None)
    anthropic_model: str = Field(default="claude-sonnet-4-5-20250929")
    anthropic_version: str = Field(default="2023-06-01")
    anthropic_base_url: str = Field(default="https://api.anthropic.com")

    # OpenAI
    openai_api_key: Optional[str] = Field(default=None)
    openai_model: str = Field(default="gpt-4o")
    openai_api_base: Optional[str] = Field(default=None)

    max_tokens: int = Field(default=1000)
    llm_timeout: Optional[float] = Field(default=None)  # seconds, None waits forever

    # Prep briefing
    prep_entry_limit: int = Field(default=5, ge=1)

    # JIRA
    jira_base_url: Optional[str] = Field(default=None)
    jira_email: Optional[str] = Field(default=None)
    jira_api_token: Optional[str] = Field(default=None)

    # CORS
    allowed_origins: List[str] = Field(
        default=["http://localhost:5173", "tauri://localhost"]
    )

    # Logging
    log_level: str = Field(default="INFO")

    @field_validator(
        "anthropic_api_key", "openai_api_key",
        "jira_base_url", "jira_email", "jira_api_token",
        mode="before"
    )
    @classmethod
    def _blank_to_none(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        if not value or value == PLACEHOLDER_SECRET:
            return None
        return value

    @property
    def jira_configured(self) -> bool:
        return bool(self.jira_base_url and self.jira_email and self.jira_api_token)

    @property
    def ai_provider_name(self) -> Optional[str]:
        """Name of the LLM vendor that will be used, or None if no key is set"""
        if self.anthropic_api_key:
            return "anthropic"
        if self.openai_api_key:
            return "openai"
        return None


# Global settings instance
settings = Settings()


# Environment-specific configurations
class DevelopmentConfig(Settings):
    debug: bool = True
    log_level: str = "DEBUG"


class ProductionConfig(Settings):
    debug: bool = False
    database_echo: bool = False
    log_level: str = "WARNING"


class TestingConfig(Settings):
    database_url: str = "sqlite+aiosqlite:///./test-people-journal.db"
    seed_default_members: bool = False
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None


def get_settings() -> Settings:
    """Factory function to get settings based on environment"""
    env = os.getenv("ENVIRONMENT", "development").lower()

    if env == "production":
        return ProductionConfig()
    elif env == "testing":
        return TestingConfig()
    else:
        return DevelopmentConfig()
