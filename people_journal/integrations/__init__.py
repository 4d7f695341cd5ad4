"""
External service integrations for the People Journal.

- Jira (Atlassian): optional activity lookup for prep briefings
"""

from .base import BaseIntegration, IntegrationError, IntegrationConfig
from .jira_client import JiraActivity, JiraClient, JiraConfig, JiraError

__all__ = [
    "BaseIntegration",
    "IntegrationError",
    "IntegrationConfig",
    "JiraActivity",
    "JiraClient",
    "JiraConfig",
    "JiraError",
]
