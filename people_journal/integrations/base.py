from __future__ import annotations

from abc import ABC
from typing import Any, Dict, Generic, Optional, TypeVar
from datetime import datetime, timezone
import logging

import httpx
from pydantic import BaseModel, Field

ConfigType = TypeVar('ConfigType', bound='IntegrationConfig')


# Base configuration
class IntegrationConfig(BaseModel):
    """Base configuration for all integrations."""

    name: str
    enabled: bool = True
    timeout: float = Field(default=30.0, gt=0, le=300)


# Custom exceptions
class IntegrationError(Exception):
    """Base exception for integration errors."""

    def __init__(
        self,
        message: str,
        integration_name: str,
        status_code: Optional[int] = None,
        response_data: Optional[Any] = None
    ) -> None:
        super().__init__(message)
        self.integration_name = integration_name
        self.status_code = status_code
        self.response_data = response_data
        self.timestamp = datetime.now(timezone.utc)


class AuthenticationError(IntegrationError):
    """Authentication failed."""
    pass


class NetworkError(IntegrationError):
    """Network/connectivity error."""
    pass


class BaseIntegration(ABC, Generic[ConfigType]):
    """
    Base class for external service integrations.

    Owns a single httpx client per instance and turns transport failures and
    non-2xx responses into IntegrationError subclasses. Requests are never
    retried.
    """

    def __init__(self, config: ConfigType) -> None:
        self.config = config
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _get_default_headers(self) -> Dict[str, str]:
        """Get default headers for requests."""
        return {
            "User-Agent": f"People-Journal/{self.config.name}",
            "Accept": "application/json",
        }

    def _client_kwargs(self) -> Dict[str, Any]:
        """Extra httpx.AsyncClient arguments (auth, base_url)"""
        return {}

    async def _make_request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Make one HTTP request.

        Raises:
            AuthenticationError on 401/403, NetworkError on transport
            failure, IntegrationError on any other non-success status.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                headers=self._get_default_headers(),
                **self._client_kwargs()
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(
                f"Network error: {str(e)}",
                self.config.name
            ) from e

        if response.is_success:
            return response
        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Authentication failed",
                self.config.name,
                response.status_code,
                self._safe_json(response)
            )
        raise IntegrationError(
            f"{self.config.name}: {method} {url} returned {response.status_code}",
            self.config.name,
            response.status_code,
            self._safe_json(response)
        )

    @staticmethod
    def _safe_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text
