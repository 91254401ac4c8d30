"""
Provider base interfaces and error types.

Every external capability (weather, place search, AI, news) is wrapped by a
Provider subclass so that:
- Each client exposes the same enabled/metadata surface
- Live calls return FetchResult variants instead of ad hoc shapes
- Failures are raised as ProviderError subclasses and caught at one boundary
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict
from dataclasses import dataclass
import logging

import aiohttp

from cultural_bot.config import ProviderConfig


@dataclass
class ProviderMetadata:
    """Metadata about a provider."""
    name: str
    version: str
    description: str
    capabilities: List[str]
    rate_limit: Optional[int] = None  # requests per day


class Provider(ABC):
    """Base provider interface.

    A provider holds its immutable ProviderConfig, an optional shared
    aiohttp session and the request timeout for its calls.
    """

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.timeout = timeout
        self.session = session

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _require_enabled(self) -> None:
        if not self.enabled:
            raise ProviderNotAvailableError(
                f"Provider {self.name} is not configured",
                provider_name=self.name,
            )

    @abstractmethod
    async def get_metadata(self) -> ProviderMetadata:
        """Get provider metadata."""
        pass


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, provider_name: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(message)
        self.provider_name = provider_name
        self.details = details or {}


class ProviderNotAvailableError(ProviderError):
    """Raised when a provider is disabled or has no usable key."""
    pass


class ProviderHTTPError(ProviderError):
    """Raised when a provider answers with a non-success status."""

    def __init__(self, message: str, status: int, provider_name: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(message, provider_name=provider_name, details=details)
        self.status = status


class ProviderTimeoutError(ProviderError):
    """Raised when provider request times out."""
    pass


class ProviderResponseError(ProviderError):
    """Raised when a provider payload does not have the expected shape."""
    pass
