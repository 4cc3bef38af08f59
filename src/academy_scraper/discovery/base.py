"""Base class for URL discovery."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from pydantic import BaseModel

from academy_scraper.config import DiscoveryConfig


class DiscoveredURL(BaseModel):
    """A discovered section URL."""

    url: str
    title: str | None = None


class BaseDiscoverer(ABC):
    """Abstract base class for URL discovery strategies."""

    def __init__(self, config: DiscoveryConfig):
        self.config = config

    @abstractmethod
    def discover(self) -> AsyncIterator[DiscoveredURL]:
        """Yield discovered URLs."""
        ...
