"""Manual URL list discovery."""

from collections.abc import AsyncIterator
from pathlib import Path

from academy_scraper.config import DiscoveryConfig
from academy_scraper.discovery.base import BaseDiscoverer, DiscoveredURL


class ManualDiscoverer(BaseDiscoverer):
    """Discover URLs from a manually provided list, one per line."""

    def __init__(self, urls_file: Path, config: DiscoveryConfig | None = None):
        super().__init__(config or DiscoveryConfig())
        self.urls_file = Path(urls_file)

    async def discover(self) -> AsyncIterator[DiscoveredURL]:
        """Yield URLs from the configured file, skipping blanks and comments."""
        if not self.urls_file.exists():
            raise FileNotFoundError(f"URLs file not found: {self.urls_file}")

        with open(self.urls_file, "r", encoding="utf-8") as f:
            for line in f:
                url = line.strip()

                if not url or url.startswith("#"):
                    continue

                yield DiscoveredURL(url=url)
