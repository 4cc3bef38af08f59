"""Rate limiting for polite crawling."""

import asyncio


class RateLimiter:
    """Fixed pause between consecutive page fetches.

    The orchestrator calls ``wait()`` after every processed item.  When the
    site answers with 429s the delay is doubled (capped), and successful
    items ease it back toward the configured value.
    """

    _MAX_DELAY = 30.0  # Upper bound for adaptive back-off

    def __init__(self, delay_seconds: float = 1.0):
        self.delay_seconds = delay_seconds
        self._original_delay = delay_seconds
        self.backoff_count: int = 0
        self.peak_delay: float = delay_seconds

    async def wait(self) -> None:
        """Sleep for the current delay; no-op when the delay is zero."""
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

    def back_off(self) -> None:
        """Double the delay between requests (capped at _MAX_DELAY).

        Called when an item failed with a rate-limit error so all
        subsequent requests slow down.
        """
        self.delay_seconds = min(self.delay_seconds * 2, self._MAX_DELAY)
        self.backoff_count += 1
        self.peak_delay = max(self.peak_delay, self.delay_seconds)

    @property
    def is_throttled(self) -> bool:
        """Whether the current delay exceeds the originally configured value."""
        return self.delay_seconds > self._original_delay

    def ease_off(self) -> None:
        """Halve the delay back toward the original configured value."""
        self.delay_seconds = max(self.delay_seconds / 2, self._original_delay)
