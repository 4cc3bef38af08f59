"""Run controller that drives the download pipeline over a work queue.

A run is an async generator of events.  It validates its input, expands
course URLs into section URLs, de-duplicates the queue, then processes one
item at a time: fetch, extract, sanitize, segment, render, write.  Between
items the loop honours pause/resume/stop requests and the rate limiter, and
trips a circuit breaker after too many consecutive failures.

The run state lives in a single cell guarded by a ``threading.Lock`` so the
control methods can be called from other tasks or threads (a signal handler,
a UI thread) while the loop reads it.
"""

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel

from academy_scraper.config import RunConfig
from academy_scraper.converter import Renderer
from academy_scraper.discovery import CourseDiscoverer
from academy_scraper.errors import CircuitOpenError, RateLimitedError, ScraperError
from academy_scraper.extractor import ContentExtractor
from academy_scraper.fetcher import BaseFetcher, HttpFetcher, PlaywrightFetcher
from academy_scraper.output import DocumentWriter
from academy_scraper.pipeline import build_document
from academy_scraper.utils.rate_limiter import RateLimiter
from academy_scraper.utils.url_utils import is_course_url, normalize_url
from academy_scraper.utils.validation import validate_run

logger = logging.getLogger(__name__)


class RunStatus(str, Enum):
    """Lifecycle of a run."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPING = "stopping"
    STOPPED = "stopped"


class ItemState(str, Enum):
    """Resolution state of a queued URL."""

    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    DONE = "done"
    FAILED = "failed"


class ItemStatus(str, Enum):
    """Status reported in progress events."""

    DOWNLOADING = "downloading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class WorkItem:
    """A URL in the queue."""

    url: str
    state: ItemState = ItemState.PENDING
    filename: str = ""
    error: str = ""


@dataclass
class RunState:
    """Mutable state of the current run. Only touched under the orchestrator lock."""

    status: RunStatus = RunStatus.IDLE
    queue: list[WorkItem] = field(default_factory=list)
    processed_count: int = 0
    failed_count: int = 0
    consecutive_failures: int = 0

    @property
    def remaining(self) -> int:
        return sum(1 for item in self.queue if item.state == ItemState.PENDING)


class ProgressEvent(BaseModel):
    """Per-item progress."""

    current: int
    total: int
    url: str
    filename: str = ""
    status: ItemStatus
    error: str | None = None


class CircuitOpenEvent(BaseModel):
    """Emitted once when consecutive failures halt the run."""

    message: str
    consecutive_failures: int


class RunCompletedEvent(BaseModel):
    """Terminal event; exactly one per run."""

    total_processed: int
    total_errors: int
    remaining: int


RunEvent = ProgressEvent | CircuitOpenEvent | RunCompletedEvent


class StatusSnapshot(BaseModel):
    """Read-only view of the run state."""

    status: RunStatus
    total: int
    processed: int
    failed: int
    consecutive_failures: int
    remaining: int


class Orchestrator:
    """Coordinates the download pipeline for one run at a time."""

    def __init__(self, config: RunConfig, fetcher: BaseFetcher | None = None):
        self.config = config
        self._fetcher = fetcher
        self._lock = threading.Lock()
        self._state = RunState()
        self.rate_limiter = RateLimiter(config.rate_limit.delay_seconds)
        self.extractor = ContentExtractor(config.extractor)
        self.renderer = Renderer(config.render)
        self.writer = DocumentWriter(config.output_dir)

    # --- control ---

    def _transition(self, allowed: tuple[RunStatus, ...], target: RunStatus) -> bool:
        with self._lock:
            if self._state.status not in allowed:
                return False
            self._state.status = target
            return True

    def pause(self) -> bool:
        """Hold the loop before its next item. True if the run was running."""
        applied = self._transition((RunStatus.RUNNING,), RunStatus.PAUSED)
        if applied:
            logger.info("Run paused")
        return applied

    def resume(self) -> bool:
        """Continue a paused run. True if the run was paused."""
        applied = self._transition((RunStatus.PAUSED,), RunStatus.RUNNING)
        if applied:
            logger.info("Run resumed")
        return applied

    def stop(self) -> bool:
        """Ask the loop to end after the current item.

        An in-flight fetch is not interrupted; no further item is started.
        """
        applied = self._transition((RunStatus.RUNNING, RunStatus.PAUSED), RunStatus.STOPPING)
        if applied:
            logger.info("Stop requested")
        return applied

    def status(self) -> StatusSnapshot:
        with self._lock:
            state = self._state
            return StatusSnapshot(
                status=state.status,
                total=len(state.queue),
                processed=state.processed_count,
                failed=state.failed_count,
                consecutive_failures=state.consecutive_failures,
                remaining=state.remaining,
            )

    # --- run ---

    async def run(self, urls: Iterable[str]) -> AsyncIterator[RunEvent]:
        """Process ``urls`` and yield progress events.

        Raises:
            RuntimeError: a run is already active on this orchestrator.
            ValidationError: the credential, URLs or output directory are
                invalid; raised before any network activity.
        """
        urls = list(urls)
        with self._lock:
            if self._state.status != RunStatus.IDLE:
                raise RuntimeError(f"Cannot start a run while {self._state.status.value}")
            self._state = RunState(status=RunStatus.RUNNING)

        try:
            validate_run(urls, self.config)
            self.rate_limiter = RateLimiter(self.config.rate_limit.delay_seconds)
            self.writer = DocumentWriter(self.config.output_dir)
            fetcher = self._fetcher or self._create_fetcher()

            async with fetcher:
                logger.info("Starting run with %d input URLs", len(urls))
                async for event in self._enqueue(urls, fetcher):
                    yield event

                self.config.output_dir.mkdir(parents=True, exist_ok=True)

                async for event in self._process_queue(fetcher):
                    yield event

            with self._lock:
                completed = RunCompletedEvent(
                    total_processed=self._state.processed_count,
                    total_errors=self._state.failed_count,
                    remaining=self._state.remaining,
                )
            logger.info(
                "Run finished: %d processed, %d errors, %d remaining",
                completed.total_processed,
                completed.total_errors,
                completed.remaining,
            )
            if self.rate_limiter.backoff_count:
                logger.info(
                    "Rate limited %d times, peak delay %.1fs",
                    self.rate_limiter.backoff_count,
                    self.rate_limiter.peak_delay,
                )
            yield completed
        finally:
            with self._lock:
                self._state = RunState()

    async def _enqueue(self, urls: list[str], fetcher: BaseFetcher) -> AsyncIterator[ProgressEvent]:
        """Expand course URLs and fill the queue without duplicates."""
        seen: set[str] = set()
        queue: list[WorkItem] = []

        def add(url: str) -> None:
            normalized = normalize_url(url)
            if normalized in seen:
                return
            seen.add(normalized)
            queue.append(WorkItem(url=url))

        for url in urls:
            if not is_course_url(url, self.config.discovery.course_path_pattern):
                add(url)
                continue

            discoverer = CourseDiscoverer(
                url, self.config.discovery, fetcher, self.config.credential
            )
            try:
                async for discovered in discoverer.discover():
                    logger.debug("Course lists %s (%s)", discovered.url, discovered.title or "untitled")
                    add(discovered.url)
            except ScraperError as e:
                logger.warning("Could not expand course %s: %s", url, e.message)
                with self._lock:
                    self._state.failed_count += 1
                yield ProgressEvent(
                    current=0,
                    total=0,
                    url=url,
                    status=ItemStatus.ERROR,
                    error=e.message,
                )

        with self._lock:
            self._state.queue = queue
        logger.info("Queued %d URLs", len(queue))

    async def _wait_while_paused(self) -> RunStatus:
        while True:
            with self._lock:
                status = self._state.status
            if status != RunStatus.PAUSED:
                return status
            await asyncio.sleep(self.config.rate_limit.pause_poll_seconds)

    async def _process_queue(self, fetcher: BaseFetcher) -> AsyncIterator[RunEvent]:
        with self._lock:
            queue = list(self._state.queue)
        total = len(queue)
        threshold = self.config.rate_limit.failure_threshold

        for index, item in enumerate(queue):
            status = await self._wait_while_paused()
            if status != RunStatus.RUNNING:
                break

            current = index + 1
            with self._lock:
                item.state = ItemState.IN_FLIGHT

            yield ProgressEvent(
                current=current, total=total, url=item.url, status=ItemStatus.DOWNLOADING
            )

            try:
                raw_html = await fetcher.fetch_html(item.url, self.config.credential)
                document = build_document(raw_html, item.url, self.extractor)
                item.filename = self.writer.claim(document.title)
                yield ProgressEvent(
                    current=current,
                    total=total,
                    url=item.url,
                    filename=item.filename,
                    status=ItemStatus.PROCESSING,
                )
                outputs = self.renderer.render(document)
                await self.writer.write(item.filename, outputs)
            except Exception as e:
                message = self._describe_error(item.url, e)
                if isinstance(e, RateLimitedError):
                    self.rate_limiter.back_off()
                    logger.warning(
                        "Rate limited, delay between items raised to %.1fs",
                        self.rate_limiter.delay_seconds,
                    )
                with self._lock:
                    item.state = ItemState.FAILED
                    item.error = message
                    self._state.failed_count += 1
                    self._state.consecutive_failures += 1
                    failures = self._state.consecutive_failures
                yield ProgressEvent(
                    current=current,
                    total=total,
                    url=item.url,
                    filename=item.filename,
                    status=ItemStatus.ERROR,
                    error=message,
                )
                if failures >= threshold:
                    circuit = CircuitOpenError(failures)
                    logger.error(circuit.message)
                    with self._lock:
                        self._state.status = RunStatus.STOPPED
                    yield CircuitOpenEvent(
                        message=circuit.message, consecutive_failures=failures
                    )
                    return
            else:
                if self.rate_limiter.is_throttled:
                    self.rate_limiter.ease_off()
                    logger.debug("Delay eased to %.1fs", self.rate_limiter.delay_seconds)
                with self._lock:
                    item.state = ItemState.DONE
                    self._state.processed_count += 1
                    self._state.consecutive_failures = 0
                yield ProgressEvent(
                    current=current,
                    total=total,
                    url=item.url,
                    filename=item.filename,
                    status=ItemStatus.COMPLETED,
                )

            if current < total:
                await self.rate_limiter.wait()

        with self._lock:
            if self._state.status == RunStatus.STOPPING:
                self._state.status = RunStatus.STOPPED
                logger.info("Run stopped")

    @staticmethod
    def _describe_error(url: str, error: Exception) -> str:
        """Message for an error event; unexpected errors are logged with traceback."""
        if isinstance(error, ScraperError):
            logger.warning("Error processing %s: %s", url, error.message)
            return error.message
        if isinstance(error, OSError):
            logger.warning("Error processing %s: %s", url, error)
            return str(error)
        logger.exception("Unexpected error processing %s", url)
        return str(error) or type(error).__name__

    def _create_fetcher(self) -> BaseFetcher:
        """Create the appropriate fetcher."""
        if self.config.fetcher.use_js:
            return PlaywrightFetcher(self.config.fetcher)
        else:
            return HttpFetcher(self.config.fetcher)
