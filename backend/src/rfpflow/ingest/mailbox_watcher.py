"""Mailbox watcher: the long-lived background ingestion activity.

A daemon timer thread fires every poll interval (fixed rate, independent of
how long a cycle takes). On each tick:

- connection ready     -> run a poll cycle
- connection not ready -> reconnect, and on success poll immediately
- connect/poll failure -> log, stay disconnected, retry on the next tick

Fetched messages are dispatched one task per message into a bounded
ThreadPoolExecutor; each finished task pushes its IngestionResult onto a
single completion queue. The connection handle is only touched by the timer
thread, so connect and poll never run concurrently.
"""

import contextvars
import logging
import queue
import threading
import time
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from ..config import Settings
from ..errors import MailboxConnectionError
from ..infrastructure.ingest.imap_client import MailboxClient
from ..observability import generate_correlation_id, set_correlation_id
from ..observability.metrics import poll_cycles_total
from .pipeline import IngestionOutcome, IngestionPipeline, IngestionResult

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 300.0
DEFAULT_MAX_WORKERS = 8


class MailboxWatcher:
    """Timer-driven poller feeding the ingestion pipeline.

    Usage:
        watcher = MailboxWatcher.from_settings(settings, pipeline)
        if watcher.start():
            ...
        watcher.stop()
    """

    def __init__(
        self,
        client: Optional[MailboxClient],
        pipeline: IngestionPipeline,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """Initialize watcher.

        Args:
            client: Mailbox client, or None when ingestion is disabled
            pipeline: Per-message ingestion pipeline
            interval_seconds: Timer period between ticks
            max_workers: Upper bound on concurrently processed messages
        """
        self.client = client
        self.pipeline = pipeline
        self.interval_seconds = interval_seconds
        self.max_workers = max(1, max_workers)
        self.completed: "queue.Queue[IngestionResult]" = queue.Queue()

        self._executor: Optional[ThreadPoolExecutor] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @classmethod
    def from_settings(cls, settings: Settings, pipeline: IngestionPipeline) -> "MailboxWatcher":
        """Build a watcher from IMAP_* settings (disabled without credentials)."""
        client = None
        if settings.imap_enabled:
            client = MailboxClient(
                host=settings.IMAP_HOST,
                port=settings.IMAP_PORT,
                user=settings.IMAP_USER,
                password=settings.IMAP_PASSWORD,
                mailbox=settings.IMAP_MAILBOX,
            )
        return cls(
            client,
            pipeline,
            interval_seconds=settings.IMAP_POLL_INTERVAL_SECONDS,
            max_workers=settings.INGEST_MAX_WORKERS,
        )

    @property
    def enabled(self) -> bool:
        return self.client is not None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the background timer thread.

        Returns:
            False when ingestion is disabled (no credentials), True otherwise
        """
        if not self.enabled:
            logger.info("IMAP credentials not configured. Email polling disabled.")
            return False
        if self.running:
            return True

        self._stop_event.clear()
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="rfpflow-ingest",
        )
        self._thread = threading.Thread(target=self._run, name="rfpflow-mailbox-watcher", daemon=True)
        self._thread.start()
        logger.info(f"Mailbox watcher started (interval={self.interval_seconds}s, workers={self.max_workers})")
        return True

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the timer, wait for in-flight messages and close the connection."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self.client is not None:
            self.client.disconnect()
        logger.info("Mailbox watcher stopped")

    def _run(self) -> None:
        next_fire = time.monotonic()
        while not self._stop_event.is_set():
            self._log_completed()
            try:
                self.tick()
            except Exception:
                # The timer must survive anything a single tick throws
                logger.exception("Unexpected error in mailbox watcher tick")
            next_fire += self.interval_seconds
            if self._stop_event.wait(max(0.0, next_fire - time.monotonic())):
                break

    def tick(self) -> list[Future]:
        """One timer firing: poll when ready, otherwise reconnect then poll.

        Returns:
            Futures of the messages dispatched by this tick
        """
        set_correlation_id(generate_correlation_id("cycle"))

        if not self.client.is_ready():
            try:
                self.client.connect()
            except MailboxConnectionError as e:
                logger.error(f"IMAP error: {e}")
                return []

        return self.poll_cycle()

    def poll_cycle(self) -> list[Future]:
        """Fetch unseen messages and dispatch one task per message."""
        try:
            messages = self.client.fetch_unseen()
        except MailboxConnectionError as e:
            poll_cycles_total.labels(result="error").inc()
            logger.error(f"IMAP error: {e}")
            return []

        poll_cycles_total.labels(result="success").inc()
        futures = [self._dispatch(raw) for raw in messages]
        if futures:
            logger.info(f"Dispatched {len(futures)} message(s) for ingestion")
        return futures

    def _dispatch(self, raw_mime: bytes) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="rfpflow-ingest",
            )
        # Each task runs in its own copy of the cycle context
        ctx = contextvars.copy_context()
        future = self._executor.submit(ctx.run, self.pipeline.process, raw_mime)
        future.add_done_callback(self._on_done)
        return future

    def _on_done(self, future: Future) -> None:
        error = future.exception()
        if error is not None:
            # IngestionPipeline.process contains its own failures
            logger.error(f"Ingestion task crashed: {error}")
            self.completed.put(IngestionResult(IngestionOutcome.ERROR, error=str(error)))
            return
        self.completed.put(future.result())

    def drain_completed(self) -> list[IngestionResult]:
        """Take every result currently waiting in the completion queue."""
        results = []
        while True:
            try:
                results.append(self.completed.get_nowait())
            except queue.Empty:
                return results

    def _log_completed(self) -> None:
        results = self.drain_completed()
        if not results:
            return
        counts = Counter(r.outcome.value for r in results)
        summary = ", ".join(f"{outcome}={count}" for outcome, count in sorted(counts.items()))
        logger.info(f"Finished processing emails: {summary}")
