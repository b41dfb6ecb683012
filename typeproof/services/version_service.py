"""Debounced version snapshots of document content."""

import asyncio
import logging
import threading
from typing import Any, Callable, Optional, Protocol

from typeproof.models import VersionSnapshot
from typeproof.utils import count_words, now_ms

logger = logging.getLogger(__name__)

VERSION_DEBOUNCE_MS = 2000


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    """Anything that can run a callback later and cancel it."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules timers on the running event loop.

    Must be used from inside a running loop; outside one ``call_later``
    raises ``RuntimeError``.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class ThreadingScheduler:
    """Schedules timers on daemon threads, for hosts without an event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class VersionSampler:
    """Snapshots content once editing has been idle for the debounce period.

    At most one timer is pending; every change cancels it and starts a new
    one, so a burst of edits produces a single snapshot of the last content.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], int] = now_ms,
        debounce_ms: int = VERSION_DEBOUNCE_MS,
    ):
        self._scheduler = scheduler or AsyncioScheduler()
        self._clock = clock
        self._debounce_ms = debounce_ms
        self._versions: list[VersionSnapshot] = []
        self._pending: Optional[TimerHandle] = None
        self._pending_content: Optional[str] = None

    @property
    def versions(self) -> list[VersionSnapshot]:
        return list(self._versions)

    @property
    def count(self) -> int:
        return len(self._versions)

    @property
    def latest(self) -> Optional[VersionSnapshot]:
        return self._versions[-1] if self._versions else None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def on_content_changed(self, content: str) -> None:
        """Restart the debounce timer for the new content."""
        self.cancel()
        self._pending_content = content
        self._pending = self._scheduler.call_later(self._debounce_ms / 1000, self._fire)

    def save_version(self, content: str, now_ms: Optional[int] = None) -> VersionSnapshot:
        """Append a snapshot of ``content`` immediately."""
        timestamp = self._clock() if now_ms is None else now_ms
        snapshot = VersionSnapshot(
            id=f"v_{timestamp}_{len(self._versions) + 1}",
            content=content,
            timestamp_ms=timestamp,
            char_count=len(content),
            word_count=count_words(content),
        )
        self._versions.append(snapshot)
        logger.debug("Saved version %s (%d words)", snapshot.id, snapshot.word_count)
        return snapshot

    def flush(self) -> Optional[VersionSnapshot]:
        """Commit the pending snapshot now instead of waiting for the timer."""
        if self._pending is None:
            return None
        content = self._pending_content
        self.cancel()
        return self._commit(content)

    def cancel(self) -> None:
        """Drop the pending timer, if any."""
        if self._pending is not None:
            self._pending.cancel()
        self._pending = None
        self._pending_content = None

    def reset(self) -> None:
        self.cancel()
        self._versions = []

    def _fire(self) -> None:
        content = self._pending_content
        self._pending = None
        self._pending_content = None
        self._commit(content)

    def _commit(self, content: Optional[str]) -> Optional[VersionSnapshot]:
        if content is None or not content.strip():
            return None
        return self.save_version(content)
