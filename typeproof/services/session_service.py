"""Per-document writing sessions."""

import logging
from typing import Any, Callable, Iterable, Optional
from uuid import UUID, uuid4

from typeproof.models import Certificate, Draft, KeyEvent, PasteEvent, PasteType
from typeproof.services.certificate_service import DEFAULT_TITLE, CertificateBuilder
from typeproof.services.feature_extractor import feature_extractor
from typeproof.services.keystroke_service import PAUSE_THRESHOLD_MS, TelemetryRecorder
from typeproof.services.paste_service import PasteTracker
from typeproof.services.version_service import VERSION_DEBOUNCE_MS, Scheduler, VersionSampler
from typeproof.utils import count_words, now_ms

logger = logging.getLogger(__name__)


class WritingSession:
    """Owns the recorder, paste tracker and version sampler of one document.

    All telemetry for a document lives here, so several documents can be
    edited side by side without sharing state.

    The default scheduler needs a running asyncio loop, so content changes
    must be reported from async code. Synchronous hosts pass a
    ``ThreadingScheduler`` or any other ``Scheduler``.
    """

    def __init__(
        self,
        session_id: Optional[UUID] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], int] = now_ms,
        pause_threshold_ms: int = PAUSE_THRESHOLD_MS,
        debounce_ms: int = VERSION_DEBOUNCE_MS,
        builder: Optional[CertificateBuilder] = None,
    ):
        self.id = session_id or uuid4()
        self.content = ""
        self.recorder = TelemetryRecorder(clock=clock, pause_threshold_ms=pause_threshold_ms)
        self.pastes = PasteTracker(clock=clock)
        self.versions = VersionSampler(scheduler=scheduler, clock=clock, debounce_ms=debounce_ms)
        self._builder = builder or CertificateBuilder(clock=clock)
        self._clock = clock
        self._client_offset_ms: Optional[int] = None
        self.last_activity_ms = clock()

    def client_time(self, client_timestamp: Optional[int]) -> Optional[int]:
        """
        Map a client timestamp onto the session clock.

        The offset between the two clocks is fixed by the first timestamped
        event, so client intervals are kept and no recorded time falls
        before the session start.
        """
        if client_timestamp is None:
            return None
        if self._client_offset_ms is None:
            self._client_offset_ms = self._clock() - client_timestamp
        return max(client_timestamp + self._client_offset_ms, self.recorder.session_start_ms)

    def touch(self) -> None:
        self.last_activity_ms = self._clock()

    def key_down(self, key: str, modifiers: Iterable = (), now_ms: Optional[int] = None) -> Optional[KeyEvent]:
        return self.recorder.on_key_press(key, modifiers, now_ms)

    def key_up(self, key: str, now_ms: Optional[int] = None) -> Optional[KeyEvent]:
        return self.recorder.on_key_release(key, now_ms)

    def paste(
        self,
        text: str,
        caret_position: int,
        document_length: int,
        now_ms: Optional[int] = None,
    ) -> str:
        """Track a paste; a paste also marks the session as copy/pasted."""
        self.recorder.note_paste()
        return self.pastes.track_paste(text, caret_position, document_length, now_ms)

    def annotate_paste(self, paste_id: str, type: PasteType, note: str = "") -> Optional[PasteEvent]:
        self.pastes.annotate(paste_id, type, note)
        return self.pastes.get(paste_id)

    def remove_paste_annotation(self, paste_id: str) -> Optional[PasteEvent]:
        self.pastes.remove_annotation(paste_id)
        return self.pastes.get(paste_id)

    def content_changed(self, content: str) -> None:
        self.content = content
        self.versions.on_content_changed(content)

    def stats(self) -> dict[str, Any]:
        """Live statistics for the editor's side panel."""
        key_events = self.recorder.key_events
        return {
            "sessionId": str(self.id),
            "wordCount": count_words(self.content),
            "charCount": len(self.content),
            "versionCount": self.versions.count,
            "typingStats": self.recorder.typing_stats.model_dump(by_alias=True),
            "pasteStats": self.pastes.stats().model_dump(by_alias=True),
            "rhythm": feature_extractor.extract_rhythm(key_events).model_dump(by_alias=True),
        }

    def export_certificate(
        self,
        title: str = DEFAULT_TITLE,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Certificate:
        """Build a certificate from everything recorded so far."""
        return self._builder.build(
            self.content,
            self.recorder.typing_stats,
            self.recorder.key_events,
            self.versions.versions,
            self.pastes.events,
            title=title,
            metadata=metadata,
        )

    def load_draft(self, draft: Draft) -> None:
        """Switch this session to a saved draft."""
        self.reset()
        self.content = draft.content
        self.pastes.load(draft.paste_events)

    def to_draft(self, draft: Draft, updated_at: Optional[int] = None) -> Draft:
        """Copy of ``draft`` carrying the session's content and pastes."""
        changes: dict[str, Any] = {"content": self.content, "paste_events": self.pastes.events}
        if updated_at is not None:
            changes["updated_at"] = updated_at
        return draft.model_copy(update=changes)

    def reset(self) -> None:
        """Start over, e.g. when switching documents."""
        self.versions.reset()
        self.pastes.clear()
        self.recorder.reset()
        self.content = ""
        self._client_offset_ms = None

    def close(self) -> None:
        """Teardown: no timer may outlive the session."""
        self.versions.cancel()


class SessionRegistry:
    """Live writing sessions keyed by id.

    Sessions idle for longer than ``idle_timeout_ms`` are closed the next
    time the registry is used. ``None`` keeps sessions until closed.
    """

    def __init__(
        self,
        factory: Callable[[], WritingSession] = WritingSession,
        idle_timeout_ms: Optional[int] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self._factory = factory
        self._idle_timeout_ms = idle_timeout_ms
        self._clock = clock
        self._sessions: dict[UUID, WritingSession] = {}

    def create(self) -> WritingSession:
        self.evict_idle()
        session = self._factory()
        session.touch()
        self._sessions[session.id] = session
        logger.info("Opened writing session %s", session.id)
        return session

    def get(self, session_id: UUID) -> Optional[WritingSession]:
        self.evict_idle()
        session = self._sessions.get(session_id)
        if session is not None:
            session.touch()
        return session

    def evict_idle(self) -> int:
        """Close sessions with no activity within the timeout."""
        if self._idle_timeout_ms is None:
            return 0
        cutoff = self._clock() - self._idle_timeout_ms
        idle = [sid for sid, s in self._sessions.items() if s.last_activity_ms < cutoff]
        for session_id in idle:
            logger.info("Session %s idle since before %d, closing", session_id, cutoff)
            self.close(session_id)
        return len(idle)

    def close(self, session_id: UUID) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info("Closed writing session %s", session_id)
        return True

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)

    def __len__(self) -> int:
        return len(self._sessions)
