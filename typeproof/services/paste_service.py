"""Paste event tracking and justification."""

import logging
from typing import Callable, Iterable, Optional

from typeproof.models import PasteEvent, PasteStats, PasteType
from typeproof.utils import generate_id, now_ms

logger = logging.getLogger(__name__)


def summarize_pastes(events: Iterable[PasteEvent]) -> PasteStats:
    """
    Aggregate paste counts.

    ``by_type`` only counts justified events; unjustified pastes have no
    reason to break down by.
    """
    events = list(events)
    total = len(events)
    justified = sum(1 for e in events if e.justified)
    unjustified = total - justified

    by_type: dict[str, int] = {}
    for event in events:
        if event.justified:
            by_type[event.type.value] = by_type.get(event.type.value, 0) + 1

    return PasteStats(
        total=total,
        justified=justified,
        unjustified=unjustified,
        by_type=by_type,
        total_pasted_chars=sum(e.length for e in events),
        has_unjustified=unjustified > 0,
    )


class PasteTracker:
    """Keeps every paste of a session and its justification state."""

    def __init__(self, clock: Callable[[], int] = now_ms):
        self._clock = clock
        self._events: list[PasteEvent] = []

    @property
    def events(self) -> list[PasteEvent]:
        """Paste events in display order (oldest first)."""
        return sorted(self._events, key=lambda e: e.timestamp_ms)

    def track_paste(
        self,
        text: str,
        caret_position: int,
        document_length_before_paste: int,
        now_ms: Optional[int] = None,
    ) -> str:
        """Record a paste and return its id. Empty pastes are recorded too."""
        timestamp = self._clock() if now_ms is None else now_ms
        event = PasteEvent(
            id=generate_id("paste", timestamp),
            text=text,
            position=caret_position,
            length=len(text),
            timestamp_ms=timestamp,
        )
        self._events.append(event)
        logger.debug(
            "Tracked paste %s: %d chars at %d (document length %d)",
            event.id,
            event.length,
            caret_position,
            document_length_before_paste,
        )
        return event.id

    def get(self, paste_id: str) -> Optional[PasteEvent]:
        for event in self._events:
            if event.id == paste_id:
                return event
        return None

    def annotate(self, paste_id: str, type: PasteType, note: str = "") -> None:
        """
        Justify a paste with a reason and optional note.

        Unknown ids are ignored. Annotating with ``UNKNOWN`` clears the
        justification instead.
        """
        paste_type = PasteType(type)
        if paste_type == PasteType.UNKNOWN:
            self.remove_annotation(paste_id)
            return
        self._update(paste_id, type=paste_type, justified=True, note=note)

    def remove_annotation(self, paste_id: str) -> None:
        """Return a paste to the unjustified state. Unknown ids are ignored."""
        self._update(paste_id, type=PasteType.UNKNOWN, justified=False, note="")

    def stats(self) -> PasteStats:
        return summarize_pastes(self._events)

    def load(self, events: Iterable[PasteEvent]) -> None:
        """Replace the tracked events, e.g. when a draft is reopened."""
        self._events = list(events)

    def clear(self) -> None:
        self._events = []

    def _update(self, paste_id: str, **changes) -> None:
        for index, event in enumerate(self._events):
            if event.id == paste_id:
                self._events[index] = event.model_copy(update=changes)
                return
