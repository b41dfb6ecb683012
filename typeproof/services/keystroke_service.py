"""Keystroke telemetry recording."""

import math
from typing import Callable, Iterable, Optional, Sequence

from typeproof.models import KeyEvent, KeyPhase, TypingStats
from typeproof.utils import now_ms

PAUSE_THRESHOLD_MS = 2000
CHARS_PER_WORD = 5
MIN_KEYSTROKES_FOR_WPM = 5
BACKSPACE_KEY = "Backspace"

_SHORTCUT_MODIFIERS = frozenset({"ctrl", "meta"})


def compute_wpm(total_keystrokes: int, total_time_spent_sec: int) -> int:
    """
    Approximate words per minute, assuming 5 keystrokes = 1 word.

    Returns 0 below the keystroke floor or when no whole second has elapsed.
    """
    if total_keystrokes < MIN_KEYSTROKES_FOR_WPM:
        return 0
    minutes = total_time_spent_sec / 60
    if minutes <= 0:
        return 0
    words = total_keystrokes / CHARS_PER_WORD
    # round half up
    return math.floor(words / minutes + 0.5)


def compute_typing_stats(
    events: Sequence[KeyEvent],
    session_start_ms: int,
    copy_paste_detected: bool = False,
    pause_threshold_ms: int = PAUSE_THRESHOLD_MS,
) -> TypingStats:
    """
    Derive typing statistics from recorded key events.

    Only presses count as keystrokes. A pause is a gap longer than
    ``pause_threshold_ms`` between consecutive presses.
    """
    presses = [e for e in events if e.phase == KeyPhase.PRESS]

    pause_count = 0
    previous: Optional[int] = None
    for event in presses:
        if previous is not None and event.timestamp_ms - previous > pause_threshold_ms:
            pause_count += 1
        previous = event.timestamp_ms

    total_keystrokes = len(presses)
    total_time_spent = (presses[-1].timestamp_ms - session_start_ms) // 1000 if presses else 0

    return TypingStats(
        total_keystrokes=total_keystrokes,
        average_typing_speed=compute_wpm(total_keystrokes, total_time_spent),
        total_time_spent_sec=total_time_spent,
        pause_count=pause_count,
        backspace_count=sum(1 for e in presses if e.key == BACKSPACE_KEY),
        copy_paste_detected=copy_paste_detected,
    )


def _modifier_names(modifiers: Iterable) -> set[str]:
    return {str(getattr(m, "value", m)).lower() for m in modifiers}


class TelemetryRecorder:
    """Records key presses and releases for one writing session.

    Stores only the raw key events, the session start, the sticky copy/paste
    flag and the presses still waiting for a release. Statistics are derived
    on demand.
    """

    def __init__(
        self,
        clock: Callable[[], int] = now_ms,
        pause_threshold_ms: int = PAUSE_THRESHOLD_MS,
    ):
        self._clock = clock
        self._pause_threshold_ms = pause_threshold_ms
        self._events: list[KeyEvent] = []
        self._keydown_times: dict[str, int] = {}
        self._copy_paste_detected = False
        self._session_start = clock()

    @property
    def session_start_ms(self) -> int:
        return self._session_start

    @property
    def key_events(self) -> list[KeyEvent]:
        return list(self._events)

    @property
    def copy_paste_detected(self) -> bool:
        return self._copy_paste_detected

    @property
    def typing_stats(self) -> TypingStats:
        return compute_typing_stats(
            self._events,
            self._session_start,
            self._copy_paste_detected,
            self._pause_threshold_ms,
        )

    def on_key_press(
        self,
        key: str,
        modifiers: Iterable = (),
        now_ms: Optional[int] = None,
    ) -> Optional[KeyEvent]:
        """
        Record a key press.

        Paste shortcuts only set the copy/paste flag and copy shortcuts are
        ignored; neither counts as a keystroke. Returns the recorded event.
        """
        now = self._clock() if now_ms is None else now_ms

        if _modifier_names(modifiers) & _SHORTCUT_MODIFIERS and key in ("v", "c"):
            if key == "v":
                self._copy_paste_detected = True
            return None

        event = KeyEvent(key=key, timestamp_ms=now, phase=KeyPhase.PRESS)
        self._keydown_times[key] = now
        self._events.append(event)
        return event

    def on_key_release(self, key: str, now_ms: Optional[int] = None) -> Optional[KeyEvent]:
        """Record a release carrying the hold time of the matching press, if any."""
        now = self._clock() if now_ms is None else now_ms

        keydown_time = self._keydown_times.pop(key, None)
        if keydown_time is None:
            return None

        event = KeyEvent(
            key=key,
            timestamp_ms=now,
            phase=KeyPhase.RELEASE,
            duration_ms=now - keydown_time,
        )
        self._events.append(event)
        return event

    def note_paste(self) -> None:
        """A paste reached the document through any route."""
        self._copy_paste_detected = True

    def reset(self, now_ms: Optional[int] = None) -> None:
        """Clear all telemetry and restart the session clock."""
        self._events = []
        self._keydown_times.clear()
        self._copy_paste_detected = False
        self._session_start = self._clock() if now_ms is None else now_ms
