"""Typing-rhythm features computed from recorded key events."""

from typing import Sequence

import numpy as np

from typeproof.models import KeyEvent, KeyPhase, TypingRhythm

# Gaps between presses shorter than this belong to a burst
BURST_GAP_MS = 50


class FeatureExtractor:
    """Summarize hold times and inter-press gaps."""

    def extract_rhythm(self, events: Sequence[KeyEvent]) -> TypingRhythm:
        """
        Summarize a session's key events.

        Hold times come from release durations; gaps are the intervals
        between consecutive presses. Values are rounded to 2 decimals so
        the summary is stable across platforms.
        """
        press_times = np.array(
            [e.timestamp_ms for e in events if e.phase == KeyPhase.PRESS],
            dtype=np.float64,
        )
        holds = np.array(
            [
                e.duration_ms
                for e in events
                if e.phase == KeyPhase.RELEASE and e.duration_ms is not None
            ],
            dtype=np.float64,
        )
        gaps = np.diff(press_times) if len(press_times) > 1 else np.array([], dtype=np.float64)

        return TypingRhythm(
            key_press_count=int(len(press_times)),
            avg_hold_ms=self._rounded(np.mean(holds)) if len(holds) > 0 else 0.0,
            std_hold_ms=self._rounded(np.std(holds)) if len(holds) > 0 else 0.0,
            avg_gap_ms=self._rounded(np.mean(gaps)) if len(gaps) > 0 else 0.0,
            std_gap_ms=self._rounded(np.std(gaps)) if len(gaps) > 0 else 0.0,
            max_gap_ms=self._rounded(np.max(gaps)) if len(gaps) > 0 else 0.0,
            burst_count=self._compute_bursts(gaps),
        )

    def _compute_bursts(self, gaps: np.ndarray) -> int:
        """Compute number of burst sequences (consecutive fast typing)."""
        if len(gaps) == 0:
            return 0

        fast_mask = gaps < BURST_GAP_MS
        burst_count = 0
        in_burst = False

        for is_fast in fast_mask:
            if is_fast and not in_burst:
                burst_count += 1
                in_burst = True
            elif not is_fast:
                in_burst = False

        return burst_count

    @staticmethod
    def _rounded(value: np.floating) -> float:
        return round(float(value), 2)


# Singleton instance
feature_extractor = FeatureExtractor()
