"""Pydantic models for keystroke data."""

from enum import Enum
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class KeyPhase(str, Enum):
    """Physical key transition, serialized the way editors report it."""

    PRESS = "keydown"
    RELEASE = "keyup"


class Modifier(str, Enum):
    """Modifier keys held during a key press."""

    CTRL = "ctrl"
    META = "meta"
    SHIFT = "shift"
    ALT = "alt"


class KeyEvent(BaseModel):
    """Single recorded key transition.

    ``duration_ms`` is only set on releases and is the hold time of the key.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key: str
    timestamp_ms: int = Field(..., alias="timestamp")
    phase: KeyPhase = Field(..., alias="type")
    duration_ms: Optional[int] = Field(None, alias="duration")


class TypingStats(BaseModel):
    """Aggregate typing statistics derived from a session's key events."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total_keystrokes: int = Field(0, alias="totalKeystrokes")
    average_typing_speed: int = Field(0, alias="averageTypingSpeed", description="Approximate WPM")
    total_time_spent_sec: int = Field(0, alias="totalTimeSpent")
    pause_count: int = Field(0, alias="pauseCount")
    backspace_count: int = Field(0, alias="backspaceCount")
    copy_paste_detected: bool = Field(False, alias="copyPasteDetected")


class TypingRhythm(BaseModel):
    """Timing summary of key holds and gaps between presses."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key_press_count: int = Field(0, alias="keyPressCount")
    avg_hold_ms: float = Field(0.0, alias="avgHoldMs")
    std_hold_ms: float = Field(0.0, alias="stdHoldMs")
    avg_gap_ms: float = Field(0.0, alias="avgGapMs")
    std_gap_ms: float = Field(0.0, alias="stdGapMs")
    max_gap_ms: float = Field(0.0, alias="maxGapMs")
    burst_count: int = Field(0, alias="burstCount")


class KeystrokeEvent(BaseModel):
    """Single keystroke event from client."""

    event_type: Literal["keydown", "keyup"]
    key: str = Field(..., min_length=1)
    modifiers: list[Modifier] = Field(default_factory=list)
    client_timestamp: Optional[int] = Field(None, ge=0, description="Epoch milliseconds; server time if absent")


class KeystrokeBatchRequest(BaseModel):
    """Batch of keystroke events from client."""

    events: list[KeystrokeEvent] = Field(..., min_length=1, max_length=100)


class KeystrokeBatchResponse(BaseModel):
    """Response after processing keystroke batch."""

    session_id: UUID
    events_processed: int
    total_keystrokes: int
