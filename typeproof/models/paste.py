"""Pydantic models for paste events and their justification."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PasteType(str, Enum):
    """Reason attached to a paste. ``UNKNOWN`` is the unjustified state."""

    UNKNOWN = "unknown"
    QUOTE = "quote"
    CITATION = "citation"
    LINK = "link"
    OWN_WORK = "own-work"
    DATA = "data"


class PasteEvent(BaseModel):
    """One paste action captured from the editor."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    text: str
    position: int
    length: int
    timestamp_ms: int = Field(..., alias="timestamp")
    type: PasteType = PasteType.UNKNOWN
    justified: bool = False
    note: str = ""


class PasteStats(BaseModel):
    """Aggregate paste counts for the UI and the certificate summary."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total: int = 0
    justified: int = 0
    unjustified: int = 0
    by_type: dict[str, int] = Field(default_factory=dict, alias="byType")
    total_pasted_chars: int = Field(0, alias="totalPastedChars")
    has_unjustified: bool = Field(False, alias="hasUnjustified")


class PasteRequest(BaseModel):
    """Paste captured by the editor."""

    text: str
    caret_position: int = Field(0, ge=0)
    document_length: int = Field(0, ge=0)


class PasteAnnotationRequest(BaseModel):
    """Justification for a paste."""

    type: PasteType
    note: str = ""
