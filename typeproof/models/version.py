"""Pydantic models for document version snapshots."""

from pydantic import BaseModel, ConfigDict, Field


class VersionSnapshot(BaseModel):
    """Document content captured after a pause in editing."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    content: str
    timestamp_ms: int = Field(..., alias="timestamp")
    char_count: int = Field(..., alias="charCount")
    word_count: int = Field(..., alias="wordCount")


class ContentChangedRequest(BaseModel):
    """New editor content after an edit."""

    content: str
