"""Pydantic models for persisted drafts."""

from pydantic import BaseModel, ConfigDict, Field

from typeproof.models.paste import PasteEvent


class Draft(BaseModel):
    """A saved, in-progress document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = "Untitled Document"
    content: str = ""
    paste_events: list[PasteEvent] = Field(default_factory=list, alias="pasteEvents")
    created_at: int = Field(..., alias="createdAt")
    updated_at: int = Field(..., alias="updatedAt")
