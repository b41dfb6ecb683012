"""Draft storage API routes."""

from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from typeproof.config import get_settings
from typeproof.models import Draft, PasteEvent
from typeproof.services.draft_store import DraftStore, JsonFileDraftStore, create_new_draft

router = APIRouter(prefix="/drafts", tags=["drafts"])


@lru_cache
def get_draft_store() -> DraftStore:
    """Draft store configured by ``TYPEPROOF_DRAFTS_PATH``."""
    return JsonFileDraftStore(get_settings().drafts_path)


class DraftUpdate(BaseModel):
    """Fields of a draft the editor may change."""

    title: Optional[str] = None
    content: Optional[str] = None
    paste_events: Optional[list[PasteEvent]] = Field(None, alias="pasteEvents")


def _not_found(draft_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Draft {draft_id} not found",
    )


def _save_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Failed to save draft",
    )


@router.get("", response_model=list[Draft])
async def list_drafts(store: DraftStore = Depends(get_draft_store)) -> list[Draft]:
    return store.list_all()


@router.post("", response_model=Draft, status_code=status.HTTP_201_CREATED)
async def create_draft(store: DraftStore = Depends(get_draft_store)) -> Draft:
    """Create and store an empty draft."""
    draft = create_new_draft()
    if not store.save(draft):
        raise _save_failed()
    return store.get(draft.id) or draft


@router.get("/{draft_id}", response_model=Draft)
async def get_draft(draft_id: str, store: DraftStore = Depends(get_draft_store)) -> Draft:
    draft = store.get(draft_id)
    if draft is None:
        raise _not_found(draft_id)
    return draft


@router.put("/{draft_id}", response_model=Draft)
async def update_draft(
    draft_id: str,
    update: DraftUpdate,
    store: DraftStore = Depends(get_draft_store),
) -> Draft:
    draft = store.get(draft_id)
    if draft is None:
        raise _not_found(draft_id)

    changes = update.model_dump(exclude_none=True)
    if update.paste_events is not None:
        changes["paste_events"] = update.paste_events
    if not store.save(draft.model_copy(update=changes)):
        raise _save_failed()
    return store.get(draft_id) or draft


@router.delete("/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_draft(draft_id: str, store: DraftStore = Depends(get_draft_store)) -> None:
    if store.get(draft_id) is None:
        raise _not_found(draft_id)
    if not store.delete(draft_id):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete draft",
        )
