"""Writing session API routes.

Every route is async so version snapshots are debounced on the server's
event loop.
"""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from typeproof.api.routes.drafts import get_draft_store
from typeproof.config import get_settings
from typeproof.models import (
    ContentChangedRequest,
    KeystrokeBatchRequest,
    KeystrokeBatchResponse,
    PasteAnnotationRequest,
    PasteEvent,
    PasteRequest,
)
from typeproof.services.certificate_service import default_metadata
from typeproof.services.draft_store import DraftStore
from typeproof.services.session_service import SessionRegistry, WritingSession

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _new_session() -> WritingSession:
    settings = get_settings()
    return WritingSession(
        pause_threshold_ms=settings.pause_threshold_ms,
        debounce_ms=settings.version_debounce_ms,
    )


session_registry = SessionRegistry(
    factory=_new_session,
    idle_timeout_ms=get_settings().session_timeout_minutes * 60_000,
)


def get_session_registry() -> SessionRegistry:
    return session_registry


async def get_session(
    session_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
) -> WritingSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return session


class SessionCreated(BaseModel):
    """Newly opened session."""

    session_id: UUID


class PasteTracked(BaseModel):
    """Id of a tracked paste."""

    paste_id: str


class CertificateRequest(BaseModel):
    """Options for exporting a certificate."""

    title: Optional[str] = None


@router.post("", response_model=SessionCreated, status_code=status.HTTP_201_CREATED)
async def create_session(
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionCreated:
    """Open a writing session for a new document."""
    session = registry.create()
    return SessionCreated(session_id=session.id)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    if not registry.close(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )


@router.post("/{session_id}/reset")
async def reset_session(session: WritingSession = Depends(get_session)) -> dict[str, Any]:
    """Clear all telemetry, e.g. when switching documents."""
    session.reset()
    return session.stats()


@router.post("/{session_id}/keystrokes", response_model=KeystrokeBatchResponse)
async def record_keystrokes(
    batch: KeystrokeBatchRequest,
    session: WritingSession = Depends(get_session),
) -> KeystrokeBatchResponse:
    """
    Record a batch of key presses and releases.

    Copy/paste shortcuts and unmatched releases are accepted but not
    recorded as events.
    """
    processed = 0
    for event in batch.events:
        if event.event_type == "keydown":
            recorded = session.key_down(
                event.key, event.modifiers, session.client_time(event.client_timestamp)
            )
        else:
            recorded = session.key_up(event.key, session.client_time(event.client_timestamp))
        if recorded is not None:
            processed += 1

    return KeystrokeBatchResponse(
        session_id=session.id,
        events_processed=processed,
        total_keystrokes=session.recorder.typing_stats.total_keystrokes,
    )


@router.post("/{session_id}/pastes", response_model=PasteTracked, status_code=status.HTTP_201_CREATED)
async def track_paste(
    request: PasteRequest,
    session: WritingSession = Depends(get_session),
) -> PasteTracked:
    paste_id = session.paste(request.text, request.caret_position, request.document_length)
    return PasteTracked(paste_id=paste_id)


@router.put("/{session_id}/pastes/{paste_id}/annotation", response_model=PasteEvent)
async def annotate_paste(
    paste_id: str,
    request: PasteAnnotationRequest,
    session: WritingSession = Depends(get_session),
) -> PasteEvent:
    """Justify a paste."""
    event = session.annotate_paste(paste_id, request.type, request.note)
    if event is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Paste {paste_id} not found",
        )
    return event


@router.delete("/{session_id}/pastes/{paste_id}/annotation", response_model=PasteEvent)
async def remove_paste_annotation(
    paste_id: str,
    session: WritingSession = Depends(get_session),
) -> PasteEvent:
    event = session.remove_paste_annotation(paste_id)
    if event is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Paste {paste_id} not found",
        )
    return event


@router.get("/{session_id}/pastes", response_model=list[PasteEvent])
async def list_pastes(session: WritingSession = Depends(get_session)) -> list[PasteEvent]:
    return session.pastes.events


@router.post("/{session_id}/content")
async def content_changed(
    request: ContentChangedRequest,
    session: WritingSession = Depends(get_session),
) -> dict[str, Any]:
    """New editor content; a version is saved once editing pauses."""
    session.content_changed(request.content)
    return {"version_pending": session.versions.has_pending, "version_count": session.versions.count}


@router.get("/{session_id}/stats")
async def session_stats(session: WritingSession = Depends(get_session)) -> dict[str, Any]:
    return session.stats()


@router.post("/{session_id}/certificate")
async def export_certificate(
    request: Optional[CertificateRequest] = None,
    session: WritingSession = Depends(get_session),
) -> JSONResponse:
    """Build a certificate from the session's content and telemetry."""
    if not session.content.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please write some content first!",
        )

    settings = get_settings()
    title = (request.title if request else None) or settings.certificate_title
    certificate = session.export_certificate(
        title=title, metadata=default_metadata(settings.editor_version)
    )
    return JSONResponse(
        content=certificate.to_dict(),
        headers={
            "Content-Disposition": f'attachment; filename="verified-document-{certificate.certificate_id}.json"'
        },
    )


@router.post("/{session_id}/drafts/{draft_id}/load")
async def load_draft(
    draft_id: str,
    session: WritingSession = Depends(get_session),
    store: DraftStore = Depends(get_draft_store),
) -> dict[str, Any]:
    """Switch the session to a saved draft."""
    draft = store.get(draft_id)
    if draft is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Draft {draft_id} not found",
        )
    session.load_draft(draft)
    return session.stats()


@router.post("/{session_id}/drafts/{draft_id}/save")
async def save_draft(
    draft_id: str,
    session: WritingSession = Depends(get_session),
    store: DraftStore = Depends(get_draft_store),
) -> dict[str, Any]:
    """Store the session's content and pastes into a draft."""
    draft = store.get(draft_id)
    if draft is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Draft {draft_id} not found",
        )
    if not store.save(session.to_draft(draft)):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save draft",
        )
    return {"saved": True, "draft_id": draft_id}
