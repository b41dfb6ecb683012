"""API module."""

from fastapi import APIRouter

from typeproof.api.routes import drafts, sessions, verification

router = APIRouter(prefix="/api/v1")

router.include_router(sessions.router)
router.include_router(verification.router)
router.include_router(drafts.router)

__all__ = ["router"]
