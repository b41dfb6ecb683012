"""Draft persistence backed by a JSON file."""

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from typeproof.models import Draft
from typeproof.utils import generate_id, now_ms

logger = logging.getLogger(__name__)

_DRAFTS = TypeAdapter(list[Draft])


class DraftStore(Protocol):
    """Key-value store for drafts."""

    def save(self, draft: Draft) -> bool: ...

    def list_all(self) -> list[Draft]: ...

    def get(self, draft_id: str) -> Optional[Draft]: ...

    def delete(self, draft_id: str) -> bool: ...


def create_new_draft(clock: Callable[[], int] = now_ms) -> Draft:
    """Empty draft with a fresh id."""
    now = clock()
    return Draft(
        id=generate_id("draft", now),
        title="Untitled Document",
        content="",
        paste_events=[],
        created_at=now,
        updated_at=now,
    )


class JsonFileDraftStore:
    """All drafts in one JSON file, plus the id of the current draft.

    Failures are logged and reported through return values.
    """

    def __init__(self, path: str | Path, clock: Callable[[], int] = now_ms):
        self._path = Path(path)
        self._clock = clock

    def save(self, draft: Draft) -> bool:
        try:
            state = self._read()
            drafts = state["drafts"]
            saved = draft.model_copy(update={"updated_at": self._clock()})

            for index, existing in enumerate(drafts):
                if existing.id == draft.id:
                    drafts[index] = saved
                    break
            else:
                drafts.append(saved)

            state["current"] = draft.id
            self._write(state)
            return True
        except (OSError, ValueError):
            logger.exception("Failed to save draft %s", draft.id)
            return False

    def list_all(self) -> list[Draft]:
        try:
            return self._read()["drafts"]
        except (OSError, ValueError):
            logger.exception("Failed to get drafts")
            return []

    def get(self, draft_id: str) -> Optional[Draft]:
        for draft in self.list_all():
            if draft.id == draft_id:
                return draft
        return None

    def delete(self, draft_id: str) -> bool:
        try:
            state = self._read()
            state["drafts"] = [d for d in state["drafts"] if d.id != draft_id]
            if state["current"] == draft_id:
                state["current"] = None
            self._write(state)
            return True
        except (OSError, ValueError):
            logger.exception("Failed to delete draft %s", draft_id)
            return False

    def current_draft_id(self) -> Optional[str]:
        try:
            return self._read()["current"]
        except (OSError, ValueError):
            logger.exception("Failed to read current draft id")
            return None

    def clear(self) -> bool:
        try:
            self._path.unlink(missing_ok=True)
            return True
        except OSError:
            logger.exception("Failed to clear drafts")
            return False

    def _read(self) -> dict:
        if not self._path.exists():
            return {"drafts": [], "current": None}
        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"Draft file {self._path} is corrupt")
        try:
            drafts = _DRAFTS.validate_python(raw.get("drafts", []))
        except ValidationError as exc:
            raise ValueError(f"Draft file {self._path} is corrupt") from exc
        return {"drafts": drafts, "current": raw.get("current")}

    def _write(self, state: dict) -> None:
        payload = {
            "drafts": [d.model_dump(by_alias=True, mode="json") for d in state["drafts"]],
            "current": state["current"],
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self._path)
