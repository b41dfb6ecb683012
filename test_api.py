"""
Tests for the HTTP API: sessions, certificate export, verification and drafts.
"""

import json
import time

import pytest
from fastapi.testclient import TestClient

from typeproof.api.routes.drafts import get_draft_store
from typeproof.errors import CertificateError
from typeproof.main import create_app
from typeproof.services.draft_store import JsonFileDraftStore

API = "/api/v1"


@pytest.fixture
def client(tmp_path):
    app = create_app()
    app.dependency_overrides[get_draft_store] = lambda: JsonFileDraftStore(tmp_path / "drafts.json")
    with TestClient(app) as client:
        yield client


def create_session(client):
    response = client.post(f"{API}/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


def create_typing_events(start_ms, count=60, interval_ms=300):
    events = []
    for i in range(1, count + 1):
        ts = start_ms + i * interval_ms
        events.append({"event_type": "keydown", "key": "a", "client_timestamp": ts})
        events.append({"event_type": "keyup", "key": "a", "client_timestamp": ts + 90})
    return events


def type_document(client, session_id, content):
    events = create_typing_events(int(time.time() * 1000))
    for i in range(0, len(events), 100):
        response = client.post(
            f"{API}/sessions/{session_id}/keystrokes",
            json={"events": events[i : i + 100]},
        )
        assert response.status_code == 200

    response = client.post(f"{API}/sessions/{session_id}/content", json={"content": content})
    assert response.status_code == 200
    assert response.json()["version_pending"] is True


def export_certificate(client, session_id, **body):
    response = client.post(f"{API}/sessions/{session_id}/certificate", json=body or None)
    assert response.status_code == 200, response.text
    return response


def test_health(client):
    response = client.get(f"{API}/verify/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "algorithm": "SHA256"}


def test_typed_document_exports_and_verifies(client):
    session_id = create_session(client)
    type_document(client, session_id, "A short essay typed entirely by hand.")

    response = export_certificate(client, session_id, title="My Essay")
    certificate = response.json()
    assert response.headers["content-disposition"].startswith("attachment;")
    assert certificate["document"]["title"] == "My Essay"
    assert certificate["document"]["typingStats"]["totalKeystrokes"] == 60
    assert certificate["metadata"]["editorVersion"] == "1.0"

    response = client.post(f"{API}/verify", content=json.dumps(certificate))
    assert response.status_code == 200
    result = response.json()
    assert result["status"] == "valid", f"FAIL: got {result['message']}"
    assert result["isSignatureValid"] is True
    assert result["metrics"]["totalKeystrokes"] == 60


def test_tampered_certificate_is_invalid(client):
    session_id = create_session(client)
    type_document(client, session_id, "Original text.")
    certificate = export_certificate(client, session_id).json()
    certificate["document"]["content"] = "Edited text."

    result = client.post(f"{API}/verify", content=json.dumps(certificate)).json()
    assert result["status"] == "invalid"
    assert result["isSignatureValid"] is False


def test_default_title(client):
    session_id = create_session(client)
    type_document(client, session_id, "Text.")

    certificate = export_certificate(client, session_id).json()
    assert certificate["document"]["title"] == "Verified Document"


def test_blank_document_cannot_be_exported(client):
    session_id = create_session(client)
    client.post(f"{API}/sessions/{session_id}/content", json={"content": "   "})

    response = client.post(f"{API}/sessions/{session_id}/certificate")
    assert response.status_code == 400
    assert response.json()["detail"] == "Please write some content first!"


@pytest.mark.parametrize("body", ["not json at all", "[]", "{}", '{"document": {}}'])
def test_unreadable_certificate_upload(client, body):
    response = client.post(f"{API}/verify", content=body)

    assert response.status_code == 400
    assert response.json()["detail"] == CertificateError.user_message


def test_report_and_guide(client):
    session_id = create_session(client)
    type_document(client, session_id, "Report me.")
    certificate = export_certificate(client, session_id).json()

    report = client.post(f"{API}/verify/report", content=json.dumps(certificate))
    assert report.status_code == 200
    assert report.text.startswith("VERIFIED DOCUMENT")
    assert certificate["certificateId"] in report.text
    assert "Report me." in report.text

    guide = client.get(f"{API}/verify/guide")
    assert guide.status_code == 200
    assert "# Document Verification Guide" in guide.text


def test_paste_annotation_flow(client):
    session_id = create_session(client)
    response = client.post(
        f"{API}/sessions/{session_id}/pastes",
        json={"text": "cited passage", "caret_position": 0, "document_length": 0},
    )
    assert response.status_code == 201
    paste_id = response.json()["paste_id"]

    response = client.put(
        f"{API}/sessions/{session_id}/pastes/{paste_id}/annotation",
        json={"type": "citation", "note": "Doe 2021"},
    )
    assert response.status_code == 200
    event = response.json()
    assert event["justified"] is True
    assert event["type"] == "citation"
    assert event["length"] == len("cited passage")

    response = client.delete(f"{API}/sessions/{session_id}/pastes/{paste_id}/annotation")
    assert response.json()["justified"] is False

    pastes = client.get(f"{API}/sessions/{session_id}/pastes").json()
    assert [p["id"] for p in pastes] == [paste_id]

    stats = client.get(f"{API}/sessions/{session_id}/stats").json()
    assert stats["pasteStats"]["unjustified"] == 1
    assert stats["typingStats"]["copyPasteDetected"] is True

    response = client.put(
        f"{API}/sessions/{session_id}/pastes/paste_missing/annotation",
        json={"type": "quote"},
    )
    assert response.status_code == 404


def test_invalid_paste_type_rejected(client):
    session_id = create_session(client)
    paste_id = client.post(f"{API}/sessions/{session_id}/pastes", json={"text": "x"}).json()["paste_id"]

    response = client.put(
        f"{API}/sessions/{session_id}/pastes/{paste_id}/annotation",
        json={"type": "stolen"},
    )
    assert response.status_code == 422


def test_shortcuts_are_not_counted(client):
    session_id = create_session(client)
    response = client.post(
        f"{API}/sessions/{session_id}/keystrokes",
        json={
            "events": [
                {"event_type": "keydown", "key": "v", "modifiers": ["ctrl"]},
                {"event_type": "keydown", "key": "c", "modifiers": ["meta"]},
                {"event_type": "keyup", "key": "z"},
                {"event_type": "keydown", "key": "a"},
            ]
        },
    )

    body = response.json()
    assert body["events_processed"] == 1
    assert body["total_keystrokes"] == 1

    stats = client.get(f"{API}/sessions/{session_id}/stats").json()
    assert stats["typingStats"]["copyPasteDetected"] is True


def test_keystroke_batch_validation(client):
    session_id = create_session(client)

    assert client.post(f"{API}/sessions/{session_id}/keystrokes", json={"events": []}).status_code == 422
    response = client.post(
        f"{API}/sessions/{session_id}/keystrokes",
        json={"events": [{"event_type": "keypress", "key": "a"}]},
    )
    assert response.status_code == 422


def test_reset_and_close_session(client):
    session_id = create_session(client)
    type_document(client, session_id, "Going away.")

    stats = client.post(f"{API}/sessions/{session_id}/reset").json()
    assert stats["typingStats"]["totalKeystrokes"] == 0
    assert stats["charCount"] == 0

    assert client.delete(f"{API}/sessions/{session_id}").status_code == 204
    assert client.get(f"{API}/sessions/{session_id}/stats").status_code == 404
    assert client.delete(f"{API}/sessions/{session_id}").status_code == 404


def test_unknown_session(client):
    response = client.get(f"{API}/sessions/00000000-0000-0000-0000-000000000000/stats")

    assert response.status_code == 404


def test_draft_crud(client):
    response = client.post(f"{API}/drafts")
    assert response.status_code == 201
    draft = response.json()
    assert draft["title"] == "Untitled Document"

    response = client.put(
        f"{API}/drafts/{draft['id']}",
        json={"title": "Chapter 1", "content": "It was a dark night."},
    )
    assert response.status_code == 200
    assert response.json()["content"] == "It was a dark night."

    drafts = client.get(f"{API}/drafts").json()
    assert [d["title"] for d in drafts] == ["Chapter 1"]

    assert client.delete(f"{API}/drafts/{draft['id']}").status_code == 204
    assert client.get(f"{API}/drafts/{draft['id']}").status_code == 404


def test_session_saves_and_loads_drafts(client):
    draft_id = client.post(f"{API}/drafts").json()["id"]
    session_id = create_session(client)
    type_document(client, session_id, "Saved through the session.")
    client.post(f"{API}/sessions/{session_id}/pastes", json={"text": "quote"})

    response = client.post(f"{API}/sessions/{session_id}/drafts/{draft_id}/save")
    assert response.status_code == 200

    draft = client.get(f"{API}/drafts/{draft_id}").json()
    assert draft["content"] == "Saved through the session."
    assert len(draft["pasteEvents"]) == 1

    other_id = create_session(client)
    stats = client.post(f"{API}/sessions/{other_id}/drafts/{draft_id}/load").json()
    assert stats["charCount"] == len("Saved through the session.")
    assert stats["pasteStats"]["total"] == 1

    assert client.post(f"{API}/sessions/{other_id}/drafts/draft_missing/load").status_code == 404


def test_client_clock_behind_server(client):
    session_id = create_session(client)
    behind = int(time.time() * 1000) - 2 * 60_000
    events = create_typing_events(behind)
    for i in range(0, len(events), 100):
        client.post(f"{API}/sessions/{session_id}/keystrokes", json={"events": events[i : i + 100]})

    stats = client.get(f"{API}/sessions/{session_id}/stats").json()["typingStats"]
    assert stats["totalKeystrokes"] == 60
    assert stats["totalTimeSpent"] >= 17, f"FAIL: got {stats['totalTimeSpent']}s"
    assert stats["averageTypingSpeed"] > 0
