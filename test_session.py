"""
Tests for writing sessions: one document's telemetry end to end.
"""

from typeproof.models import Modifier, PasteType, VerificationStatus
from typeproof.services.certificate_service import CertificateBuilder
from typeproof.services.draft_store import create_new_draft
from typeproof.services.session_service import SessionRegistry, WritingSession
from typeproof.services.verification_service import verification_engine


def create_session(scheduler, clock):
    builder = CertificateBuilder(clock=clock, id_factory=lambda ts: f"cert_{ts}_session")
    return WritingSession(scheduler=scheduler, clock=clock, builder=builder)


def type_text(session, scheduler, text, interval_ms=250):
    """Type ``text`` one key at a time, reporting content after each key."""
    typed = session.content
    for char in text:
        scheduler.advance(interval_ms)
        session.key_down(char)
        scheduler.advance(60)
        session.key_up(char)
        typed += char
        session.content_changed(typed)


def test_typed_document_certifies_as_valid(scheduler, clock):
    session = create_session(scheduler, clock)
    type_text(session, scheduler, "Honest words typed by hand.")
    scheduler.advance(2000)

    assert session.versions.count == 1
    certificate = session.export_certificate(title="Essay", metadata={})
    result = verification_engine.verify(certificate)

    assert result.status == VerificationStatus.VALID, f"FAIL: got {result.message}"
    assert certificate.document.title == "Essay"
    assert certificate.document.content == "Honest words typed by hand."
    assert result.metrics.version_count == 1


def test_paste_marks_session_and_can_be_justified(scheduler, clock):
    session = create_session(scheduler, clock)
    type_text(session, scheduler, "As they said: ")
    paste_id = session.paste("quoted words", caret_position=14, document_length=14)
    session.content_changed(session.content + "quoted words")

    assert session.recorder.copy_paste_detected, "FAIL: a paste sets the copy/paste flag"

    event = session.annotate_paste(paste_id, PasteType.QUOTE, "Famous speech")
    assert event.justified

    result = verification_engine.verify(session.export_certificate(metadata={}))
    assert result.status == VerificationStatus.WARNING
    assert result.metrics.unjustified_pastes == 0
    assert result.metrics.copy_paste_detected

    assert not session.remove_paste_annotation(paste_id).justified
    assert session.annotate_paste("paste_missing", PasteType.QUOTE) is None


def test_paste_shortcut_is_not_a_keystroke(scheduler, clock):
    session = create_session(scheduler, clock)

    assert session.key_down("v", [Modifier.META]) is None
    assert session.stats()["typingStats"]["totalKeystrokes"] == 0
    assert session.stats()["typingStats"]["copyPasteDetected"] is True


def test_stats_snapshot(scheduler, clock):
    session = create_session(scheduler, clock)
    type_text(session, scheduler, "two words")

    stats = session.stats()
    assert stats["sessionId"] == str(session.id)
    assert stats["wordCount"] == 2
    assert stats["charCount"] == 9
    assert stats["typingStats"]["totalKeystrokes"] == 9
    assert stats["pasteStats"]["total"] == 0
    assert stats["rhythm"]["keyPressCount"] == 9
    assert stats["rhythm"]["avgHoldMs"] == 60.0


def test_reset_clears_everything(scheduler, clock):
    session = create_session(scheduler, clock)
    type_text(session, scheduler, "some text")
    session.paste("x", 0, 0)

    session.reset()
    scheduler.advance(5000)

    assert session.content == ""
    assert session.recorder.key_events == []
    assert not session.recorder.copy_paste_detected
    assert session.pastes.events == []
    assert session.versions.count == 0, "FAIL: a reset must cancel the pending snapshot"
    assert session.recorder.session_start_ms == clock.now - 5000


def test_draft_round_trip(scheduler, clock):
    session = create_session(scheduler, clock)
    type_text(session, scheduler, "draft text")
    paste_id = session.paste("pasted", 10, 10)
    session.annotate_paste(paste_id, PasteType.DATA, "table")

    draft = session.to_draft(create_new_draft(clock), updated_at=clock.now)
    assert draft.content == "draft text"
    assert [p.id for p in draft.paste_events] == [paste_id]
    assert draft.updated_at == clock.now

    other = create_session(scheduler, clock)
    other.load_draft(draft)
    assert other.content == "draft text"
    assert other.pastes.get(paste_id).justified
    assert other.recorder.key_events == [], "FAIL: telemetry is not restored from drafts"


def test_close_cancels_pending_snapshot(scheduler, clock):
    session = create_session(scheduler, clock)
    session.content_changed("pending text")
    session.close()
    scheduler.advance(5000)

    assert session.versions.count == 0


def test_sessions_are_independent(scheduler, clock):
    first = create_session(scheduler, clock)
    second = create_session(scheduler, clock)
    type_text(first, scheduler, "abc")
    second.paste("copied", 0, 0)

    assert second.recorder.key_events == []
    assert not first.recorder.copy_paste_detected
    assert first.pastes.events == []


def test_registry(scheduler, clock):
    registry = SessionRegistry(factory=lambda: create_session(scheduler, clock))
    session = registry.create()
    session.content_changed("pending")

    assert registry.get(session.id) is session
    assert len(registry) == 1

    registry.close_all()
    scheduler.advance(5000)
    assert len(registry) == 0
    assert registry.get(session.id) is None
    assert session.versions.count == 0
    assert not registry.close(session.id)


def test_registry_closes_idle_sessions(scheduler, clock):
    registry = SessionRegistry(
        factory=lambda: create_session(scheduler, clock),
        idle_timeout_ms=30 * 60_000,
        clock=clock,
    )
    idle = registry.create()
    idle.content_changed("left open")
    active = registry.create()

    clock.advance(20 * 60_000)
    assert registry.get(active.id) is active
    clock.advance(15 * 60_000)

    assert registry.evict_idle() == 1
    assert registry.get(idle.id) is None
    assert registry.get(active.id) is active, "FAIL: recent use keeps a session open"
    assert len(registry) == 1

    scheduler.advance(5000)
    assert idle.versions.count == 0, "FAIL: evicted session kept its snapshot timer"


def test_registry_without_timeout_keeps_sessions(scheduler, clock):
    registry = SessionRegistry(factory=lambda: create_session(scheduler, clock), clock=clock)
    session = registry.create()
    clock.advance(24 * 60 * 60_000)

    assert registry.evict_idle() == 0
    assert registry.get(session.id) is session


def test_client_timestamps_keep_intervals_on_session_clock(scheduler, clock):
    session = create_session(scheduler, clock)
    clock.advance(1000)
    behind = clock.now - 2 * 60_000

    for i in range(10):
        session.key_down("a", now_ms=session.client_time(behind + i * 300))
        session.key_up("a", now_ms=session.client_time(behind + i * 300 + 80))

    presses = [e.timestamp_ms for e in session.recorder.key_events if e.phase == "keydown"]
    assert presses[0] == clock.now
    assert presses[-1] - presses[0] == 2700
    assert session.recorder.typing_stats.total_time_spent_sec >= 0

    session.reset()
    clock.advance(500)
    assert session.client_time(behind) == clock.now, "FAIL: reset keeps the old offset"
    assert session.client_time(None) is None


def test_client_timestamps_never_precede_session_start(scheduler, clock):
    session = create_session(scheduler, clock)
    first = session.client_time(5_000)

    assert first == clock.now
    assert session.client_time(1_000) == session.recorder.session_start_ms
