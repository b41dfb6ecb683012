"""
Tests for debounced version snapshots.
"""

import asyncio
import time

import pytest

from typeproof.services.version_service import AsyncioScheduler, ThreadingScheduler, VersionSampler


def create_sampler(scheduler, clock, debounce_ms=2000):
    return VersionSampler(scheduler=scheduler, clock=clock, debounce_ms=debounce_ms)


def test_burst_of_changes_yields_one_snapshot(scheduler, clock):
    sampler = create_sampler(scheduler, clock)

    sampler.on_content_changed("H")
    scheduler.advance(200)
    sampler.on_content_changed("He")
    scheduler.advance(200)
    sampler.on_content_changed("Hello")
    scheduler.advance(1999)
    assert sampler.count == 0, "FAIL: debounce period has not elapsed yet"

    scheduler.advance(1)
    assert sampler.count == 1
    assert sampler.latest.content == "Hello"
    assert sampler.latest.timestamp_ms == clock.now


def test_at_most_one_timer_pending(scheduler, clock):
    sampler = create_sampler(scheduler, clock)
    for text in ("a", "ab", "abc", "abcd"):
        sampler.on_content_changed(text)
        scheduler.advance(100)

    assert len(scheduler.active) == 1
    assert sampler.has_pending


def test_separate_bursts_yield_separate_snapshots(scheduler, clock):
    sampler = create_sampler(scheduler, clock)
    sampler.on_content_changed("First draft")
    scheduler.advance(2500)
    sampler.on_content_changed("First draft, revised")
    scheduler.advance(2500)

    assert [v.content for v in sampler.versions] == ["First draft", "First draft, revised"]
    assert sampler.versions[0].timestamp_ms < sampler.versions[1].timestamp_ms


def test_whitespace_only_content_is_skipped(scheduler, clock):
    sampler = create_sampler(scheduler, clock)
    sampler.on_content_changed("   \n\t ")
    scheduler.advance(3000)

    assert sampler.count == 0
    assert not sampler.has_pending


def test_snapshot_counts(scheduler, clock):
    sampler = create_sampler(scheduler, clock)
    content = "  hello   world \n"
    sampler.on_content_changed(content)
    scheduler.advance(2000)

    snapshot = sampler.latest
    assert snapshot.word_count == 2
    assert snapshot.char_count == len(content)
    assert snapshot.content == content
    assert snapshot.id == f"v_{clock.now}_1"


def test_flush_commits_pending_snapshot(scheduler, clock):
    sampler = create_sampler(scheduler, clock)
    sampler.on_content_changed("draft")

    snapshot = sampler.flush()
    assert snapshot is not None
    assert snapshot.content == "draft"
    assert not sampler.has_pending

    scheduler.advance(5000)
    assert sampler.count == 1, "FAIL: the cancelled timer must not fire"
    assert sampler.flush() is None


def test_cancel_drops_pending_snapshot(scheduler, clock):
    sampler = create_sampler(scheduler, clock)
    sampler.on_content_changed("abandoned")
    sampler.cancel()
    scheduler.advance(5000)

    assert sampler.count == 0


def test_reset_clears_history(scheduler, clock):
    sampler = create_sampler(scheduler, clock)
    sampler.save_version("kept?")
    sampler.on_content_changed("pending")
    sampler.reset()
    scheduler.advance(5000)

    assert sampler.versions == []
    assert not sampler.has_pending


def test_asyncio_scheduler_debounces():
    async def scenario():
        sampler = VersionSampler(scheduler=AsyncioScheduler(), debounce_ms=20)
        sampler.on_content_changed("one")
        sampler.on_content_changed("one two")
        await asyncio.sleep(0.2)
        return sampler.versions

    versions = asyncio.run(scenario())
    assert len(versions) == 1
    assert versions[0].content == "one two"
    assert versions[0].word_count == 2


def test_asyncio_scheduler_needs_running_loop():
    sampler = VersionSampler(scheduler=AsyncioScheduler())

    with pytest.raises(RuntimeError):
        sampler.on_content_changed("no loop here")


def test_threading_scheduler_works_without_loop():
    sampler = VersionSampler(scheduler=ThreadingScheduler(), debounce_ms=20)
    sampler.on_content_changed("one")
    sampler.on_content_changed("one two")

    deadline = time.monotonic() + 2
    while sampler.count == 0 and time.monotonic() < deadline:
        time.sleep(0.01)
    time.sleep(0.1)

    assert sampler.count == 1, "FAIL: cancelled timer still fired"
    assert sampler.latest.content == "one two"
