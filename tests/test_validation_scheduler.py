"""Tests for debounced validation scheduling."""

import asyncio
import logging

from peekingduck_language_server.server.validation_scheduler import ValidationScheduler

from conftest import FakeLoop


def test_schedule_runs_callback_after_delay():
    loop = FakeLoop()
    validated = []
    scheduler = ValidationScheduler(loop, 0.2, validated.append)

    scheduler.schedule("file:///a.yml")

    (handle,) = loop.handles
    assert handle.delay == 0.2
    assert scheduler.pending("file:///a.yml")
    handle.fire()
    assert validated == ["file:///a.yml"]
    assert not scheduler.pending("file:///a.yml")


def test_reschedule_cancels_previous_timer():
    loop = FakeLoop()
    validated = []
    scheduler = ValidationScheduler(loop, 0.2, validated.append)

    scheduler.schedule("file:///a.yml")
    scheduler.schedule("file:///a.yml")

    first, second = loop.handles
    assert first.cancelled
    assert not second.cancelled
    second.fire()
    assert validated == ["file:///a.yml"]


def test_documents_are_debounced_independently():
    loop = FakeLoop()
    scheduler = ValidationScheduler(loop, 0.2, lambda uri: None)

    scheduler.schedule("file:///a.yml")
    scheduler.schedule("file:///b.yml")

    assert not any(handle.cancelled for handle in loop.handles)
    assert scheduler.pending("file:///a.yml") and scheduler.pending("file:///b.yml")


def test_cancel():
    loop = FakeLoop()
    scheduler = ValidationScheduler(loop, 0.2, lambda uri: None)

    assert scheduler.cancel("file:///a.yml") is False
    scheduler.schedule("file:///a.yml")
    assert scheduler.cancel("file:///a.yml") is True
    assert loop.handles[0].cancelled
    assert not scheduler.pending("file:///a.yml")


def test_cancel_all():
    loop = FakeLoop()
    scheduler = ValidationScheduler(loop, 0.2, lambda uri: None)
    scheduler.schedule("file:///a.yml")
    scheduler.schedule("file:///b.yml")

    scheduler.cancel_all()

    assert all(handle.cancelled for handle in loop.handles)


def test_callback_errors_are_logged(caplog):
    def fail(uri):
        raise RuntimeError("boom")

    loop = FakeLoop()
    scheduler = ValidationScheduler(loop, 0.2, fail)
    scheduler.schedule("file:///a.yml")

    with caplog.at_level(logging.ERROR):
        loop.handles[0].fire()

    assert "Validation of file:///a.yml failed: boom" in caplog.text


def test_last_request_wins_on_real_loop():
    validated = []

    async def run():
        loop = asyncio.get_running_loop()
        scheduler = ValidationScheduler(loop, 0.01, validated.append)
        for _ in range(3):
            scheduler.schedule("file:///a.yml")
        await asyncio.sleep(0.05)

    asyncio.run(run())

    assert validated == ["file:///a.yml"]
