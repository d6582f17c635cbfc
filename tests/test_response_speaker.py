"""Tests for response dispatch, the typed chat path, and event subscriptions."""

import asyncio

from conftest import FakeAvatarSession, FakeSynthesizer, ManualClock
from models.session_models import EchoGuard
from services.realtime.event_emitter import EventEmitter
from services.realtime.response_speaker import ResponseSpeaker
from services.realtime.text_chat import TextChat


class _GuardCheckingSession(FakeAvatarSession):
    """Records the guard prefix seen at the moment each response is dispatched."""

    def __init__(self, guard: EchoGuard) -> None:
        super().__init__()
        self.guard = guard
        self.prefix_at_dispatch = []

    async def repeat(self, text: str) -> None:
        self.prefix_at_dispatch.append(self.guard.last_response_prefix)
        await super().repeat(text)


class _FakeCompleter:
    async def complete(self, message, system_prompt=None, model=None):
        return f"You said: {message}"


def test_guard_updated_before_dispatch():
    guard = EchoGuard()
    session = _GuardCheckingSession(guard)
    speaker = ResponseSpeaker(session, guard, clock=ManualClock(12.0))

    asyncio.run(speaker.speak("Look at that lovely little plant!"))

    assert session.prefix_at_dispatch == ["Look at that lovely little plant!"]
    assert guard.recorded_at == 12.0


def test_empty_response_is_not_dispatched():
    session = FakeAvatarSession()
    asyncio.run(ResponseSpeaker(session, EchoGuard()).speak(""))
    assert session.spoken == []


def test_text_chat_plays_synthesized_reply():
    session = FakeAvatarSession()
    guard = EchoGuard()
    synthesizer = FakeSynthesizer(audio=b"pcm-bytes")
    chat = TextChat(_FakeCompleter(), ResponseSpeaker(session, guard, synthesizer))

    reply = asyncio.run(chat.send_message("hello"))

    assert reply == "You said: hello"
    assert synthesizer.texts == ["You said: hello"]
    assert session.audio == [b"pcm-bytes"]
    assert guard.last_response_prefix == "You said: hello"


def test_disposer_removes_only_its_subscription():
    emitter = EventEmitter()
    received = []
    dispose_first = emitter.on("EVT", lambda value: received.append(("first", value)))
    emitter.on("EVT", lambda value: received.append(("second", value)))

    dispose_first()
    dispose_first()
    emitter.emit("EVT", 1)

    assert received == [("second", 1)]
    assert emitter.listener_count("EVT") == 1


def test_failing_listener_does_not_block_others():
    emitter = EventEmitter()
    received = []

    def broken(_):
        raise RuntimeError("boom")

    emitter.on("EVT", broken)
    emitter.on("EVT", received.append)
    emitter.emit("EVT", "ok")

    assert received == ["ok"]
