"""Tests for session lifecycle, greeting, and camera mode."""

import asyncio

from conftest import FakeAnalyzer, FakeAvatarSession, ManualClock, make_jpeg
from models.session_models import CameraModeState, CapturedImage, EchoGuard, GreetingState, SessionState
from services.capture.capture_source import CameraSource, CaptureSourceFactory, StaticImageSource
from services.capture.client_camera import ClientCameraOpener
from services.capture.frame_capture import FrameCapture
from services.realtime.analysis_coordinator import AnalysisRequestCoordinator
from services.realtime.event_emitter import SessionEvent
from services.realtime.response_speaker import ResponseSpeaker
from services.realtime.session_lifecycle import SessionLifecycleManager

GREETING = "Hello I am 6, your personal assistant, how can I help you today"


class LifecycleHarness:
    def __init__(self, devices=(), auto_trigger_delay: float = 0.0) -> None:
        self.session = FakeAvatarSession()
        self.guard = EchoGuard()
        self.clock = ManualClock()
        self.speaker = ResponseSpeaker(self.session, self.guard, clock=self.clock)
        self.analyzer = FakeAnalyzer()
        self.coordinator = AnalysisRequestCoordinator(
            self.speaker, self.analyzer, self.guard, frame_capture=FrameCapture(timeout=0.5), clock=self.clock
        )
        self.camera = ClientCameraOpener()
        self.camera.set_devices(devices)
        self.stopped = 0
        self.manager = SessionLifecycleManager(
            self.session,
            self.coordinator,
            self.speaker,
            CaptureSourceFactory(self.camera, CapturedImage(data=make_jpeg())),
            greeting_text=GREETING,
            greeting_delay=0.01,
            auto_trigger_delay=auto_trigger_delay,
            ready_timeout=0.5,
            on_stopped=self._on_stopped,
        )

    def _on_stopped(self) -> None:
        self.stopped += 1

    def transcription_listeners(self) -> int:
        return self.session.events.listener_count(SessionEvent.USER_TRANSCRIPTION.value)

    async def settle_auto_trigger(self) -> None:
        for _ in range(50):
            await asyncio.sleep(0.01)
            if self.coordinator.current_task is not None:
                await self.coordinator.current_task
                return


def test_connect_issued_from_inactive():
    harness = LifecycleHarness()
    asyncio.run(harness.manager.start())
    assert harness.session.connect_requests == 1


def test_greeting_sent_once_per_connection():
    harness = LifecycleHarness()

    async def scenario():
        await harness.manager.start()
        harness.session.set_state(SessionState.CONNECTING)
        harness.session.set_state(SessionState.CONNECTED)
        assert harness.session.spoken == []
        harness.session.set_stream_ready()
        await asyncio.sleep(0.05)
        harness.session.set_stream_ready(False)
        harness.session.set_stream_ready(True)
        await asyncio.sleep(0.05)
        first_connection = list(harness.session.spoken)

        harness.session.set_state(SessionState.DISCONNECTED)
        assert harness.manager.greeting == GreetingState.PENDING
        harness.session.set_state(SessionState.CONNECTED)
        harness.session.set_stream_ready()
        await asyncio.sleep(0.05)
        return first_connection

    assert asyncio.run(scenario()) == [GREETING]
    assert harness.session.spoken == [GREETING, GREETING]
    assert harness.guard.last_response_prefix == GREETING
    assert harness.stopped == 1


def test_disconnect_during_settle_cancels_greeting():
    harness = LifecycleHarness()

    async def scenario():
        await harness.manager.start()
        harness.session.set_state(SessionState.CONNECTED)
        harness.session.set_stream_ready()
        harness.session.set_state(SessionState.DISCONNECTED)
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert harness.session.spoken == []


def test_auto_trigger_fires_once_per_activation():
    harness = LifecycleHarness()

    async def scenario():
        source = await harness.manager.enable_camera_mode()
        assert isinstance(source, StaticImageSource)
        await harness.settle_auto_trigger()
        assert harness.manager.camera_mode == CameraModeState.ACTIVE
        assert await harness.manager.enable_camera_mode() is source
        await asyncio.sleep(0.02)
        first_round = list(harness.analyzer.questions)

        harness.manager.disable_camera_mode()
        harness.coordinator.current_task = None
        await harness.manager.enable_camera_mode()
        await harness.settle_auto_trigger()
        return first_round

    assert asyncio.run(scenario()) == [""]
    assert harness.analyzer.questions == ["", ""]


def test_single_transcription_subscription_while_camera_active():
    harness = LifecycleHarness()

    async def scenario():
        assert harness.transcription_listeners() == 0
        await harness.manager.enable_camera_mode()
        await harness.manager.enable_camera_mode()
        assert harness.transcription_listeners() == 1
        await harness.settle_auto_trigger()

        harness.session.emit_transcription("what do you see")
        await harness.coordinator.current_task

        harness.manager.disable_camera_mode()
        assert harness.transcription_listeners() == 0
        harness.session.emit_transcription("look at this")
        await asyncio.sleep(0.02)

    asyncio.run(scenario())
    assert harness.analyzer.questions == ["", "what do you see"]


def test_live_camera_auto_trigger_waits_for_frames():
    harness = LifecycleHarness(devices=["environment"])

    async def scenario():
        source = await harness.manager.enable_camera_mode()
        assert isinstance(source, CameraSource)
        await asyncio.sleep(0.05)
        assert harness.analyzer.calls == []
        source.stream.push_frame(make_jpeg((40, 30)), width=40, height=30)
        await harness.settle_auto_trigger()
        return source

    source = asyncio.run(scenario())
    assert harness.analyzer.questions == [""]
    assert harness.analyzer.calls[0][1] == "image/jpeg"
    assert source.stream.facing_mode == "environment"


def test_disabling_before_auto_trigger_skips_it():
    harness = LifecycleHarness(auto_trigger_delay=0.05)

    async def scenario():
        await harness.manager.enable_camera_mode()
        harness.manager.disable_camera_mode()
        await asyncio.sleep(0.1)

    asyncio.run(scenario())
    assert harness.analyzer.calls == []
    assert harness.manager.camera_mode == CameraModeState.INACTIVE


def test_disconnect_releases_camera():
    harness = LifecycleHarness(devices=["user"])

    async def scenario():
        await harness.manager.start()
        harness.session.set_state(SessionState.CONNECTED)
        source = await harness.manager.enable_camera_mode()
        harness.session.set_state(SessionState.DISCONNECTED)
        return source

    source = asyncio.run(scenario())
    assert source.stream.stopped is True
    assert harness.manager.camera_mode == CameraModeState.INACTIVE
    assert harness.manager.source is None
    assert harness.transcription_listeners() == 0
    assert harness.coordinator.camera_active is False
