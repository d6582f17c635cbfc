"""Shared fakes for the orchestration tests."""

import asyncio
import io
from typing import List, Optional, Tuple

import pytest
from PIL import Image

from models.session_models import CapturedImage, EchoGuard
from services.capture.capture_source import StaticImageSource
from services.capture.frame_capture import FrameCapture
from services.realtime.analysis_coordinator import AnalysisRequestCoordinator
from services.realtime.avatar_session import AvatarSession
from services.realtime.response_speaker import ResponseSpeaker


def make_jpeg(size: Tuple[int, int] = (32, 24), color=(200, 30, 30), fmt: str = "JPEG") -> bytes:
    out = io.BytesIO()
    Image.new("RGB", size, color).save(out, format=fmt)
    return out.getvalue()


class ManualClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAvatarSession(AvatarSession):
    """Avatar session that records what it was asked to say."""

    def __init__(self) -> None:
        super().__init__()
        self.connect_requests = 0
        self.spoken: List[str] = []
        self.messages: List[str] = []
        self.audio: List[bytes] = []

    async def start(self) -> None:
        self.connect_requests += 1

    async def message(self, text: str) -> None:
        self.messages.append(text)

    async def repeat(self, text: str) -> None:
        self.spoken.append(text)

    async def repeat_audio(self, audio: bytes) -> None:
        self.audio.append(audio)


class FakeAnalyzer:
    """Vision analyzer double; optionally blocks on a gate or raises."""

    def __init__(self, reply: str = "I see a cheerful red mug!", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.gate: Optional[asyncio.Event] = None
        self.calls: List[Tuple[bytes, str, str]] = []

    async def analyze_image(self, image_bytes: bytes, mime_type: str = "image/jpeg", question: str = "") -> str:
        self.calls.append((image_bytes, mime_type, question))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply

    @property
    def questions(self) -> List[str]:
        return [call[2] for call in self.calls]


class FakeSynthesizer:
    def __init__(self, audio: bytes = b"\x00\x01pcm") -> None:
        self.audio = audio
        self.texts: List[str] = []

    async def synthesize(self, text: str) -> bytes:
        self.texts.append(text)
        return self.audio


class CoordinatorHarness:
    def __init__(self, analyzer: Optional[FakeAnalyzer] = None, capture_timeout: float = 0.05) -> None:
        self.session = FakeAvatarSession()
        self.guard = EchoGuard()
        self.clock = ManualClock()
        self.speaker = ResponseSpeaker(self.session, self.guard, clock=self.clock)
        self.analyzer = analyzer or FakeAnalyzer()
        self.coordinator = AnalysisRequestCoordinator(
            self.speaker,
            self.analyzer,
            self.guard,
            frame_capture=FrameCapture(timeout=capture_timeout),
            clock=self.clock,
        )

    def attach_static(self, data: Optional[bytes] = None) -> StaticImageSource:
        source = StaticImageSource(CapturedImage(data=make_jpeg() if data is None else data))
        self.coordinator.attach_source(source)
        return source


@pytest.fixture
def harness():
    return CoordinatorHarness()
