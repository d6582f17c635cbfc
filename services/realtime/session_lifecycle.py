"""Drive the avatar session lifecycle, greeting, and camera mode."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional

from models.session_models import CameraModeState, GreetingState, SessionState
from services.capture.capture_source import CameraSource, CaptureSource, CaptureSourceFactory
from services.capture.frame_capture import CAPTURE_TIMEOUT_SECONDS
from services.realtime.analysis_coordinator import AnalysisRequestCoordinator
from services.realtime.avatar_session import AvatarSession
from services.realtime.event_emitter import Disposer, SessionEvent
from services.realtime.response_speaker import ResponseSpeaker
from utils.settings import DEFAULT_GREETING

LOGGER = logging.getLogger(__name__)

GREETING_SETTLE_SECONDS = 1.0
AUTO_TRIGGER_SETTLE_SECONDS = 0.5


class SessionLifecycleManager:
	"""Connect the session, greet once per connection, and own camera mode.

	While camera mode is active exactly one USER_TRANSCRIPTION subscription
	forwards utterances to the coordinator; leaving camera mode or tearing the
	session down disposes it.
	"""

	def __init__(
		self,
		session: AvatarSession,
		coordinator: AnalysisRequestCoordinator,
		speaker: ResponseSpeaker,
		source_factory: CaptureSourceFactory,
		greeting_text: str = DEFAULT_GREETING,
		greeting_delay: float = GREETING_SETTLE_SECONDS,
		auto_trigger_delay: float = AUTO_TRIGGER_SETTLE_SECONDS,
		ready_timeout: float = CAPTURE_TIMEOUT_SECONDS,
		on_stopped: Optional[Callable[[], Any]] = None,
	) -> None:
		self.session = session
		self.coordinator = coordinator
		self.speaker = speaker
		self.source_factory = source_factory
		self.greeting_text = greeting_text
		self.greeting_delay = greeting_delay
		self.auto_trigger_delay = auto_trigger_delay
		self.ready_timeout = ready_timeout
		self.on_stopped = on_stopped

		self.greeting = GreetingState.PENDING
		self.camera_mode = CameraModeState.INACTIVE
		self.source: Optional[CaptureSource] = None

		self._session_disposers: List[Disposer] = []
		self._transcription_disposer: Optional[Disposer] = None
		self._connect_task: Optional[asyncio.Task] = None
		self._greeting_task: Optional[asyncio.Task] = None
		self._auto_task: Optional[asyncio.Task] = None
		self._activation: Optional[object] = None

	@property
	def camera_active(self) -> bool:
		return self.camera_mode != CameraModeState.INACTIVE

	async def start(self) -> None:
		"""Subscribe to session events and connect if the session is inactive."""
		if not self._session_disposers:
			self._session_disposers = [
				self.session.on(SessionEvent.STATE_CHANGED, self._on_state_changed),
				self.session.on(SessionEvent.STREAM_READY, self._on_stream_ready),
			]
		if self.session.state == SessionState.INACTIVE:
			await self._connect()
		self._maybe_greet()

	def shutdown(self) -> None:
		"""Release every subscription, task, and capture resource."""
		self.disable_camera_mode()
		for task in (self._connect_task, self._greeting_task):
			if task is not None and not task.done():
				task.cancel()
		for dispose in self._session_disposers:
			dispose()
		self._session_disposers = []

	async def enable_camera_mode(self) -> Optional[CaptureSource]:
		"""Enter camera mode and schedule the one-shot auto analysis.

		Returns the active source; calling again while active returns it unchanged.
		"""
		if self.camera_mode != CameraModeState.INACTIVE:
			return self.source
		self.camera_mode = CameraModeState.ACTIVATING_AUTO
		activation = object()
		self._activation = activation

		source = await self.source_factory.activate()
		if self._activation is not activation:
			# Camera mode was left while the device was opening.
			source.deactivate()
			return self.source

		self.source = source
		self.coordinator.attach_source(source)
		self._transcription_disposer = self.session.on(SessionEvent.USER_TRANSCRIPTION, self._on_transcription)
		self._auto_task = asyncio.get_running_loop().create_task(self._auto_trigger(source))
		LOGGER.info("Camera mode enabled (%s)", source.kind.value)
		return source

	def disable_camera_mode(self) -> None:
		"""Leave camera mode; hardware is released before this returns."""
		if self.camera_mode == CameraModeState.INACTIVE:
			return
		self.camera_mode = CameraModeState.INACTIVE
		self._activation = None
		if self._auto_task is not None and not self._auto_task.done():
			self._auto_task.cancel()
		self._auto_task = None
		if self._transcription_disposer is not None:
			self._transcription_disposer()
			self._transcription_disposer = None
		self.coordinator.detach_source()
		if self.source is not None:
			self.source.deactivate()
			self.source = None
		LOGGER.info("Camera mode disabled")

	async def _auto_trigger(self, source: CaptureSource) -> None:
		await asyncio.sleep(self.auto_trigger_delay)
		if isinstance(source, CameraSource):
			if not await source.stream.wait_until_ready(self.ready_timeout):
				LOGGER.warning("Camera not ready for auto analysis; attempting anyway")
		if self.camera_mode != CameraModeState.ACTIVATING_AUTO or self.source is not source:
			return
		self.camera_mode = CameraModeState.ACTIVE
		self.coordinator.handle_utterance("", is_auto=True)

	def _on_transcription(self, event: Any) -> None:
		text = event.get("text", "") if isinstance(event, dict) else str(event or "")
		self.coordinator.handle_utterance(text)

	def _on_state_changed(self, state: SessionState) -> None:
		if state == SessionState.INACTIVE:
			self._connect_task = asyncio.get_running_loop().create_task(self._connect())
		elif state == SessionState.CONNECTED:
			self._maybe_greet()
		elif state == SessionState.DISCONNECTED:
			self.greeting = GreetingState.PENDING
			if self._greeting_task is not None and not self._greeting_task.done():
				self._greeting_task.cancel()
			self._greeting_task = None
			self.disable_camera_mode()
			if self.on_stopped is not None:
				self.on_stopped()

	def _on_stream_ready(self) -> None:
		self._maybe_greet()

	def _maybe_greet(self) -> None:
		if self.greeting != GreetingState.PENDING:
			return
		if self.session.state != SessionState.CONNECTED or not self.session.stream_ready:
			return
		self.greeting = GreetingState.SENT
		self._greeting_task = asyncio.get_running_loop().create_task(self._greet())

	async def _greet(self) -> None:
		await asyncio.sleep(self.greeting_delay)
		if self.session.state != SessionState.CONNECTED:
			return
		try:
			await self.speaker.speak(self.greeting_text)
		except Exception:
			LOGGER.exception("Failed to send greeting")

	async def _connect(self) -> None:
		LOGGER.info("Requesting avatar session connection")
		try:
			await self.session.start()
		except Exception:
			LOGGER.exception("Failed to request session connection")
