"""Avatar session collaborator: lifecycle, events, and speech primitives."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Callable, Dict

from fastapi import WebSocket

from models.session_models import SessionState
from services.realtime.event_emitter import Disposer, EventEmitter, SessionEvent

LOGGER = logging.getLogger(__name__)


class AvatarSession:
	"""Surface of the avatar session consumed by the orchestrator.

	State changes come from the collaborator's own lifecycle; the orchestrator
	only ever calls `start` to request a connection.
	"""

	def __init__(self) -> None:
		self.state = SessionState.INACTIVE
		self.stream_ready = False
		self.events = EventEmitter()

	def on(self, event: SessionEvent, callback: Callable[..., Any]) -> Disposer:
		return self.events.on(event.value, callback)

	def set_state(self, state: SessionState) -> None:
		if state == self.state:
			return
		LOGGER.info("Avatar session %s -> %s", self.state.value, state.value)
		self.state = state
		if state in (SessionState.DISCONNECTED, SessionState.INACTIVE):
			self.stream_ready = False
		self.events.emit(SessionEvent.STATE_CHANGED.value, state)

	def set_stream_ready(self, ready: bool = True) -> None:
		if ready == self.stream_ready:
			return
		self.stream_ready = ready
		if ready:
			self.events.emit(SessionEvent.STREAM_READY.value)

	def emit_transcription(self, text: str) -> None:
		self.events.emit(SessionEvent.USER_TRANSCRIPTION.value, {"text": text})

	async def start(self) -> None:
		"""Ask the collaborator to connect."""
		raise NotImplementedError

	async def message(self, text: str) -> None:
		"""Speak `text` through the avatar's own language pipeline."""
		raise NotImplementedError

	async def repeat(self, text: str) -> None:
		"""Speak `text` verbatim."""
		raise NotImplementedError

	async def repeat_audio(self, audio: bytes) -> None:
		"""Play raw audio bytes."""
		raise NotImplementedError


class WebSocketAvatarSession(AvatarSession):
	"""Avatar session whose SDK lives in the browser at the other end of a websocket."""

	def __init__(self, websocket: WebSocket) -> None:
		super().__init__()
		self.websocket = websocket

	async def start(self) -> None:
		await self.send({"type": "session.connect"})

	async def message(self, text: str) -> None:
		await self.send({"type": "avatar.message", "text": text})

	async def repeat(self, text: str) -> None:
		await self.send({"type": "avatar.repeat", "text": text})

	async def repeat_audio(self, audio: bytes) -> None:
		await self.send({"type": "avatar.repeat_audio", "audio_b64": base64.b64encode(audio).decode("utf-8")})

	async def send(self, payload: Dict[str, Any]) -> None:
		await self.websocket.send_text(json.dumps(payload))
