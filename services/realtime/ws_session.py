"""Dispatch realtime websocket events to the orchestration components."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket

from models.errors import ConfigurationMissingError
from models.session_models import CapturedImage, EchoGuard, SessionMode, SessionState
from services.capture.capture_source import CameraSource, CaptureSourceFactory
from services.capture.client_camera import ClientCameraOpener
from services.capture.frame_capture import FrameCapture
from services.providers.chat_completer import ChatCompleter
from services.providers.client_factory import ProviderClients
from services.providers.speech_synthesizer import SpeechSynthesizer
from services.providers.vision_analyzer import VisionAnalyzer
from services.realtime.analysis_coordinator import AnalysisRequestCoordinator
from services.realtime.avatar_session import WebSocketAvatarSession
from services.realtime.intent_classifier import KeywordIntentClassifier
from services.realtime.response_speaker import ResponseSpeaker
from services.realtime.session_lifecycle import SessionLifecycleManager
from services.realtime.text_chat import TextChat
from utils.media_validation import decode_base64_image
from utils.settings import Settings

LOGGER = logging.getLogger(__name__)


class RealtimeSessionHandler:
	"""Route websocket messages for a single live avatar session."""

	def __init__(
		self,
		websocket: WebSocket,
		clients: ProviderClients,
		settings: Settings,
		fallback_image: CapturedImage,
		mode: SessionMode = SessionMode.FULL,
		frame_capture: Optional[FrameCapture] = None,
	) -> None:
		self.websocket = websocket
		self.mode = mode
		self.session = WebSocketAvatarSession(websocket)
		self.guard = EchoGuard()
		self.camera = ClientCameraOpener()
		self.speaker = ResponseSpeaker(self.session, self.guard, SpeechSynthesizer(clients))
		self.coordinator = AnalysisRequestCoordinator(
			self.speaker,
			VisionAnalyzer(clients),
			self.guard,
			frame_capture=frame_capture,
			intent_classifier=KeywordIntentClassifier(settings.visual_keywords),
		)
		self.lifecycle = SessionLifecycleManager(
			self.session,
			self.coordinator,
			self.speaker,
			CaptureSourceFactory(self.camera, fallback_image),
			greeting_text=settings.greeting_text,
		)
		self.chat = TextChat(ChatCompleter(clients, mode), self.speaker)
		self._chat_tasks: Set[asyncio.Task] = set()

	async def start(self) -> None:
		await self.lifecycle.start()

	def close(self) -> None:
		"""Tear down camera mode, subscriptions, and outstanding chat requests."""
		self.lifecycle.shutdown()
		for task in list(self._chat_tasks):
			task.cancel()

	async def handle(self, payload: Dict[str, Any]) -> None:
		"""Process a single inbound websocket payload."""
		request_id = payload.get("request_id")
		message_type = payload.get("type")
		try:
			result: Optional[Dict[str, Any]] = None
			if message_type == "session.state":
				self._set_state(payload)
			elif message_type == "session.stream_ready":
				self.session.set_stream_ready(bool(payload.get("ready", True)))
			elif message_type == "transcription":
				self.session.emit_transcription((payload.get("text") or "").strip())
			elif message_type == "camera.enable":
				result = await self._enable_camera(payload)
			elif message_type == "camera.disable":
				self.lifecycle.disable_camera_mode()
				result = {"type": "camera.state", "active": False}
			elif message_type == "camera.metadata":
				stream = self._active_stream()
				if stream is not None:
					stream.load_metadata(int(payload.get("width") or 0), int(payload.get("height") or 0))
			elif message_type == "camera.frame":
				self._push_frame(payload)
			elif message_type == "chat.message":
				self._start_chat(request_id, payload)
			elif message_type == "chat.relay":
				await self._relay(payload)
			else:
				raise ValueError("Unsupported message type.")
			if result is not None:
				result["request_id"] = request_id
				await self._send(result)
		except Exception as exc:
			await self._send_error(request_id, str(exc))

	def _set_state(self, payload: Dict[str, Any]) -> None:
		raw_state = (payload.get("state") or "").strip().upper()
		try:
			state = SessionState(raw_state)
		except ValueError as exc:
			raise ValueError(f"Unknown session state '{raw_state}'.") from exc
		self.session.set_state(state)

	async def _enable_camera(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		self.camera.set_devices(payload.get("devices") or [])
		source = await self.lifecycle.enable_camera_mode()
		if source is None:
			return {"type": "camera.state", "active": False}
		result: Dict[str, Any] = {"type": "camera.state", "active": True, "source": source.kind.value}
		if isinstance(source, CameraSource):
			result["facing_mode"] = source.stream.facing_mode
		return result

	def _active_stream(self):
		source = self.lifecycle.source
		if isinstance(source, CameraSource) and source.active:
			return source.stream
		return None

	def _push_frame(self, payload: Dict[str, Any]) -> None:
		stream = self._active_stream()
		if stream is None:
			# Frames racing a camera.disable are dropped.
			return
		data = decode_base64_image(payload.get("image_b64") or "")
		width = payload.get("width")
		height = payload.get("height")
		if width is not None and height is not None:
			stream.push_frame(data, int(width), int(height))
		else:
			stream.push_frame(data)

	def _start_chat(self, request_id: Any, payload: Dict[str, Any]) -> None:
		text = (payload.get("text") or "").strip()
		if not text:
			raise ValueError("message is required")
		task = asyncio.get_running_loop().create_task(self._run_chat(request_id, text))
		self._chat_tasks.add(task)
		task.add_done_callback(self._chat_tasks.discard)

	async def _relay(self, payload: Dict[str, Any]) -> None:
		# CUSTOM sessions have no avatar-side language model.
		if self.mode != SessionMode.FULL:
			raise ValueError("chat.relay is only available in FULL sessions")
		text = (payload.get("text") or "").strip()
		if not text:
			raise ValueError("message is required")
		await self.session.message(text)

	async def _run_chat(self, request_id: Any, text: str) -> None:
		try:
			reply = await self.chat.send_message(text)
		except ConfigurationMissingError as exc:
			LOGGER.error("Chat path not configured: %s", exc)
			await self._send_error(request_id, str(exc), hint=exc.hint)
			return
		except Exception as exc:
			LOGGER.error("Chat message failed: %s", exc)
			await self._send_error(request_id, str(exc))
			return
		await self._send_safely({"type": "chat.response", "request_id": request_id, "text": reply})

	async def _send_error(self, request_id: Any, detail: str, hint: Optional[str] = None) -> None:
		payload: Dict[str, Any] = {"type": "error", "request_id": request_id, "detail": detail}
		if hint:
			payload["hint"] = hint
		await self._send_safely(payload)

	async def _send_safely(self, payload: Dict[str, Any]) -> None:
		try:
			await self._send(payload)
		except Exception:
			LOGGER.warning("Could not deliver %s frame; socket closed?", payload.get("type"))

	async def _send(self, payload: Dict[str, Any]) -> None:
		await self.websocket.send_text(json.dumps(payload))
