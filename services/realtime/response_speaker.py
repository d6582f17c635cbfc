"""Dispatch spoken responses to the avatar, keeping the echo guard current."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from models.session_models import EchoGuard
from services.providers.speech_synthesizer import SpeechSynthesizer
from services.realtime.avatar_session import AvatarSession

LOGGER = logging.getLogger(__name__)


class ResponseSpeaker:
	"""Every response passes through here so the echo guard sees it before the avatar speaks."""

	def __init__(
		self,
		session: AvatarSession,
		guard: EchoGuard,
		synthesizer: Optional[SpeechSynthesizer] = None,
		clock: Callable[[], float] = time.monotonic,
	) -> None:
		self.session = session
		self.guard = guard
		self.synthesizer = synthesizer
		self.clock = clock

	async def speak(self, text: str) -> None:
		"""Have the avatar say `text` verbatim."""
		if not text:
			return
		self.guard.record(text, self.clock())
		await self.session.repeat(text)

	async def speak_synthesized(self, text: str) -> None:
		"""Synthesize `text` and play the audio through the avatar."""
		if not text:
			return
		if self.synthesizer is None:
			raise RuntimeError("No speech synthesizer configured.")
		self.guard.record(text, self.clock())
		audio = await self.synthesizer.synthesize(text)
		LOGGER.info("Playing %d bytes of synthesized audio", len(audio))
		await self.session.repeat_audio(audio)
