"""Typed conversation path: chat completion spoken through synthesized audio."""

from __future__ import annotations

from services.providers.chat_completer import ChatCompleter
from services.realtime.response_speaker import ResponseSpeaker


class TextChat:
	def __init__(self, completer: ChatCompleter, speaker: ResponseSpeaker) -> None:
		self.completer = completer
		self.speaker = speaker

	async def send_message(self, message: str) -> str:
		"""Return the reply after the avatar has been handed its audio."""
		reply = await self.completer.complete(message)
		await self.speaker.speak_synthesized(reply)
		return reply
