"""Text-to-speech producing raw PCM for the avatar's audio playback primitive."""

from __future__ import annotations

import base64
import logging

from openai import APIError, APIStatusError

from models.errors import CollaboratorError
from services.providers.client_factory import ProviderClients

LOGGER = logging.getLogger(__name__)


class SpeechSynthesizer:
    """Synthesize speech with the OpenAI audio API (24 kHz 16-bit mono PCM)."""

    def __init__(self, clients: ProviderClients) -> None:
        if clients is None:
            raise ValueError("Provider clients are required.")
        self.clients = clients

    async def synthesize(self, text: str) -> bytes:
        """Return raw PCM bytes for `text`."""
        if not text:
            raise ValueError("text is required")
        client = self.clients.speech_client()
        settings = self.clients.settings
        try:
            response = await client.audio.speech.create(
                model=settings.tts_model,
                voice=settings.tts_voice,
                input=text,
                response_format="pcm",
            )
        except APIStatusError as exc:
            LOGGER.error("Speech API error (%s): %s", exc.status_code, exc.message)
            raise CollaboratorError("Failed to generate speech", status_code=exc.status_code, details=exc.message) from exc
        except APIError as exc:
            LOGGER.error("Speech request failed: %s", exc)
            raise CollaboratorError("Failed to generate speech", details=str(exc)) from exc

        audio = response.content
        if not audio:
            raise CollaboratorError("No audio data received from speech provider")
        return audio

    async def synthesize_base64(self, text: str) -> str:
        audio = await self.synthesize(text)
        return base64.b64encode(audio).decode("utf-8")
