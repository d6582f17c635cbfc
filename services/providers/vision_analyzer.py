"""Vision analysis of captured frames via an OpenAI-compatible chat endpoint."""

from __future__ import annotations

import base64
import logging
import time
from typing import Any, Dict, List, Sequence

from openai import APIError, APIStatusError

from models.errors import CollaboratorError
from services.providers.client_factory import ProviderClients
from services.providers.prompts import image_prompt, video_prompt
from services.providers.response_parser import extract_message_text, extract_usage

LOGGER = logging.getLogger(__name__)


def _data_url(image_bytes: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


class VisionAnalyzer:
    """Describe images, or answer a question about them, with the vision model."""

    def __init__(self, clients: ProviderClients) -> None:
        if clients is None:
            raise ValueError("Provider clients are required.")
        self.clients = clients

    async def analyze_image(self, image_bytes: bytes, mime_type: str = "image/jpeg", question: str = "") -> str:
        """Return the spoken-ready analysis of a single image.

        Args:
            image_bytes: Raw (not base64) image bytes.
            mime_type: MIME type of the image.
            question: The user's literal question; empty asks for a general description.

        Raises:
            ValueError: If the image is empty.
            ConfigurationMissingError: If the provider key is absent.
            CollaboratorError: If the provider call fails.
        """
        if not image_bytes:
            raise ValueError("Image content is required for analysis.")
        content: List[Dict[str, Any]] = [
            {"type": "text", "text": image_prompt(question)},
            {"type": "image_url", "image_url": {"url": _data_url(image_bytes, mime_type)}},
        ]
        return await self._complete(content, max_tokens=1000, label="image")

    async def analyze_frames(self, frames_b64: Sequence[str]) -> str:
        """Return an analysis across several base64-encoded JPEG key frames."""
        frames = [frame for frame in frames_b64 if frame]
        if not frames:
            raise ValueError("Video frames are required.")
        content: List[Dict[str, Any]] = [{"type": "text", "text": video_prompt()}]
        for frame in frames:
            content.append({"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{frame}"}})
        return await self._complete(content, max_tokens=1500, label="video")

    async def _complete(self, content: List[Dict[str, Any]], max_tokens: int, label: str) -> str:
        client = self.clients.llm_client()
        model = self.clients.settings.resolved_vision_model()
        start = time.time()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": content}],
                max_tokens=max_tokens,
            )
            analysis = extract_message_text(response)
        except APIStatusError as exc:
            LOGGER.error("Vision API error (%s): %s", exc.status_code, exc.message)
            raise CollaboratorError(f"Failed to analyze {label}", status_code=exc.status_code, details=exc.message) from exc
        except (APIError, RuntimeError) as exc:
            LOGGER.error("Vision request failed: %s", exc)
            raise CollaboratorError(f"Failed to analyze {label}", details=str(exc)) from exc

        usage = extract_usage(response)
        LOGGER.info(
            "Vision %s analysis latency: %.3fs (input_tokens=%s, output_tokens=%s)",
            label,
            time.time() - start,
            usage["input_tokens"],
            usage["output_tokens"],
        )
        return analysis
