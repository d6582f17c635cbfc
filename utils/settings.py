"""Environment-backed configuration loaded once at process start."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

XAI_BASE_URL = "https://api.x.ai/v1"
DEFAULT_GREETING = "Hello I am 6, your personal assistant, how can I help you today"

DEFAULT_MODELS = {
    "xai": {"vision": "grok-2-vision-1212", "chat": "grok-2-latest"},
    "openai": {"vision": "gpt-4o-mini", "chat": "gpt-4o-mini"},
}

DEFAULT_VISUAL_KEYWORDS: Tuple[str, ...] = (
    "camera",
    "what do you see",
    "what can you see",
    "describe what you see",
    "look at",
    "looking at",
    "analyze",
    "analyse",
    "what is this",
    "what's this",
    "what am i holding",
    "can you see",
    "in front of me",
    "describe this",
    "tell me about this",
)


def _env_str(key: str, default: str = "") -> str:
    return (os.getenv(key) or default).strip()


def _env_list(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(key, "")
    if not value:
        return default
    return tuple(item.strip().lower() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Provider credentials and orchestration tunables.

    Attributes:
        llm_provider: Either "xai" or "openai"; selects the chat and vision backend.
        openai_api_key: Key for OpenAI (also used for speech synthesis).
        xai_api_key: Key for xAI.
        vision_model: Optional override for the vision model.
        chat_model: Optional override for the chat model.
        tts_model: OpenAI speech synthesis model.
        tts_voice: OpenAI speech synthesis voice.
        fallback_image_path: Static image analyzed when no camera can be opened.
        greeting_text: Sentence spoken once per connected session.
        visual_keywords: Phrases that mark an utterance as a visual query.
    """

    llm_provider: str = "xai"
    openai_api_key: str = ""
    xai_api_key: str = ""
    vision_model: Optional[str] = None
    chat_model: Optional[str] = None
    tts_model: str = "gpt-4o-mini-tts"
    tts_voice: str = "alloy"
    fallback_image_path: Optional[str] = None
    greeting_text: str = DEFAULT_GREETING
    visual_keywords: Tuple[str, ...] = field(default=DEFAULT_VISUAL_KEYWORDS)

    @property
    def use_xai(self) -> bool:
        return self.llm_provider == "xai"

    @property
    def provider_name(self) -> str:
        return "xAI" if self.use_xai else "OpenAI"

    def resolved_vision_model(self) -> str:
        return self.vision_model or DEFAULT_MODELS[self._provider_key()]["vision"]

    def resolved_chat_model(self) -> str:
        return self.chat_model or DEFAULT_MODELS[self._provider_key()]["chat"]

    def full_mode_chat_model(self) -> str:
        """FULL sessions always chat with Grok; CHAT_MODEL applies only when xAI is the provider."""
        if self.use_xai and self.chat_model:
            return self.chat_model
        return DEFAULT_MODELS["xai"]["chat"]

    def _provider_key(self) -> str:
        return "xai" if self.use_xai else "openai"


def load_settings() -> Settings:
    """Read settings from the process environment."""
    provider = _env_str("LLM_PROVIDER", "xai").lower()
    if provider not in DEFAULT_MODELS:
        raise ValueError(f"Unsupported LLM_PROVIDER '{provider}'. Supported: {', '.join(DEFAULT_MODELS)}")
    return Settings(
        llm_provider=provider,
        openai_api_key=_env_str("OPENAI_API_KEY"),
        xai_api_key=_env_str("XAI_API_KEY"),
        vision_model=_env_str("VISION_MODEL") or None,
        chat_model=_env_str("CHAT_MODEL") or None,
        tts_model=_env_str("TTS_MODEL", "gpt-4o-mini-tts"),
        tts_voice=_env_str("TTS_VOICE", "alloy"),
        fallback_image_path=_env_str("FALLBACK_IMAGE_PATH") or None,
        greeting_text=_env_str("GREETING_TEXT", DEFAULT_GREETING),
        visual_keywords=_env_list("VISUAL_QUERY_KEYWORDS", DEFAULT_VISUAL_KEYWORDS),
    )
