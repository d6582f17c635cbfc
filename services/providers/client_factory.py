"""Lazily built OpenAI-compatible clients for the configured providers."""

from __future__ import annotations

import inspect
import logging
from typing import Dict

from openai import AsyncOpenAI

from models.errors import ConfigurationMissingError
from utils.settings import XAI_BASE_URL, Settings

LOGGER = logging.getLogger(__name__)


class ProviderClients:
    """Hand out one AsyncOpenAI client per provider, created on first use.

    A missing key never prevents start-up; it only makes the routes that need
    that provider raise ConfigurationMissingError.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._clients: Dict[str, AsyncOpenAI] = {}

    def llm_client(self) -> AsyncOpenAI:
        """Return the client for the chat/vision provider selected by LLM_PROVIDER."""
        if self.settings.use_xai:
            return self.xai_client()
        return self._get("openai", self.settings.openai_api_key, "OpenAI", "OPENAI_API_KEY")

    def xai_client(self) -> AsyncOpenAI:
        """Return the xAI client regardless of LLM_PROVIDER."""
        return self._get("xai", self.settings.xai_api_key, "xAI", "XAI_API_KEY", base_url=XAI_BASE_URL)

    def speech_client(self) -> AsyncOpenAI:
        """Return the client used for speech synthesis (always OpenAI)."""
        return self._get("openai", self.settings.openai_api_key, "OpenAI", "OPENAI_API_KEY")

    def status(self) -> Dict[str, bool]:
        return {
            "llm_configured": bool(self.settings.xai_api_key if self.settings.use_xai else self.settings.openai_api_key),
            "speech_configured": bool(self.settings.openai_api_key),
        }

    def _get(self, key: str, api_key: str, provider: str, env_var: str, base_url: str | None = None) -> AsyncOpenAI:
        if not api_key:
            raise ConfigurationMissingError(provider, env_var)
        client = self._clients.get(key)
        if client is None:
            try:
                client = AsyncOpenAI(api_key=api_key, base_url=base_url) if base_url else AsyncOpenAI(api_key=api_key)
            except Exception as exc:
                raise RuntimeError(f"Failed to initialize {provider} async client") from exc
            LOGGER.info("Initialized %s client", provider)
            self._clients[key] = client
        return client

    async def aclose(self) -> None:
        """Close every client that was created."""
        for client in list(self._clients.values()):
            aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
            if aclose is None:
                continue
            try:
                result = aclose()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                LOGGER.warning("Ignoring error while closing provider client", exc_info=True)
        self._clients.clear()
