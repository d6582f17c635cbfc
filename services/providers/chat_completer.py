"""Conversational chat completion for the non-visual path."""

from __future__ import annotations

import logging
from typing import Optional

from openai import APIError, APIStatusError

from models.errors import CollaboratorError
from models.session_models import SessionMode
from services.providers.client_factory import ProviderClients
from services.providers.prompts import chat_system_prompt
from services.providers.response_parser import extract_message_text

LOGGER = logging.getLogger(__name__)


class ChatCompleter:
    """Send one user message (plus system prompt) and return the reply text.

    FULL sessions chat with Grok on xAI; CUSTOM sessions use the provider
    selected by LLM_PROVIDER.
    """

    def __init__(self, clients: ProviderClients, mode: SessionMode = SessionMode.CUSTOM) -> None:
        if clients is None:
            raise ValueError("Provider clients are required.")
        self.clients = clients
        self.mode = mode

    async def complete(self, message: str, system_prompt: Optional[str] = None, model: Optional[str] = None) -> str:
        if not message:
            raise ValueError("message is required")
        settings = self.clients.settings
        if self.mode == SessionMode.FULL:
            client = self.clients.xai_client()
            selected_model = model or settings.full_mode_chat_model()
            provider = "xAI"
        else:
            client = self.clients.llm_client()
            selected_model = model or settings.resolved_chat_model()
            provider = settings.provider_name

        try:
            response = await client.chat.completions.create(
                model=selected_model,
                messages=[
                    {"role": "system", "content": system_prompt or chat_system_prompt()},
                    {"role": "user", "content": message},
                ],
            )
            return extract_message_text(response)
        except APIStatusError as exc:
            LOGGER.error("%s API error (%s): %s", provider, exc.status_code, exc.message)
            raise CollaboratorError(
                f"Failed to generate response from {provider}", status_code=exc.status_code, details=exc.message
            ) from exc
        except (APIError, RuntimeError) as exc:
            LOGGER.error("%s chat request failed: %s", provider, exc)
            raise CollaboratorError(f"Failed to generate response from {provider}", details=str(exc)) from exc
