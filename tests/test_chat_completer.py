"""Tests for per-mode chat provider selection."""

import asyncio
from types import SimpleNamespace

import pytest

from models.errors import ConfigurationMissingError
from models.session_models import SessionMode
from services.providers.chat_completer import ChatCompleter
from services.providers.client_factory import ProviderClients
from utils.settings import Settings


class _Completions:
    def __init__(self, content: str) -> None:
        self.content = content
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)


def _clients(settings: Settings):
    grok = _Completions("Grok here!")
    gpt = _Completions("GPT here!")
    clients = ProviderClients(settings)
    clients._clients["xai"] = SimpleNamespace(chat=SimpleNamespace(completions=grok))
    clients._clients["openai"] = SimpleNamespace(chat=SimpleNamespace(completions=gpt))
    return clients, grok, gpt


OPENAI_SETTINGS = Settings(llm_provider="openai", openai_api_key="sk-openai", xai_api_key="xai-key")


def test_full_mode_always_chats_with_grok():
    clients, grok, gpt = _clients(OPENAI_SETTINGS)

    reply = asyncio.run(ChatCompleter(clients, SessionMode.FULL).complete("hi"))

    assert reply == "Grok here!"
    assert grok.requests[0]["model"] == "grok-2-latest"
    assert gpt.requests == []


def test_custom_mode_follows_llm_provider():
    clients, grok, gpt = _clients(OPENAI_SETTINGS)

    reply = asyncio.run(ChatCompleter(clients, SessionMode.CUSTOM).complete("hi"))

    assert reply == "GPT here!"
    assert gpt.requests[0]["model"] == "gpt-4o-mini"
    assert grok.requests == []


def test_full_mode_honors_chat_model_when_xai_is_the_provider():
    settings = Settings(llm_provider="xai", xai_api_key="xai-key", chat_model="grok-3")
    clients, grok, _ = _clients(settings)

    asyncio.run(ChatCompleter(clients, SessionMode.FULL).complete("hi"))

    assert grok.requests[0]["model"] == "grok-3"


def test_full_mode_without_xai_key_is_configuration_error():
    clients = ProviderClients(Settings(llm_provider="openai", openai_api_key="sk-openai"))

    with pytest.raises(ConfigurationMissingError) as excinfo:
        asyncio.run(ChatCompleter(clients, SessionMode.FULL).complete("hi"))
    assert excinfo.value.hint == "Please set XAI_API_KEY environment variable"
