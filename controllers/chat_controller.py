from fastapi import Request
from typing import Any, Dict, Optional

from services.providers.chat_completer import ChatCompleter
from services.providers.speech_synthesizer import SpeechSynthesizer


async def complete_chat(
    request: Request, message: str, system_prompt: Optional[str] = None, model: Optional[str] = None
) -> Dict[str, Any]:
    """Return the provider's reply to a single message under `response`."""
    completer = ChatCompleter(request.app.state.provider_clients)
    response = await completer.complete(message, system_prompt=system_prompt, model=model)
    return {"response": response}


async def text_to_speech(request: Request, text: str) -> Dict[str, Any]:
    """Return base64 PCM audio for `text` under `audio`."""
    synthesizer = SpeechSynthesizer(request.app.state.provider_clients)
    audio_b64 = await synthesizer.synthesize_base64(text)
    return {"audio": audio_b64}
