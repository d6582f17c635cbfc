"""FastAPI routes for chat completion and speech synthesis."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.chat_controller import complete_chat, text_to_speech
from utils.http_errors import provider_http_exception

router = APIRouter(prefix="/api", tags=["chat"])


class ChatPayload(BaseModel):
    message: str = ""
    system_prompt: Optional[str] = None
    model: Optional[str] = None


class SpeechPayload(BaseModel):
    text: str = ""


@router.post("/chat-complete")
async def chat_complete_route(request: Request, payload: ChatPayload):
    """Return the assistant's reply to one message."""
    if not payload.message:
        raise HTTPException(status_code=400, detail={"error": "message is required"})
    try:
        return await complete_chat(request, payload.message, payload.system_prompt, payload.model)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise provider_http_exception(exc, "Failed to generate response") from exc


@router.post("/text-to-speech")
async def text_to_speech_route(request: Request, payload: SpeechPayload):
    """Return base64 PCM audio for the given text."""
    if not payload.text:
        raise HTTPException(status_code=400, detail={"error": "text is required"})
    try:
        return await text_to_speech(request, payload.text)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise provider_http_exception(exc, "Failed to generate speech") from exc
