"""FastAPI routes for image and video analysis."""

from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.analysis_controller import analyze_image, analyze_video
from utils.http_errors import provider_http_exception

router = APIRouter(prefix="/api", tags=["analysis"])


class VideoPayload(BaseModel):
    frames: List[str] = []


@router.post("/analyze-image")
async def analyze_image_route(
    request: Request, image: Optional[UploadFile] = File(None), question: Optional[str] = Form(None)
):
    """Describe an uploaded image, or answer `question` about it."""
    if image is None:
        raise HTTPException(status_code=400, detail={"error": "Image file is required"})
    try:
        return await analyze_image(request, image, question)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise provider_http_exception(exc, "Failed to analyze image") from exc


@router.post("/analyze-video")
async def analyze_video_route(request: Request, payload: VideoPayload):
    """Describe a clip from its extracted key frames."""
    if not payload.frames:
        raise HTTPException(status_code=400, detail={"error": "Video frames are required"})
    try:
        return await analyze_video(request, payload.frames)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise provider_http_exception(exc, "Failed to analyze video") from exc
