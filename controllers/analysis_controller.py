from fastapi import Request, UploadFile
from typing import Any, Dict, List, Optional

from services.providers.vision_analyzer import VisionAnalyzer
from utils.media_validation import read_image_bytes, validate_image_file


async def analyze_image(request: Request, image: UploadFile, question: Optional[str] = None) -> Dict[str, Any]:
    """Analyze one uploaded image, optionally answering a question about it.

    Args:
        request: FastAPI Request (used to access the shared provider clients).
        image: Uploaded image file.
        question: Optional user question; omitted asks for a general description.

    Returns:
        A dict containing the analysis text under `analysis`.
    """
    image_bytes = await read_image_bytes(image)
    mime_type = validate_image_file(image)

    analyzer = VisionAnalyzer(request.app.state.provider_clients)
    analysis = await analyzer.analyze_image(image_bytes, mime_type, (question or "").strip())
    return {"analysis": analysis}


async def analyze_video(request: Request, frames: List[str]) -> Dict[str, Any]:
    """Analyze key frames extracted from a clip (base64 JPEG strings)."""
    analyzer = VisionAnalyzer(request.app.state.provider_clients)
    analysis = await analyzer.analyze_frames(frames)
    return {"analysis": analysis}
