"""Load the static image analyzed when no camera is available."""

from __future__ import annotations

import io
import logging
import mimetypes
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw

from models.session_models import CapturedImage

LOGGER = logging.getLogger(__name__)

PLACEHOLDER_SIZE = (640, 480)


def load_fallback_image(path: Optional[str]) -> CapturedImage:
    """Return the configured fallback image, or a generated placeholder.

    The placeholder keeps camera mode usable when the configured file is
    missing or unreadable.
    """
    if path:
        file_path = Path(path)
        try:
            data = file_path.read_bytes()
        except OSError as exc:
            LOGGER.warning("Fallback image %s unreadable (%s); using placeholder", file_path, exc)
        else:
            if data:
                mime_type = mimetypes.guess_type(file_path.name)[0] or "image/jpeg"
                return CapturedImage(data=data, mime_type=mime_type)
            LOGGER.warning("Fallback image %s is empty; using placeholder", file_path)
    return _placeholder()


def _placeholder() -> CapturedImage:
    canvas = Image.new("RGB", PLACEHOLDER_SIZE, (128, 128, 128))
    draw = ImageDraw.Draw(canvas)
    draw.text((20, PLACEHOLDER_SIZE[1] // 2), "No camera available", fill=(255, 255, 255))
    out_io = io.BytesIO()
    canvas.save(out_io, format="JPEG", quality=95)
    return CapturedImage(data=out_io.getvalue(), mime_type="image/jpeg")
