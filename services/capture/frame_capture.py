"""Produce a single still image from the active capture source."""

from __future__ import annotations

import asyncio
import io
import logging

from PIL import Image

from models.errors import FrameNotReadyError, NoDeviceError, NoDimensionsError
from models.session_models import CapturedImage
from services.capture.capture_source import CaptureSource
from services.capture.frame_stream import LiveFrameStream

LOGGER = logging.getLogger(__name__)

CAPTURE_TIMEOUT_SECONDS = 3.0
JPEG_QUALITY = 95


def render_jpeg(frame_bytes: bytes, width: int, height: int, quality: int = JPEG_QUALITY) -> bytes:
    """Draw one frame onto an RGB raster of the stream's dimensions and encode it as JPEG.

    Raises:
        FrameNotReadyError: If the frame bytes are not a decodable image or
            cannot be rendered at the reported dimensions.
    """
    try:
        src = Image.open(io.BytesIO(frame_bytes))
        src.load()
    except Exception as exc:
        raise FrameNotReadyError("Latest frame could not be decoded") from exc

    try:
        if src.mode != "RGB":
            src = src.convert("RGB")
        if src.size != (width, height):
            src = src.resize((width, height), Image.LANCZOS)

        canvas = Image.new("RGB", (width, height))
        canvas.paste(src)

        out_io = io.BytesIO()
        canvas.save(out_io, format="JPEG", quality=quality)
    except (ValueError, OverflowError, OSError, MemoryError) as exc:
        raise FrameNotReadyError(f"Frame could not be rendered at {width}x{height}") from exc
    return out_io.getvalue()



class FrameCapture:
    """Capture a still from a CaptureSource, waiting a bounded time for live streams."""

    def __init__(self, timeout: float = CAPTURE_TIMEOUT_SECONDS, quality: int = JPEG_QUALITY) -> None:
        self.timeout = timeout
        self.quality = quality

    async def capture(self, source: CaptureSource) -> CapturedImage:
        """Return one encoded still.

        Raises:
            NoDeviceError: If there is no usable source at all.
            FrameNotReadyError: If the stream is not ready within the timeout.
            NoDimensionsError: If the stream loaded metadata with zero dimensions.
        """
        if source is None or not source.active:
            raise NoDeviceError("No capture source is active.")

        frame_source = source.current_frame_source()
        if isinstance(frame_source, CapturedImage):
            if not frame_source.data:
                raise NoDeviceError("Fallback image is empty.")
            return frame_source

        if isinstance(frame_source, LiveFrameStream):
            stream = frame_source
            if not await stream.wait_until_ready(self.timeout):
                if stream.metadata_loaded and (stream.width == 0 or stream.height == 0):
                    raise NoDimensionsError("Video reported zero dimensions.")
                raise FrameNotReadyError(f"Video not ready after {self.timeout:.1f}s.")
            frame = stream.latest_frame()
            if frame is None:
                raise FrameNotReadyError("No frame available.")
            data = await asyncio.to_thread(render_jpeg, frame.data, frame.width, frame.height, self.quality)
            LOGGER.info("Captured %dx%d frame (%d bytes)", frame.width, frame.height, len(data))
            return CapturedImage(data=data, mime_type="image/jpeg")

        raise NoDeviceError(f"Unsupported capture source: {type(source).__name__}")
