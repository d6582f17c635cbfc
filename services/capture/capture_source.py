"""Capture sources: a live camera stream or a static fallback image."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence, Union

from models.errors import NoDeviceError
from models.session_models import CapturedImage
from services.capture.frame_stream import LiveFrameStream

LOGGER = logging.getLogger(__name__)

# Rear-facing first, then front-facing.
FACING_MODES = ("environment", "user")

CameraOpener = Callable[[str], Awaitable[LiveFrameStream]]


class CaptureSourceKind(str, Enum):
    CAMERA = "camera"
    STATIC_IMAGE = "static_image"


class CaptureSource:
    """Exactly one of a camera stream or a static image, active until deactivated."""

    kind: CaptureSourceKind

    def __init__(self) -> None:
        self.active = True

    def current_frame_source(self) -> Union[LiveFrameStream, CapturedImage]:
        raise NotImplementedError

    def deactivate(self) -> None:
        self.active = False


class CameraSource(CaptureSource):
    kind = CaptureSourceKind.CAMERA

    def __init__(self, stream: LiveFrameStream) -> None:
        super().__init__()
        self.stream = stream

    def current_frame_source(self) -> LiveFrameStream:
        return self.stream

    def deactivate(self) -> None:
        if self.active:
            self.stream.stop()
            LOGGER.info("Camera stream (%s) stopped", self.stream.facing_mode)
        super().deactivate()


class StaticImageSource(CaptureSource):
    kind = CaptureSourceKind.STATIC_IMAGE

    def __init__(self, image: CapturedImage) -> None:
        super().__init__()
        self.image = image

    def current_frame_source(self) -> CapturedImage:
        return self.image


class CaptureSourceFactory:
    """Open the best available camera, falling back to a static image.

    Args:
        open_camera: Coroutine taking a facing mode and returning a stream, or
            raising NoDeviceError when no such device exists.
        fallback_image: Image used when every facing mode fails.
        facing_modes: Preference order of facing modes.
    """

    def __init__(
        self,
        open_camera: Optional[CameraOpener],
        fallback_image: CapturedImage,
        facing_modes: Sequence[str] = FACING_MODES,
    ) -> None:
        self.open_camera = open_camera
        self.fallback_image = fallback_image
        self.facing_modes = tuple(facing_modes)

    async def activate(self) -> CaptureSource:
        """Return a camera source if any device opens, otherwise the static fallback."""
        if self.open_camera is not None:
            for facing_mode in self.facing_modes:
                try:
                    stream = await self.open_camera(facing_mode)
                except NoDeviceError as exc:
                    LOGGER.info("No %s camera available: %s", facing_mode, exc)
                    continue
                LOGGER.info("Opened %s camera", facing_mode)
                return CameraSource(stream)
        LOGGER.warning("No camera could be opened; using the static fallback image")
        return StaticImageSource(self.fallback_image)
