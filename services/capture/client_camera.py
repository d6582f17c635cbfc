"""Camera opener backed by devices the browser client reports."""

from __future__ import annotations

from typing import Iterable, Set

from models.errors import NoDeviceError
from services.capture.frame_stream import LiveFrameStream


class ClientCameraOpener:
    """Open one of the facing modes the client says it can stream.

    The client announces its devices when it enables camera mode and then
    pushes metadata and frames for the stream it was told to open.
    """

    def __init__(self) -> None:
        self.devices: Set[str] = set()

    def set_devices(self, devices: Iterable[str]) -> None:
        self.devices = {str(device).strip().lower() for device in devices if device}

    async def __call__(self, facing_mode: str) -> LiveFrameStream:
        if facing_mode not in self.devices:
            raise NoDeviceError(f"Client reported no '{facing_mode}' camera")
        return LiveFrameStream(facing_mode)
