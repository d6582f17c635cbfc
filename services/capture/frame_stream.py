"""Live video stream handle fed by the client's camera."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

# Larger reported dimensions are treated as missing.
MAX_FRAME_DIMENSION = 8192


@dataclass
class VideoFrame:
	"""Most recent encoded frame received from the client."""

	data: bytes
	width: int
	height: int


class LiveFrameStream:
	"""Holds the latest frame of one opened camera and exposes readiness as an awaitable.

	The stream is ready once metadata has loaded with non-zero dimensions and at
	least one frame has arrived.
	"""

	def __init__(self, facing_mode: str) -> None:
		self.facing_mode = facing_mode
		self.width = 0
		self.height = 0
		self.metadata_loaded = False
		self.stopped = False
		self._frame: Optional[bytes] = None
		self._ready = asyncio.Event()

	@property
	def ready(self) -> bool:
		return (
			not self.stopped
			and self.metadata_loaded
			and self.width > 0
			and self.height > 0
			and self._frame is not None
		)

	def load_metadata(self, width: int, height: int) -> None:
		if self.stopped:
			return
		self.width = _plausible(width)
		self.height = _plausible(height)
		self.metadata_loaded = True
		self._refresh()

	def push_frame(self, data: bytes, width: Optional[int] = None, height: Optional[int] = None) -> None:
		"""Replace the latest frame; width and height, when given, also update metadata."""
		if self.stopped or not data:
			return
		self._frame = data
		if width is not None and height is not None:
			self.load_metadata(width, height)
		else:
			self._refresh()

	def latest_frame(self) -> Optional[VideoFrame]:
		if self._frame is None:
			return None
		return VideoFrame(data=self._frame, width=self.width, height=self.height)

	async def wait_until_ready(self, timeout: float) -> bool:
		"""Return True once ready, False if `timeout` seconds pass first."""
		if self.ready:
			return True
		try:
			await asyncio.wait_for(self._ready.wait(), timeout)
		except asyncio.TimeoutError:
			return False
		return self.ready

	def stop(self) -> None:
		"""Release the stream; safe to call more than once."""
		self.stopped = True
		self._frame = None
		self._ready.clear()

	def _refresh(self) -> None:
		if self.ready:
			self._ready.set()
		else:
			self._ready.clear()


def _plausible(value: Optional[int]) -> int:
	value = int(value or 0)
	return value if 0 < value <= MAX_FRAME_DIMENSION else 0
