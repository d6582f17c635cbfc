"""Named-event subscription with explicit disposers."""

from __future__ import annotations

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List

LOGGER = logging.getLogger(__name__)

Disposer = Callable[[], None]


class SessionEvent(str, Enum):
	"""Events raised by the avatar session collaborator."""

	STATE_CHANGED = "STATE_CHANGED"
	STREAM_READY = "STREAM_READY"
	USER_TRANSCRIPTION = "USER_TRANSCRIPTION"


class _Listener:
	__slots__ = ("callback",)

	def __init__(self, callback: Callable[..., Any]) -> None:
		self.callback = callback


class EventEmitter:
	"""Deliver events to listeners in subscription order.

	`on` returns a disposer; calling it removes exactly that subscription and
	is a no-op after the first call.
	"""

	def __init__(self) -> None:
		self._listeners: Dict[str, List[_Listener]] = defaultdict(list)

	def on(self, event: str, callback: Callable[..., Any]) -> Disposer:
		listener = _Listener(callback)
		self._listeners[event].append(listener)

		def dispose() -> None:
			listeners = self._listeners.get(event, [])
			if listener in listeners:
				listeners.remove(listener)

		return dispose

	def emit(self, event: str, *args: Any) -> None:
		for listener in list(self._listeners.get(event, [])):
			try:
				listener.callback(*args)
			except Exception:
				LOGGER.exception("Listener for %s failed", event)

	def listener_count(self, event: str) -> int:
		return len(self._listeners.get(event, []))
