"""Session domain models for realtime avatar conversations."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

ECHO_GUARD_PREFIX_CHARS = 100


class SessionState(str, Enum):
	"""Lifecycle reported by the avatar session collaborator."""

	INACTIVE = "INACTIVE"
	CONNECTING = "CONNECTING"
	CONNECTED = "CONNECTED"
	DISCONNECTED = "DISCONNECTED"


class SessionMode(str, Enum):
	"""Conversation mode requested by the client when the session is created."""

	FULL = "FULL"
	CUSTOM = "CUSTOM"


class CameraModeState(str, Enum):
	"""Camera mode; ACTIVATING_AUTO means the one-shot auto analysis is still owed."""

	INACTIVE = "INACTIVE"
	ACTIVATING_AUTO = "ACTIVATING_AUTO"
	ACTIVE = "ACTIVE"


class GreetingState(str, Enum):
	PENDING = "PENDING"
	SENT = "SENT"


class AnalysisState(str, Enum):
	RUNNING = "RUNNING"
	DONE = "DONE"
	FAILED = "FAILED"


@dataclass
class CapturedImage:
	"""Encoded still image ready to be sent for analysis."""

	data: bytes
	mime_type: str = "image/jpeg"


@dataclass
class PendingAnalysis:
	"""The single in-flight analysis for a session."""

	question: str
	started_at: float
	is_auto: bool = False
	state: AnalysisState = AnalysisState.RUNNING


@dataclass
class EchoGuard:
	"""Prefix of the last response the avatar was asked to speak."""

	last_response_prefix: str = ""
	recorded_at: Optional[float] = None

	def record(self, text: str, now: float) -> None:
		self.last_response_prefix = (text or "")[:ECHO_GUARD_PREFIX_CHARS]
		self.recorded_at = now


@dataclass
class DedupWindow:
	"""Suppresses the same literal question until the window expires."""

	last_question_text: Optional[str] = None
	expires_at: float = 0.0

	def record(self, text: str, now: float, ttl: float) -> None:
		self.last_question_text = text
		self.expires_at = now + ttl

	def shorten(self, now: float, ttl: float) -> None:
		"""Pull the expiry in so a retry of the same question is accepted after `ttl`."""
		self.expires_at = min(self.expires_at, now + ttl)

	def blocks(self, text: str, now: float) -> bool:
		return self.last_question_text is not None and text == self.last_question_text and now < self.expires_at


@dataclass
class SessionRecord:
	"""In-memory bookkeeping for a realtime session id handed to a client."""

	session_id: str
	mode: SessionMode = SessionMode.FULL
	created_at: float = field(default_factory=lambda: time.time())
	closed: bool = False
	attached: bool = False
