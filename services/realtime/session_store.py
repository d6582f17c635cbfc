"""Simple in-memory store for realtime sessions."""

from __future__ import annotations

from typing import Dict
from uuid import uuid4

from models.session_models import SessionMode, SessionRecord


class SessionStore:
	"""Track the session ids handed to clients; nothing outlives the process."""

	def __init__(self) -> None:
		self._sessions: Dict[str, SessionRecord] = {}

	def create(self, mode: SessionMode = SessionMode.FULL) -> SessionRecord:
		"""Create a new session in the requested conversation mode."""
		record = SessionRecord(session_id=uuid4().hex, mode=mode)
		self._sessions[record.session_id] = record
		return record

	def get(self, session_id: str) -> SessionRecord:
		"""Return a session or raise KeyError if missing."""
		record = self._sessions.get(session_id)
		if record is None:
			raise KeyError(f"Session {session_id} not found")
		return record

	def close(self, session_id: str) -> SessionRecord:
		"""Mark a session as closed; its websocket is refused afterwards."""
		record = self.get(session_id)
		record.closed = True
		return record

	def remove(self, session_id: str) -> None:
		"""Forget a session; unknown ids are ignored."""
		self._sessions.pop(session_id, None)
