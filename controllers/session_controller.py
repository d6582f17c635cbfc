"""Session lifecycle helpers for realtime avatar sessions."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request

from models.session_models import SessionMode
from services.realtime.session_store import SessionStore


async def start_session(request: Request, mode: str) -> Dict[str, Any]:
	"""Create a new realtime session and return its id."""
	try:
		session_mode = SessionMode((mode or "FULL").upper())
	except ValueError as exc:
		raise HTTPException(status_code=400, detail=f"Unsupported mode '{mode}'") from exc
	store: SessionStore = request.app.state.session_store
	record = store.create(mode=session_mode)
	return {"session_id": record.session_id, "mode": record.mode.value}


async def close_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Close a session so no new websocket can attach to it.

	A session with no websocket attached is forgotten immediately; otherwise it
	is removed when its websocket ends.
	"""
	store: SessionStore = request.app.state.session_store
	try:
		record = store.close(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	if not record.attached:
		store.remove(session_id)
	return {"session_id": record.session_id, "closed": True}
