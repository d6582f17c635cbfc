"""WebSocket endpoint for the live avatar orchestration channel."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.websockets import WebSocketDisconnect

from services.realtime.session_store import SessionStore
from services.realtime.ws_session import RealtimeSessionHandler

LOGGER = logging.getLogger(__name__)

router = APIRouter()


def _require_session_store(websocket: WebSocket) -> SessionStore:
	store = getattr(websocket.app.state, "session_store", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Session store unavailable")
	return store


@router.websocket("/ws/{session_id}")
async def realtime_socket(websocket: WebSocket, session_id: str, store: SessionStore = Depends(_require_session_store)):
	"""Run one avatar session: lifecycle, camera mode, transcriptions, and chat."""
	await websocket.accept()
	try:
		record = store.get(session_id)
	except KeyError:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Session not found"}))
		await websocket.close()
		return
	if record.closed:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Session is closed; start a new session."}))
		await websocket.close()
		return
	if record.attached:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Session already has a live connection."}))
		await websocket.close()
		return

	record.attached = True
	state = websocket.app.state
	handler = RealtimeSessionHandler(
		websocket, state.provider_clients, state.settings, state.fallback_image, mode=record.mode
	)
	try:
		await handler.start()
		while True:
			try:
				raw = await websocket.receive_text()
			except WebSocketDisconnect:
				break
			try:
				payload = json.loads(raw)
			except Exception:
				await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be JSON"}))
				continue
			if not isinstance(payload, dict):
				await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be a JSON object"}))
				continue
			await handler.handle(payload)
	finally:
		handler.close()
		store.remove(session_id)
		LOGGER.info("Realtime session %s ended", session_id)
	try:
		await websocket.close()
	except Exception:
		pass
