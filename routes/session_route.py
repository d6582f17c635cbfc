"""FastAPI routes for realtime avatar sessions."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.session_controller import close_session, start_session

router = APIRouter(prefix="/sessions")


class StartPayload(BaseModel):
	mode: str = "FULL"


@router.post("")
async def start_session_route(request: Request, payload: StartPayload):
	try:
		return await start_session(request, payload.mode)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/close")
async def close_session_route(request: Request, session_id: str):
	try:
		return await close_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
