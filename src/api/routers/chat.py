"""
Chat endpoints: submit typed or photographed problems and read back the solution panel.
"""
import logging
from fastapi import APIRouter, UploadFile, File, Depends, HTTPException

from ..models.chat import TextProblemRequest, ChatResponse, ChatData
from ..dependencies.session import get_session_manager, get_orchestrator, SessionManager
from src.pipeline.orchestrator.orchestrator import SolveOrchestrator
from src.pipeline.orchestrator.session import ChatSession

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_session(chat_id: str, session_manager: SessionManager) -> ChatSession:
    session = session_manager.get_session(chat_id)
    if not session:
        raise HTTPException(status_code=404, detail="Chat not found or session expired")
    return session


def _chat_response(session: ChatSession, message: str) -> ChatResponse:
    return ChatResponse(success=True, message=message, data=ChatData.from_session(session))


@router.post("", response_model=ChatResponse)
async def create_chat(session_manager: SessionManager = Depends(get_session_manager)):
    session = session_manager.create_session()
    return _chat_response(session, "Chat created")


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(chat_id: str, session_manager: SessionManager = Depends(get_session_manager)):
    session = _require_session(chat_id, session_manager)
    return _chat_response(session, "Chat state")


@router.post("/{chat_id}/text", response_model=ChatResponse)
async def submit_text(
    chat_id: str,
    request: TextProblemRequest,
    session_manager: SessionManager = Depends(get_session_manager),
    orchestrator: SolveOrchestrator = Depends(get_orchestrator),
):
    session = _require_session(chat_id, session_manager)
    run = await orchestrator.submit_text(session, request.text)
    if run is None:
        return _chat_response(session, "Empty input ignored")
    return _chat_response(session, f"Run {run.request_id} {run.status.value}")


@router.post("/{chat_id}/image", response_model=ChatResponse)
async def submit_image(
    chat_id: str,
    file: UploadFile = File(...),
    session_manager: SessionManager = Depends(get_session_manager),
    orchestrator: SolveOrchestrator = Depends(get_orchestrator),
):
    session = _require_session(chat_id, session_manager)
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {file.content_type}.")

    content = await file.read()
    logger.info(f"Chat {chat_id}: received image {file.filename} ({len(content)} bytes)")
    run = await orchestrator.submit_image(session, content)
    return _chat_response(session, f"Run {run.request_id} {run.status.value}")


@router.post("/{chat_id}/reset", response_model=ChatResponse)
async def reset_chat(chat_id: str, session_manager: SessionManager = Depends(get_session_manager)):
    session = _require_session(chat_id, session_manager)
    session.reset()
    return _chat_response(session, "New chat started")


@router.delete("/{chat_id}")
async def delete_chat(chat_id: str, session_manager: SessionManager = Depends(get_session_manager)):
    if not session_manager.delete_session(chat_id):
        raise HTTPException(status_code=404, detail="Chat not found or session expired")
    return {"success": True, "message": "Chat deleted"}
