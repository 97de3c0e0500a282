"""
api/endpoints/chat_routes.py — Persona chat pass-through.

POST /api/chat — Forward a message to the LLM as the selected persona
"""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from api.deps import error_detail, require_client
from api.schemas import ChatResponse
from botengine.conversation.processor import ChatUnavailableError, handle_message
from botengine.db.session import get_db
from botengine.security.auth import AuthContext
from botengine.security.sanitize import sanitize_input, validate_request_data

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/chat", response_model=ChatResponse, summary="Chat with a persona")
def chat(
    payload: dict = Body(...),
    auth: AuthContext = Depends(require_client("chat")),
    db: Session = Depends(get_db),
):
    """Body: {botType, message, sessionId}. History is kept per sessionId."""
    data = sanitize_input(payload)
    validation = validate_request_data(data, required=("botType", "message", "sessionId"))
    if not validation.is_valid:
        raise HTTPException(
            status_code=400,
            detail=error_detail("Invalid chat request", "VALIDATION_ERROR", details=validation.errors),
        )

    try:
        reply = handle_message(
            data["botType"],
            data["message"],
            data["sessionId"],
            db,
            client_id=auth.client.client_id,
        )
    except ChatUnavailableError as e:
        raise HTTPException(status_code=503, detail=error_detail(str(e), "CHAT_UNAVAILABLE")) from e

    return {"success": True, "reply": reply.reply, "sessionId": reply.session_id}
