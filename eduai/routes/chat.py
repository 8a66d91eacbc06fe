from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from ..bedrock_client import BedrockGateway, get_gateway
from ..config import Settings, get_settings
from ..schemas import ChatRequest, ChatResponse
from ..services.chat import chat_reply

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chatbox", response_model=ChatResponse)
def chatbox(
    req: ChatRequest,
    gateway: BedrockGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> ChatResponse:
    """
    One turn of the study-assistant chat.

    - **message**: The user's new message.
    - **conversationHistory**: Earlier `{role, content}` turns, oldest first.
    """
    if not req.message or not isinstance(req.message, str):
        raise HTTPException(status_code=400, detail="Message is required and must be a string")

    history = [turn.model_dump() for turn in req.conversationHistory]
    try:
        outcome = chat_reply(req.message, history, gateway)
    except Exception as e:
        logger.exception("Chat failed")
        raise HTTPException(status_code=500, detail=f"Failed to process chat message: {e}")

    return ChatResponse(
        response=outcome.value,
        model=settings.bedrock_model_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
        structured=outcome.is_structured,
    )
