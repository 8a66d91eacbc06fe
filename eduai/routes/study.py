from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..bedrock_client import BedrockGateway, get_gateway
from ..schemas import MindMapResponse, QuizResponse, TextRequest
from ..services.mindmap import generate_mindmap
from ..services.quiz import generate_quiz

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["study"])


@router.post("/quiz", response_model=QuizResponse)
def quiz(req: TextRequest, gateway: BedrockGateway = Depends(get_gateway)) -> QuizResponse:
    """
    Multiple-choice questions about the text. `structured` is false when the
    questions were built from keywords because the model was unavailable.
    """
    text = req.text or ""
    if not text.strip():
        raise HTTPException(status_code=400, detail="Article content cannot be empty")

    try:
        outcome = generate_quiz(text, gateway)
    except Exception as e:
        logger.exception("Quiz generation failed")
        raise HTTPException(status_code=500, detail=f"Failed to generate quiz: {e}")

    return QuizResponse(result=outcome.value, structured=outcome.is_structured)


@router.post("/mindmap", response_model=MindMapResponse)
def mindmap(req: TextRequest, gateway: BedrockGateway = Depends(get_gateway)) -> MindMapResponse:
    text = req.text or ""
    if not text.strip():
        raise HTTPException(status_code=400, detail="Text content cannot be empty")

    try:
        outcome = generate_mindmap(text, gateway)
    except Exception as e:
        logger.exception("Mind map generation failed")
        raise HTTPException(status_code=500, detail=f"Failed to generate mind map: {e}")

    return MindMapResponse(result=outcome.value, structured=outcome.is_structured)
