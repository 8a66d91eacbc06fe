from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..bedrock_client import BedrockGateway, get_gateway
from ..schemas import RecommendRequest, RecommendResponse
from ..services.recommendation import recommend_format

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["recommend"])


@router.post("/recommend", response_model=RecommendResponse)
def recommend(req: RecommendRequest, gateway: BedrockGateway = Depends(get_gateway)) -> RecommendResponse:
    """
    Suggest a learning format (video, flashcards, mindmap, quiz or summary) for a topic.
    """
    if not req.userInput or not req.userInput.strip():
        raise HTTPException(status_code=400, detail="Missing input")

    try:
        recommendation = recommend_format(req.userInput, gateway)
    except Exception as e:
        logger.exception("Recommendation failed")
        raise HTTPException(status_code=500, detail=str(e))

    return RecommendResponse(recommendation=recommendation)
