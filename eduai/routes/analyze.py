from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..bedrock_client import BedrockGateway, get_gateway
from ..schemas import AnalyzeResponse, TextRequest, SummarizeResponse
from ..services.summary import summarize_text
from ..services.vocabulary import analyze_vocabulary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["text"])


@router.post("/analyze", response_model=AnalyzeResponse)
def analyze(req: TextRequest, gateway: BedrockGateway = Depends(get_gateway)) -> AnalyzeResponse:
    """
    Returns the ten most advanced words in the text with their meanings.
    """
    text = req.text or ""
    if not text.strip():
        raise HTTPException(status_code=400, detail="Article content cannot be empty")

    try:
        outcome = analyze_vocabulary(text, gateway)
    except Exception as e:
        logger.exception("Vocabulary analysis failed")
        raise HTTPException(status_code=500, detail=str(e))

    return AnalyzeResponse(result=outcome.value, structured=outcome.is_structured)


@router.post("/summarize", response_model=SummarizeResponse)
def summarize(req: TextRequest, gateway: BedrockGateway = Depends(get_gateway)) -> SummarizeResponse:
    text = req.text or ""
    if not text.strip():
        raise HTTPException(status_code=400, detail="Text content cannot be empty")

    try:
        outcome = summarize_text(text, gateway)
    except Exception as e:
        logger.exception("Summarization failed")
        raise HTTPException(status_code=500, detail=str(e))

    return SummarizeResponse(result=outcome.value, structured=outcome.is_structured)
