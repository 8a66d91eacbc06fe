from __future__ import annotations

import logging

from ..bedrock_client import BedrockGateway
from ..results import ModelResult, parse_json_reply
from ..schemas import SummaryResult

logger = logging.getLogger(__name__)

SUMMARIZE_PROMPT = """Please provide a comprehensive summary of the following text.

Requirements:
- Create a clear, concise summary that captures the main ideas
- Extract 3-5 key points
- Maintain the original meaning and context
- Use clear, readable language
- Keep the summary significantly shorter than the original

Return ONLY a JSON object:
{{"summary": "the summary", "keyPoints": ["point 1", "point 2"]}}

Text to summarize:
{text}"""


def summarize_text(text: str, gateway: BedrockGateway) -> ModelResult:
    reply = gateway.invoke_text(SUMMARIZE_PROMPT.format(text=text), max_tokens=1500, temperature=0.3)
    raw = reply or ""
    original_words = len(text.split())

    payload = parse_json_reply(raw, dict)
    if payload is None or not payload.get("summary"):
        logger.warning("Summary reply was not a JSON object; returning raw text")
        result = SummaryResult(
            summary=raw.strip(),
            keyPoints=[],
            wordCount=len(raw.split()),
            originalWordCount=original_words,
        )
        return ModelResult.fallback(result, raw=raw)

    summary = str(payload["summary"]).strip()
    key_points = [str(p) for p in payload.get("keyPoints") or [] if p]
    result = SummaryResult(
        summary=summary,
        keyPoints=key_points,
        wordCount=len(summary.split()),
        originalWordCount=original_words,
    )
    return ModelResult.structured(result, raw=raw)
