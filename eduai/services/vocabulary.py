from __future__ import annotations

import logging
from typing import List

from ..bedrock_client import BedrockGateway
from ..results import ModelResult, parse_json_reply
from ..schemas import VocabEntry

logger = logging.getLogger(__name__)

PARSE_ERROR_WORD = "Parse error"

VOCAB_PROMPT = """You are a vocabulary tutor for advanced learners.
Read the text below and pick the 10 rarest or most advanced words it uses.
For each word give a short, clear definition that fits how the word is used in the text.

Return ONLY a JSON array, with no commentary before or after it:
[
  {{"word": "the word", "meaning": "its definition"}}
]

Text to analyze:
{text}"""


def build_vocab_prompt(text: str) -> str:
    return VOCAB_PROMPT.format(text=text)


def parse_vocab_reply(reply: str | None) -> ModelResult:
    """
    Turn the model reply into vocabulary entries.
    Falls back to one pseudo-entry carrying the raw reply if it is not a JSON array.
    """
    raw = reply or ""
    payload = parse_json_reply(raw, list)
    if payload is None:
        logger.warning("Vocabulary reply was not a JSON array; returning raw text")
        return ModelResult.fallback([VocabEntry(word=PARSE_ERROR_WORD, meaning=raw)], raw=raw)

    entries: List[VocabEntry] = []
    for obj in payload:
        if not isinstance(obj, dict) or not obj.get("word"):
            continue
        entries.append(VocabEntry(word=str(obj["word"]), meaning=str(obj.get("meaning") or "")))
    return ModelResult.structured(entries, raw=raw)


def analyze_vocabulary(text: str, gateway: BedrockGateway) -> ModelResult:
    """
    Ask the model for the ten most advanced words in `text` with definitions.
    """
    reply = gateway.invoke_text(build_vocab_prompt(text), max_tokens=2000, temperature=0.3)
    return parse_vocab_reply(reply)
