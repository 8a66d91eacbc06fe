from __future__ import annotations

from ..bedrock_client import BedrockGateway
from ..constants import LEARNING_FORMATS, DEFAULT_RECOMMENDATION

RECOMMEND_PROMPT = """
You are an educational assistant.
The user wants to learn about: "{topic}".
Recommend the most effective format: one of [{formats}].
Reply ONLY with the format id (exactly one word).
"""


def normalize_recommendation(reply: str | None) -> str:
    # Not checked against LEARNING_FORMATS; whatever the model says is passed on
    token = (reply or "").strip().lower()
    return token or DEFAULT_RECOMMENDATION


def recommend_format(topic: str, gateway: BedrockGateway) -> str:
    prompt = RECOMMEND_PROMPT.format(topic=topic, formats=", ".join(LEARNING_FORMATS))
    reply = gateway.invoke_text(prompt, max_tokens=300, temperature=0.7, top_p=0.9)
    return normalize_recommendation(reply)
