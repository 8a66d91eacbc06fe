from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List

from ..bedrock_client import BedrockGateway
from ..results import ModelResult, parse_json_reply
from ..schemas import MindMap
from .quiz import split_sentences

logger = logging.getLogger(__name__)

MINDMAP_PROMPT = """Please analyze the following text and create a mind map structure.

Requirements:
- Extract the main topic and key concepts
- Organize concepts into hierarchical levels (0-5)
- Create relationships between concepts
- Generate a JSON structure for visualization

Return as JSON:
{{
  "title": "Main topic title",
  "nodes": [
    {{
      "id": "unique_id",
      "text": "concept text",
      "x": 300,
      "y": 150,
      "level": 0,
      "parent": "parent_id",
      "children": ["child_id1", "child_id2"]
    }}
  ],
  "connections": [
    {{"from": "node_id_1", "to": "node_id_2"}}
  ]
}}

Text to analyze:
{text}"""

# Canvas used by the fallback layout
CENTER_X, CENTER_Y = 300, 150
MIN_X, MAX_X, MIN_Y, MAX_Y = 50, 650, 50, 300
NODE_HALF_WIDTH, NODE_HALF_HEIGHT = 64, 32

COMMON_WORDS = {
    "the", "this", "that", "these", "those", "there", "then", "when", "where",
    "what", "why", "how", "who", "which", "and", "or", "but", "for", "nor",
    "yet", "so", "in", "on", "at", "to", "of", "with", "by", "from",
    "up", "about", "into", "through", "during", "before", "after", "above",
    "below", "between", "among", "under", "over", "around", "near", "far",
    "they", "have", "been", "were", "said", "each", "their", "time", "will",
    "could", "other", "first", "well", "also", "much", "some", "would", "every",
    "without", "within",
}

BLAND_ADJECTIVES = {
    "small", "big", "large", "good", "bad", "new", "old", "long", "short",
    "high", "low", "fast", "slow", "hot", "cold", "warm", "cool", "easy",
    "hard", "soft", "light", "dark", "bright", "clean", "dirty",
    "fresh", "dry", "wet", "thick", "thin", "wide", "narrow", "deep", "shallow",
    "strong", "weak", "heavy", "full", "empty", "open", "closed",
    "right", "wrong", "true", "false", "real", "fake", "same", "different",
    "last", "next", "previous", "early", "late", "quick",
    "simple", "complex", "basic", "advanced", "normal", "special", "usual",
    "common", "rare", "popular", "famous", "important", "useful", "helpful",
}

_NON_WORD = re.compile(r"[^\w\s]")


def _words(sentence: str) -> List[str]:
    return _NON_WORD.sub(" ", sentence.lower()).split()


def _clamp(value: float, low: int, high: int) -> float:
    return max(low, min(high, value))


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def main_topic(text: str) -> str:
    sentences = split_sentences(text, 10)
    if not sentences:
        return "Main Topic"
    first = sentences[0]
    words = [w for w in first.split() if len(w) > 4 and w.lower() not in COMMON_WORDS]
    if words:
        return " ".join(words[:3])
    return first[:30] + "..." if len(first) > 30 else first


def key_concepts(sentences: List[str]) -> List[str]:
    concepts: List[str] = []
    for sentence in sentences:
        words = [
            w for w in _words(sentence)
            if len(w) > 4 and w not in COMMON_WORDS and w not in BLAND_ADJECTIVES
        ]
        meaningful = [w for w in words if len(w) > 5 or any(w in c for c in concepts)]
        concepts.extend(meaningful[:2])
    return _unique(concepts)[:6]


def sub_concepts(sentences: List[str], parent: str) -> List[str]:
    found: List[str] = []
    for sentence in sentences:
        if parent not in sentence.lower():
            continue
        words = [w for w in _words(sentence) if len(w) > 3 and w != parent and w not in COMMON_WORDS]
        found.extend(words[:2])
    return _unique(found)[:3]


def _place(x: float, y: float) -> Dict[str, float]:
    return {
        "x": round(_clamp(x - NODE_HALF_WIDTH, MIN_X, MAX_X), 1),
        "y": round(_clamp(y - NODE_HALF_HEIGHT, MIN_Y, MAX_Y), 1),
    }


def build_fallback_mindmap(text: str) -> MindMap:
    """
    Radial mind map from the text's own vocabulary: a centre node, up to four
    primary branches and up to two children on each of the first two branches.
    """
    sentences = split_sentences(text, 15)
    if not sentences:
        return MindMap(title="Empty Mind Map")

    title = main_topic(text)
    nodes: List[Dict[str, Any]] = [{"id": "main", "label": title, "x": CENTER_X, "y": CENTER_Y, "level": 0}]
    connections: List[Dict[str, Any]] = []

    branches = []
    for i, concept in enumerate(key_concepts(sentences)[:4]):
        angle = math.radians(i * 90 - 135)
        node = {
            "id": f"level1_{i}",
            "label": concept,
            **_place(CENTER_X + 120 * math.cos(angle), CENTER_Y + 120 * math.sin(angle)),
            "level": 1,
        }
        branches.append(node)
        connections.append({"from": "main", "to": node["id"], "strength": 1})
    nodes.extend(branches)

    for p, parent in enumerate(branches[:2]):
        for i, concept in enumerate(sub_concepts(sentences, parent["label"])[:2]):
            angle = math.radians(i * 60 - 30)
            node = {
                "id": f"level2_{p}_{i}",
                "label": concept,
                **_place(
                    parent["x"] + NODE_HALF_WIDTH + 80 * math.cos(angle),
                    parent["y"] + NODE_HALF_HEIGHT + 80 * math.sin(angle),
                ),
                "level": 2,
            }
            nodes.append(node)
            connections.append({"from": parent["id"], "to": node["id"], "strength": 1})

    return MindMap(title=title, nodes=nodes, connections=connections)


def generate_mindmap(text: str, gateway: BedrockGateway) -> ModelResult:
    """Model-built mind map, or the radial fallback when the model fails or the reply has no nodes."""
    try:
        reply = gateway.invoke_text(MINDMAP_PROMPT.format(text=text), max_tokens=1500, temperature=0.3)
    except Exception as e:
        logger.warning("Mind map generation failed, using fallback layout: %s", e)
        return ModelResult.fallback(build_fallback_mindmap(text))

    raw = reply or ""
    payload = parse_json_reply(raw, dict)
    nodes = payload.get("nodes") if payload else None
    if not isinstance(nodes, list) or not nodes:
        logger.warning("Mind map reply had no nodes; using fallback layout")
        return ModelResult.fallback(build_fallback_mindmap(text), raw=raw)

    connections = payload.get("connections")
    return ModelResult.structured(
        MindMap(
            title=str(payload.get("title") or main_topic(text)),
            nodes=[n for n in nodes if isinstance(n, dict)],
            connections=[c for c in connections if isinstance(c, dict)] if isinstance(connections, list) else [],
        ),
        raw=raw,
    )
