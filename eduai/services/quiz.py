from __future__ import annotations

import logging
import re
from typing import Any, Dict, List

from ..bedrock_client import BedrockGateway
from ..results import ModelResult, parse_json_reply
from ..schemas import QuizQuestion

logger = logging.getLogger(__name__)

QUIZ_PROMPT = """Please analyze the following text and create 6-8 quiz questions for testing understanding.

Focus on creating questions that test:
- Key concepts and main ideas
- Important details and facts
- Understanding of relationships between concepts
- Application of knowledge

For each question:
- Create a clear, well-formatted question
- Provide 4 multiple choice options (A, B, C, D)
- Mark the correct answer (0-3 index)
- Provide a detailed explanation of why the answer is correct
- Assign an appropriate category (e.g., "General", "Technical", "Conceptual")

Return as JSON array:
[
  {{
    "id": 1,
    "question": "Clear, well-formatted question here?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": 0,
    "explanation": "Why this answer is correct.",
    "category": "General"
  }}
]

Text to analyze:
{text}"""

DEFAULT_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]

STOP_WORDS = {
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "this", "that", "these", "those", "a", "an", "is", "are", "was", "were",
    "be", "been", "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might", "can", "must", "shall",
    "from", "into", "through", "during", "before", "after", "above", "below",
    "up", "down", "out", "off", "over", "under", "again", "further", "then",
    "once", "here", "there", "when", "where", "why", "how", "all", "any",
    "both", "each", "few", "more", "most", "other", "some", "such", "no",
    "nor", "not", "only", "own", "same", "so", "than", "too", "very", "just",
    "now", "helpful",
}

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_NON_WORD = re.compile(r"[^\w\s]")


def split_sentences(text: str, min_length: int) -> List[str]:
    return [s.strip() for s in _SENTENCE_SPLIT.split(text) if len(s.strip()) > min_length]


def _clean_question(index: int, item: Dict[str, Any]) -> QuizQuestion:
    options = item.get("options")
    if not isinstance(options, list) or not options:
        options = DEFAULT_OPTIONS
    answer = item.get("correctAnswer")
    return QuizQuestion(
        id=index + 1,
        question=str(item.get("question") or f"Question {index + 1}"),
        options=[str(o) for o in options],
        correctAnswer=answer if isinstance(answer, int) and 0 <= answer < len(options) else 0,
        explanation=str(item.get("explanation") or "No explanation available"),
        category=str(item.get("category") or "General"),
    )


def build_fallback_quiz(text: str) -> List[QuizQuestion]:
    """
    Keyword questions built from the text itself, used when the model is
    unavailable or its reply is unusable. One question per sampled sentence.
    """
    sentences = split_sentences(text, 20)
    if not sentences:
        return []

    count = min(8, max(5, len(sentences) // 2))
    questions: List[QuizQuestion] = []
    seen = set()
    for i in range(count):
        index = (i * len(sentences)) // count
        if index in seen:
            continue
        seen.add(index)

        words = [
            w for w in _NON_WORD.sub("", sentences[index].lower()).split()
            if len(w) > 3 and w not in STOP_WORDS
        ]
        if not words:
            continue
        keyword = max(words, key=len)
        questions.append(QuizQuestion(
            id=len(questions) + 1,
            question=f'What is the main concept related to "{keyword}" in the text?',
            options=[
                f"The concept involves {keyword} and its applications",
                f"It's a technical term related to {keyword}",
                f"The text discusses {keyword} in detail",
                f"It refers to the importance of {keyword}",
            ],
            correctAnswer=0,
            explanation=f"The text discusses {keyword} and its relevance to the main topic.",
            category="General",
        ))
    return questions


def generate_quiz(text: str, gateway: BedrockGateway) -> ModelResult:
    """
    Multiple-choice questions for `text`. Model failures and unparseable
    replies both fall back to `build_fallback_quiz`.
    """
    try:
        reply = gateway.invoke_text(QUIZ_PROMPT.format(text=text), max_tokens=3000, temperature=0.3)
    except Exception as e:
        logger.warning("Quiz generation failed, using keyword quiz: %s", e)
        return ModelResult.fallback(build_fallback_quiz(text))

    raw = reply or ""
    items = parse_json_reply(raw, list)
    questions = [_clean_question(i, item) for i, item in enumerate(items or []) if isinstance(item, dict)]
    if not questions:
        logger.warning("Quiz reply had no usable questions; using keyword quiz")
        return ModelResult.fallback(build_fallback_quiz(text), raw=raw)
    return ModelResult.structured(questions, raw=raw)
