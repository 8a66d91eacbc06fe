from __future__ import annotations

import logging
from typing import Optional

from ..bedrock_client import BedrockGateway
from ..constants import DEFAULT_DIFFICULTY, EXAM_START_MARKER, EXAM_END_MARKER
from ..results import ModelResult

logger = logging.getLogger(__name__)

# Generation settings shared by every exam prompt
EXAM_MAX_TOKENS = 4000
EXAM_TEMPERATURE = 0.7
EXAM_TOP_P = 0.9

EXAM_FORMAT_HEADER = "=== EXAM PAPER FORMAT (Use this as format reference) ==="
MATERIALS_HEADER = "=== LEARNING MATERIALS (Generate questions from this content) ==="


class EmptyModelReplyError(RuntimeError):
    """The model returned no usable text."""


def normalize_difficulty(difficulty: Optional[str]) -> str:
    """Blank or missing difficulty becomes the default level."""
    return (difficulty or "").strip() or DEFAULT_DIFFICULTY


# --- Prompt Factory ---

class ExamPromptFactory:
    """
    Builds the exam-paper prompts. The delimited variants ask the model to wrap
    the paper in EXAM_START/EXAM_END markers so surrounding chatter can be dropped.
    """

    _GENERATE = """You are an expert exam paper creator. You have been given two documents:
1. An EXAM PAPER FORMAT - which shows the structure and style of exam questions
2. LEARNING MATERIALS - the content to create new exam questions from

Your task:
- CAREFULLY identify which section is the exam format and which is the learning materials
- ANALYZE the exam format: question types (multiple choice, short answer, essay), numbering style, section headers, point allocations, instructions format
- EXTRACT key concepts and topics from the learning materials
- CREATE a NEW exam paper that:
  * Follows the EXACT format structure of the exam paper (same question types, numbering, sections)
  * Contains questions BASED ON the learning materials content
  * Matches the {difficulty} difficulty level
  * Has appropriate point allocations
  * Includes clear instructions

Format your response EXACTLY like this:
{start}
[EXAM TITLE]
[Course/Subject information]
[Time allowed, instructions, etc.]

Section A: [Section Name]
Instructions: [Any specific instructions]

1. [Question text]
   a) [Sub-question if applicable]
   [X marks]

[Continue with all sections...]
{end}

Input:
{combined}

Generate the complete exam paper now:"""

    _GENERATE_PLAIN = """You are an expert exam paper creator. You have been given two documents:
1. An EXAM PAPER FORMAT - which shows the structure and style of exam questions
2. LEARNING MATERIALS - the content to create new exam questions from

Your task:
- CAREFULLY analyze the EXAM PAPER FORMAT: question types, numbering style, section headers, point allocations and instructions
- EXTRACT key concepts and topics from the LEARNING MATERIALS
- CREATE a NEW exam paper that replicates the structure of the EXAM PAPER FORMAT,
  contains questions BASED ON the LEARNING MATERIALS and matches the {difficulty} difficulty level

FORMATTING RULES:
1. DO NOT use markdown symbols like **, __, or ##
2. Use plain text only
3. Follow the EXAM PAPER FORMAT for section headers, question numbering, marks and instructions
4. For multiple choice questions, place marks right after the question text and list options (A), B), C), D)) on separate lines

Input:
{combined}

Generate the complete exam paper now (plain text only):"""

    _REFINE = """You are an expert exam paper editor. You need to refine an existing exam paper based on specific instructions.

CURRENT EXAM PAPER:
{exam}

REFINEMENT INSTRUCTIONS:
{instructions}

DIFFICULTY LEVEL: {difficulty}

Your task:
- READ the refinement instructions carefully
- MODIFY the exam paper according to the instructions
- MAINTAIN the original format and structure
- ENSURE questions remain relevant and well-formed
- Keep the difficulty level at {difficulty}

Return the refined exam in the EXACT same format as the original, with the requested changes applied.

Format your response EXACTLY like this:
{start}
[Modified exam content here following the same structure]
{end}

Generate the refined exam paper now:"""

    @staticmethod
    def combine_sources(exam_text: str, materials_text: str) -> str:
        return f"\n{EXAM_FORMAT_HEADER}\n{exam_text}\n\n{MATERIALS_HEADER}\n{materials_text}\n"

    @classmethod
    def generation(cls, combined: str, difficulty: str) -> str:
        return cls._GENERATE.format(
            difficulty=difficulty, combined=combined, start=EXAM_START_MARKER, end=EXAM_END_MARKER
        )

    @classmethod
    def plain_generation(cls, combined: str, difficulty: str) -> str:
        return cls._GENERATE_PLAIN.format(difficulty=difficulty, combined=combined)

    @classmethod
    def refinement(cls, exam: str, instructions: str, difficulty: str) -> str:
        return cls._REFINE.format(
            exam=exam,
            instructions=instructions,
            difficulty=difficulty,
            start=EXAM_START_MARKER,
            end=EXAM_END_MARKER,
        )


def extract_delimited(reply: str, start: str = EXAM_START_MARKER, end: str = EXAM_END_MARKER) -> ModelResult:
    """
    Return the trimmed text between `start` and the first `end` after it.
    If either marker is missing the whole reply comes back untouched as a fallback.
    """
    start_idx = reply.find(start)
    if start_idx != -1:
        end_idx = reply.find(end, start_idx + len(start))
        if end_idx != -1:
            return ModelResult.structured(reply[start_idx + len(start):end_idx].strip(), raw=reply)

    logger.warning("Exam markers not found in model reply; returning full reply")
    return ModelResult.fallback(reply, raw=reply)


def _invoke_exam(prompt: str, gateway: BedrockGateway) -> str:
    return gateway.invoke_text(
        prompt,
        max_tokens=EXAM_MAX_TOKENS,
        temperature=EXAM_TEMPERATURE,
        top_p=EXAM_TOP_P,
        token_key="max_new_tokens",
    ) or ""


def generate_exam(exam_text: str, materials_text: str, difficulty: str, gateway: BedrockGateway) -> ModelResult:
    combined = ExamPromptFactory.combine_sources(exam_text, materials_text)
    reply = _invoke_exam(ExamPromptFactory.generation(combined, difficulty), gateway)
    return extract_delimited(reply)


def generate_exam_content(exam_text: str, materials_text: str, difficulty: str, gateway: BedrockGateway) -> str:
    """Plain-text variant: no markers, the trimmed reply is the paper."""
    combined = ExamPromptFactory.combine_sources(exam_text, materials_text)
    reply = _invoke_exam(ExamPromptFactory.plain_generation(combined, difficulty), gateway).strip()
    if not reply:
        raise EmptyModelReplyError("No valid content in AI response")
    return reply


def refine_exam(current_exam: str, instructions: str, difficulty: str, gateway: BedrockGateway) -> ModelResult:
    reply = _invoke_exam(ExamPromptFactory.refinement(current_exam, instructions, difficulty), gateway)
    return extract_delimited(reply)
