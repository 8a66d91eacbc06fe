from __future__ import annotations

import logging
from typing import Optional

import fitz  # PyMuPDF

from ..bedrock_client import BedrockGateway
from ..constants import PDF_MEDIA_TYPE
from ..results import ModelResult, parse_json_reply

logger = logging.getLogger(__name__)


class PDFValidationError(ValueError):
    """An uploaded PDF was missing, of the wrong type, too large or unreadable."""


SUMMARY_PROMPT = """You are a study assistant. The text below was extracted from a PDF document.
Summarize it for a student.

Return ONLY a JSON object with these fields:
{{
  "title": "a short title for the document",
  "summary": "a concise summary of the main ideas",
  "keyPoints": ["3-5 key points, one sentence each"]
}}

Document text:
{text}"""


def format_size(num_bytes: int) -> str:
    return f"{num_bytes / (1024 * 1024):.2f} MB"


def validate_pdf_upload(content_type: Optional[str], size: int, max_bytes: int) -> None:
    """
    Reject uploads that are not declared as PDF or exceed `max_bytes`.
    Raises PDFValidationError with a message suitable for the client.
    """
    if content_type != PDF_MEDIA_TYPE:
        raise PDFValidationError("File must be a PDF")
    if size > max_bytes:
        raise PDFValidationError(
            f"File too large ({format_size(size)}). Maximum size is {max_bytes // (1024 * 1024)} MB."
        )


def extract_pdf_text(data: bytes, max_pages: Optional[int] = 1) -> str:
    """
    Extract plain text from PDF bytes.

    Args:
        data (bytes): Raw PDF file content.
        max_pages (Optional[int]): Number of leading pages to read; None reads all.

    Returns:
        str: Extracted text, stripped. Empty if the pages carry no text layer.
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise PDFValidationError(f"Failed to parse PDF: {e}") from e

    try:
        page_count = doc.page_count if max_pages is None else min(max_pages, doc.page_count)
        parts = [doc.load_page(i).get_text() for i in range(page_count)]
    except Exception as e:
        raise PDFValidationError(f"Failed to parse PDF: {e}") from e
    finally:
        doc.close()

    return "\n".join(parts).strip()


def read_pdf_upload(
    data: Optional[bytes],
    content_type: Optional[str],
    max_bytes: int,
    max_pages: Optional[int] = 1,
) -> str:
    """Validate an upload and return its text; empty text is a validation error."""
    if data is None:
        raise PDFValidationError("No PDF file provided")
    validate_pdf_upload(content_type, len(data), max_bytes)

    text = extract_pdf_text(data, max_pages=max_pages)
    if not text:
        raise PDFValidationError("No text could be extracted from the PDF")
    return text


def summarize_document(text: str, gateway: BedrockGateway) -> ModelResult:
    """
    Ask the model for a structured summary of extracted PDF text.
    Falls back to the raw reply when it is not a JSON object.
    """
    reply = gateway.invoke_text(SUMMARY_PROMPT.format(text=text), max_tokens=2000, temperature=0.5)
    raw = reply or ""
    payload = parse_json_reply(raw, dict)
    if payload is None:
        logger.warning("PDF summary reply was not a JSON object; returning raw text")
        return ModelResult.fallback(raw, raw=raw)
    return ModelResult.structured(payload, raw=raw)
