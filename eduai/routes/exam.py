from __future__ import annotations

import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from ..bedrock_client import BedrockGateway, get_gateway
from ..config import Settings, get_settings
from ..constants import DEFAULT_DIFFICULTY
from ..schemas import ExamResponse, RefineExamRequest
from ..services.exam import generate_exam, generate_exam_content, normalize_difficulty, refine_exam
from ..services.pdf_extraction import PDFValidationError, read_pdf_upload
from .pdf import read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["exam"])


async def _read_exam_sources(
    exam_pdf: Optional[UploadFile],
    materials_pdf: Optional[UploadFile],
    settings: Settings,
) -> Tuple[str, str]:
    if exam_pdf is None or materials_pdf is None:
        raise HTTPException(status_code=400, detail="Both exam paper and learning materials PDFs are required")

    texts = []
    for upload in (exam_pdf, materials_pdf):
        try:
            data = await read_upload(upload, settings.max_pdf_bytes)
            text = await run_in_threadpool(
                read_pdf_upload, data, upload.content_type, settings.max_pdf_bytes, max_pages=None
            )
        except PDFValidationError as e:
            raise HTTPException(status_code=400, detail=f"{upload.filename}: {e}")
        texts.append(text)
    return texts[0], texts[1]


@router.post("/generate-exam", response_model=ExamResponse)
async def generate_exam_route(
    examPDF: Optional[UploadFile] = File(None),
    materialsPDF: Optional[UploadFile] = File(None),
    difficulty: str = Form(DEFAULT_DIFFICULTY),
    gateway: BedrockGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> ExamResponse:
    """
    Generate a new exam paper in the style of `examPDF` from the content of `materialsPDF`.
    """
    exam_text, materials_text = await _read_exam_sources(examPDF, materialsPDF, settings)
    difficulty = normalize_difficulty(difficulty)

    logger.info("Generating %s exam paper", difficulty)
    try:
        outcome = await run_in_threadpool(generate_exam, exam_text, materials_text, difficulty, gateway)
    except Exception as e:
        logger.exception("Exam generation failed")
        raise HTTPException(status_code=500, detail=str(e))

    return ExamResponse(examContent=outcome.value, structured=outcome.is_structured)


@router.post("/generate-exam-content", response_model=ExamResponse)
async def generate_exam_content_route(
    examPDF: Optional[UploadFile] = File(None),
    materialsPDF: Optional[UploadFile] = File(None),
    difficulty: str = Form(DEFAULT_DIFFICULTY),
    gateway: BedrockGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> ExamResponse:
    """
    Same inputs as /generate-exam, but the paper comes back as plain text without markers.
    """
    exam_text, materials_text = await _read_exam_sources(examPDF, materialsPDF, settings)
    difficulty = normalize_difficulty(difficulty)

    try:
        content = await run_in_threadpool(generate_exam_content, exam_text, materials_text, difficulty, gateway)
    except Exception as e:
        logger.exception("Exam content generation failed")
        raise HTTPException(status_code=500, detail=str(e))

    return ExamResponse(examContent=content, structured=True)


@router.post("/refine-exam", response_model=ExamResponse)
def refine_exam_route(req: RefineExamRequest, gateway: BedrockGateway = Depends(get_gateway)) -> ExamResponse:
    """
    Apply free-text instructions to an existing exam paper, keeping its structure.
    """
    if not req.currentExam or not req.refinementInstructions:
        raise HTTPException(status_code=400, detail="Current exam and refinement instructions are required")

    try:
        outcome = refine_exam(
            req.currentExam,
            req.refinementInstructions,
            normalize_difficulty(req.difficulty),
            gateway,
        )
    except Exception as e:
        logger.exception("Exam refinement failed")
        raise HTTPException(status_code=500, detail=str(e))

    return ExamResponse(examContent=outcome.value, structured=outcome.is_structured)
