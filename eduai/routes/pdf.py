from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from ..bedrock_client import BedrockGateway, get_gateway
from ..config import Settings, get_settings
from ..schemas import ExtractPDFResponse
from ..services.pdf_extraction import (
    PDFValidationError,
    read_pdf_upload,
    summarize_document,
    validate_pdf_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["pdf"])


async def read_upload(upload: Optional[UploadFile], max_bytes: int) -> Optional[bytes]:
    """
    Read an uploaded file after checking its declared type and size, so an
    oversized upload is rejected without being loaded into memory.
    """
    if upload is None:
        return None
    if upload.size is not None:
        validate_pdf_upload(upload.content_type, upload.size, max_bytes)
    return await upload.read()


@router.post("/extract-pdf", response_model=ExtractPDFResponse)
async def extract_pdf(
    file: Optional[UploadFile] = File(None),
    gateway: BedrockGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> ExtractPDFResponse:
    """
    Extract the first page of an uploaded PDF and summarize it.

    - **file**: The PDF to read (max 10 MB).
    """
    try:
        data = await read_upload(file, settings.max_pdf_bytes)
        text = await run_in_threadpool(
            read_pdf_upload,
            data,
            file.content_type if file else None,
            settings.max_pdf_bytes,
            max_pages=1,
        )
    except PDFValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        outcome = await run_in_threadpool(summarize_document, text, gateway)
    except Exception as e:
        logger.exception("PDF summarization failed")
        raise HTTPException(status_code=500, detail=str(e))

    return ExtractPDFResponse(
        extractedText=text,
        processedContent=outcome.value,
        structured=outcome.is_structured,
    )
