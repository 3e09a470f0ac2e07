#!/usr/bin/env python3
"""
File endpoints - local text extraction without calling the completion service.
"""

import logging
from fastapi import APIRouter, Depends, File, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from core.app_context import AppContext
from core.context import RequestContext
from etl.resume.models import RawDocument
from ..dependencies import get_app_context, get_request_context
from ..models.responses import ExtractedTextResponse
from ..rate_limit import limiter, UPLOAD_RATE_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


@router.post("/extract-text", response_model=ExtractedTextResponse)
@limiter.limit(UPLOAD_RATE_LIMIT)
async def extract_text(
    request: Request,
    file: UploadFile = File(...),
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """Read the text of a pdf, docx or txt upload."""
    document = RawDocument(
        content=await file.read(),
        mime_type=file.content_type or "",
        filename=file.filename or "",
    )
    parsed = await run_in_threadpool(app_context.text_reader.read, document)

    logger.info(f"Extracted {parsed.word_count} words from {parsed.filename}")
    return ExtractedTextResponse(
        text=parsed.text,
        format=parsed.format,
        filename=parsed.filename,
        wordCount=parsed.word_count,
        pages=parsed.pages,
    )
