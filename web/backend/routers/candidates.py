#!/usr/bin/env python3
"""
Candidate endpoints - résumé intake and candidate records.
"""

import logging
from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from core.app_context import AppContext
from core.context import RequestContext
from core.exceptions import ValidationError
from etl.resume.models import CandidateProfile, RawDocument
from ..dependencies import get_app_context, get_request_context
from ..models.requests import CandidateUpdate, ResumeTextRequest
from ..models.responses import ApiResponse
from ..rate_limit import limiter, UPLOAD_RATE_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/candidates", tags=["candidates"])


async def _read_upload(request: Request) -> RawDocument:
    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise ValidationError("No file uploaded", details={"field": "file"})

    content = await upload.read()
    return RawDocument(
        content=content,
        mime_type=upload.content_type or "",
        filename=upload.filename or "",
    )


async def _read_text(request: Request) -> str:
    try:
        body = ResumeTextRequest.model_validate(await request.json())
    except PydanticValidationError:
        raise ValidationError("Request body must contain a non-empty 'text' field")
    except ValueError:
        raise ValidationError("Request body must be JSON or multipart/form-data")
    return body.text


@router.post("/parse-resume", response_model=ApiResponse)
@limiter.limit(UPLOAD_RATE_LIMIT)
async def parse_resume(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """
    Extract a structured candidate profile from a résumé.

    Accepts either a multipart upload in the 'file' field (pdf, doc, docx
    or txt) or a JSON body ``{"text": "..."}``. Nothing is stored; the
    returned profile can be reviewed and then saved with POST /api/candidates.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        document = await _read_upload(request)
        logger.info(f"User {ctx.user_id} uploaded {document.filename} ({document.size} bytes) for extraction")
        profile = await run_in_threadpool(app_context.extractor.extract, document)
    else:
        text = await _read_text(request)
        profile = await run_in_threadpool(app_context.extractor.extract_from_text, text)

    return ApiResponse(
        data=profile.to_payload(),
        message=f"Extracted profile for {profile.full_name}"
    )


@router.post("", response_model=ApiResponse, status_code=201)
def create_candidate(
    profile: CandidateProfile,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """Save a candidate. Emails are unique; a duplicate is answered with 409."""
    candidate = app_context.candidates.create(ctx, profile.with_computed_experience())
    return ApiResponse(data=candidate, message="Candidate created")


@router.get("", response_model=ApiResponse)
def list_candidates(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    candidates = app_context.candidates.list(limit=limit, offset=offset)
    return ApiResponse(data=candidates)


@router.get("/{candidate_id}", response_model=ApiResponse)
def get_candidate(
    candidate_id: str,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    return ApiResponse(data=app_context.candidates.get(candidate_id))


@router.put("/{candidate_id}", response_model=ApiResponse)
def update_candidate(
    candidate_id: str,
    body: CandidateUpdate,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    candidate = app_context.candidates.update(ctx, candidate_id, body.to_changes())
    return ApiResponse(data=candidate, message="Candidate updated")


@router.delete("/{candidate_id}", response_model=ApiResponse)
def archive_candidate(
    candidate_id: str,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """Archive a candidate. The record is kept; the search entry is removed."""
    candidate = app_context.candidates.archive(ctx, candidate_id)
    return ApiResponse(data=candidate, message="Candidate archived")
