#!/usr/bin/env python3
"""
Competence file endpoints - edit, generate, preview and publish documents.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, Response
from starlette.concurrency import run_in_threadpool

from core.app_context import AppContext
from core.context import RequestContext
from core.storage.publisher import ArtifactCategory
from ..dependencies import get_app_context, get_request_context
from ..models.requests import (
    CompetenceFileCreate,
    CompetenceFileUpdate,
    GenerateDocumentRequest,
    RenderRequest,
    SectionGenerateRequest
)
from ..models.responses import ApiResponse, LogoUploadResponse
from ..rate_limit import limiter, UPLOAD_RATE_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/competence-files", tags=["competence-files"])


def _document_payload(document) -> dict:
    return document.model_dump(by_alias=True, mode="json")


@router.post("/generate")
def generate_document(
    body: GenerateDocumentRequest,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """
    Render an inline candidate straight to a downloadable file.

    Returns the PDF or HTML bytes; failures come back as the usual JSON
    error envelope.
    """
    content, content_type, filename = app_context.documents.generate_from_payload(
        candidate_data=body.candidate_data,
        template=body.template,
        sections=body.sections_payload(),
        output_format=body.format,
        is_anonymized=body.is_anonymized,
        logo_url=body.logo_url,
        generate_missing=body.generate_missing,
        job_description=body.job_description_payload(),
        client_name=body.client_name,
    )
    logger.info(f"User {ctx.user_id} generated {filename} ({len(content)} bytes)")
    return Response(
        content=content,
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/upload-logo", response_model=LogoUploadResponse)
@limiter.limit(UPLOAD_RATE_LIMIT)
async def upload_logo(
    request: Request,
    file: UploadFile = File(...),
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """
    Upload a company logo for document headers.

    Accepts png, jpeg, svg or webp up to the configured size. The stored
    image is resized to fit a 200x200 box.
    """
    content = await file.read()
    mime_type = file.content_type or ""

    app_context.publisher.validate_image(content, mime_type)
    artifact = await run_in_threadpool(
        app_context.publisher.publish, content, file.filename or "logo", ArtifactCategory.IMAGE
    )

    logger.info(f"User {ctx.user_id} uploaded logo {artifact.storage_id}")
    return LogoUploadResponse(url=artifact.url, storageId=artifact.storage_id)


@router.post("", response_model=ApiResponse, status_code=201)
def create_competence_file(
    body: CompetenceFileCreate,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """
    Create a Draft competence file for a saved candidate.

    Without sections the default layout is used. With generateMissing,
    empty sections are filled in; a section that fails to generate is
    left empty rather than failing the request.
    jobDescription and clientName tailor the generated content.
    """
    document = app_context.documents.create(
        ctx,
        candidate_id=body.candidate_id,
        template=body.template,
        sections=body.sections_payload(),
        is_anonymized=body.is_anonymized,
        generate_missing=body.generate_missing,
        job_description=body.job_description_payload(),
        client_name=body.client_name,
    )
    return ApiResponse(data=_document_payload(document), message="Competence file created")


@router.get("/{document_id}", response_model=ApiResponse)
def get_competence_file(
    document_id: str,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    return ApiResponse(data=_document_payload(app_context.documents.get(document_id)))


@router.put("/{document_id}", response_model=ApiResponse)
def update_competence_file(
    document_id: str,
    body: CompetenceFileUpdate,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """Edit sections, template or anonymization. Content changes reset the file to Draft."""
    document = app_context.documents.update(
        ctx,
        document_id,
        sections=body.sections_payload(),
        template=body.template,
        is_anonymized=body.is_anonymized,
    )
    return ApiResponse(data=_document_payload(document), message=f"Competence file at version {document.version}")


@router.post("/{document_id}/sections/{section_id}/generate", response_model=ApiResponse)
def generate_section(
    document_id: str,
    section_id: str,
    body: Optional[SectionGenerateRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """Regenerate one section, optionally tailored to a job description and client."""
    body = body or SectionGenerateRequest()
    document = app_context.documents.generate_section(
        ctx,
        document_id,
        section_id,
        job_description=body.job_description_payload(),
        client_name=body.client_name,
    )
    return ApiResponse(data=_document_payload(document), message="Section generated")


@router.post("/{document_id}/render", response_model=ApiResponse)
def render_competence_file(
    document_id: str,
    body: Optional[RenderRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """
    Render and publish the current version.

    On success the file is marked Generated and carries the artifact URL.
    A storage failure leaves it unchanged.
    """
    body = body or RenderRequest()
    document = app_context.documents.render(ctx, document_id, output_format=body.format, logo_url=body.logo_url)
    return ApiResponse(data=_document_payload(document), message=f"Competence file {document.status.value}")


@router.get("/{document_id}/preview", response_class=HTMLResponse)
def preview_competence_file(
    document_id: str,
    logo_url: Optional[str] = Query(default=None, alias="logoUrl"),
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    return HTMLResponse(content=app_context.documents.preview(document_id, logo_url))
