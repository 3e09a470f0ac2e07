#!/usr/bin/env python3
"""
Job endpoints - job postings CRUD.
"""

from fastapi import APIRouter, Depends, Query

from core.app_context import AppContext
from core.context import RequestContext
from ..dependencies import get_app_context, get_request_context
from ..models.requests import JobCreate, JobUpdate
from ..models.responses import ApiResponse

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.post("", response_model=ApiResponse, status_code=201)
def create_job(
    body: JobCreate,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    job = app_context.jobs.create(ctx, body.model_dump())
    return ApiResponse(data=job, message="Job created")


@router.get("", response_model=ApiResponse)
def list_jobs(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    return ApiResponse(data=app_context.jobs.list(limit=limit, offset=offset))


@router.get("/{job_id}", response_model=ApiResponse)
def get_job(
    job_id: str,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    return ApiResponse(data=app_context.jobs.get(job_id))


@router.put("/{job_id}", response_model=ApiResponse)
def update_job(
    job_id: str,
    body: JobUpdate,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    job = app_context.jobs.update(ctx, job_id, body.model_dump(exclude_unset=True))
    return ApiResponse(data=job, message="Job updated")


@router.delete("/{job_id}", response_model=ApiResponse)
def archive_job(
    job_id: str,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    job = app_context.jobs.archive(ctx, job_id)
    return ApiResponse(data=job, message="Job archived")
