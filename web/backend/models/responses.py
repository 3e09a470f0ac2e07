#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class ApiResponse(BaseModel):
    """Success envelope shared by every JSON endpoint."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": {"id": "550e8400-e29b-41d4-a716-446655440000"},
                "message": "Candidate created"
            }
        }
    )

    success: bool = True
    data: Optional[Any] = None
    message: Optional[str] = None


class SearchMeta(BaseModel):
    total: int
    page: int
    pages: int
    limit: int
    processingTime: int = Field(description="Search engine processing time in milliseconds")


class SearchResponse(BaseModel):
    success: bool = True
    hits: List[Dict[str, Any]]
    facets: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    meta: SearchMeta


class LogoUploadResponse(BaseModel):
    success: bool = True
    url: str
    storageId: str


class ExtractedTextResponse(BaseModel):
    success: bool = True
    text: str
    format: str
    filename: str
    wordCount: int
    pages: Optional[int] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
