#!/usr/bin/env python3
"""
Daily quote endpoint for the dashboard.
"""

from fastapi import APIRouter, Depends

from core.app_context import AppContext
from ..dependencies import get_app_context
from ..models.responses import ApiResponse

router = APIRouter(prefix="/api", tags=["quotes"])


@router.get("/daily-quote", response_model=ApiResponse)
def get_daily_quote(app_context: AppContext = Depends(get_app_context)):
    """Quote and tip of the day. The same pair is returned all day."""
    return ApiResponse(data=app_context.quotes.quote_for())
