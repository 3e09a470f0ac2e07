#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

import logging
import uuid
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.app_context import AppContext
from core.context import RequestContext
from core.exceptions import AuthError
from .config import get_config

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


@lru_cache()
def get_app_context() -> AppContext:
    """
    FastAPI dependency returning the wired application services.

    Built once per process from get_config(). Tests replace it through
    ``app.dependency_overrides[get_app_context]``.
    """
    return AppContext.build(get_config())


def get_request_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    app_context: AppContext = Depends(get_app_context)
) -> RequestContext:
    """
    Resolve the caller from the bearer token.

    Usage:
        @router.post("/endpoint")
        def my_endpoint(ctx: RequestContext = Depends(get_request_context)):
            ...

    Raises:
        AuthError: Missing or unknown token
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Authentication required")

    user_id = app_context.config.auth.api_tokens.get(credentials.credentials)
    if not user_id:
        logger.info(f"Rejected unknown bearer token on {request.url.path}")
        raise AuthError("Authentication required")

    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    return RequestContext(user_id=user_id, request_id=request_id)
