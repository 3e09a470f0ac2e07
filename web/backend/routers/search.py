#!/usr/bin/env python3
"""
Search endpoints - query the search index and administer synchronization.
"""

import logging
from typing import Any, Dict, List
from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError

from core.app_context import AppContext
from core.context import RequestContext
from core.exceptions import ValidationError
from core.search.interfaces import SearchResult
from core.search.records import RecordType
from ..dependencies import get_app_context, get_request_context
from ..models.requests import SearchRequest, SyncRequest
from ..models.responses import ApiResponse, SearchMeta, SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search", tags=["search"])

# Query parameters that are options rather than attribute filters
_OPTION_PARAMS = {"q", "query", "page", "limit", "facets", "sortBy", "aroundLatLng", "aroundRadius"}


def _target_types(type_name: str) -> List[RecordType]:
    if (type_name or "").strip().lower() == "all":
        return list(RecordType)
    return [RecordType.parse(type_name)]


def _single_target(body: SyncRequest) -> RecordType:
    targets = _target_types(body.type)
    if len(targets) != 1:
        raise ValidationError(f"Action '{body.action}' needs a single record type")
    if not body.id:
        raise ValidationError(f"Action '{body.action}' needs an id")
    return targets[0]


@router.post("/sync", response_model=ApiResponse)
def sync_index(
    body: SyncRequest,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """
    Run an administrative index operation.

    Actions:
    - initialize: apply searchable attributes, facets and ranking
    - index_all: rebuild the index for the type (or all types) from the database
    - index_single: re-index one record; archived or missing records are removed
    - remove: delete one record from the index
    - clear: empty the index for the type (or all types)
    - stats: entry counts per index and recent background sync failures
    """
    synchronizer = app_context.synchronizer
    logger.info(f"User {ctx.user_id} requested index {body.action} for {body.type}")

    if body.action == "initialize":
        synchronizer.initialize()
        return ApiResponse(message="Search indices configured")

    if body.action == "index_all":
        counts = {t.value: synchronizer.reindex_all(t) for t in _target_types(body.type)}
        return ApiResponse(data={"indexed": counts}, message=f"Indexed {sum(counts.values())} records")

    if body.action == "index_single":
        record_type = _single_target(body)
        outcome = synchronizer.upsert(record_type, body.id)
        return ApiResponse(data={"id": body.id, "type": record_type.value, "result": outcome})

    if body.action == "remove":
        record_type = _single_target(body)
        synchronizer.remove(record_type, body.id)
        return ApiResponse(data={"id": body.id, "type": record_type.value, "result": "removed"})

    if body.action == "clear":
        targets = _target_types(body.type)
        synchronizer.clear(targets[0] if len(targets) == 1 else None)
        return ApiResponse(message=f"Cleared {', '.join(t.value for t in targets)}")

    stats = synchronizer.stats()
    return ApiResponse(data={
        "indices": stats,
        "recentFailures": [f.to_dict() for f in synchronizer.recent_failures()],
    })


def _coerce_filter_value(value: str) -> Any:
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    return value


def _query_from_params(request: Request) -> Dict[str, Any]:
    params = request.query_params
    data: Dict[str, Any] = {}
    filters: Dict[str, Any] = {}

    for key in params.keys():
        values = params.getlist(key)
        if key in _OPTION_PARAMS:
            data["q" if key == "query" else key] = values[-1]
        elif len(values) > 1:
            filters[key] = values
        else:
            filters[key] = _coerce_filter_value(values[0])

    data["filters"] = filters
    return data


def _search(app_context: AppContext, index_type: str, data: Dict[str, Any]) -> SearchResponse:
    record_type = RecordType.parse(index_type)
    try:
        search_request = SearchRequest.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid search parameters",
            details={"errors": [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()]}
        )

    result: SearchResult = app_context.synchronizer.search(record_type, search_request.to_query())
    return SearchResponse(
        hits=result.hits,
        facets=result.facets,
        meta=SearchMeta(
            total=result.total,
            page=result.page,
            pages=result.pages,
            limit=result.limit,
            processingTime=result.processing_time_ms,
        )
    )


@router.get("/{index_type}", response_model=SearchResponse)
def search_get(
    index_type: str,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    """
    Search candidates, jobs or competence-files.

    Option parameters (q, page, limit, facets, sortBy, aroundLatLng,
    aroundRadius) shape the query; every other parameter is an attribute
    filter, repeated parameters matching any of their values.
    """
    return _search(app_context, index_type, _query_from_params(request))


@router.post("/{index_type}", response_model=SearchResponse)
def search_post(
    index_type: str,
    body: Dict[str, Any],
    ctx: RequestContext = Depends(get_request_context),
    app_context: AppContext = Depends(get_app_context)
):
    return _search(app_context, index_type, body)
