"""Algolia search index over the REST API, with connection reuse and retry logic."""

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

import requests

from core.exceptions import UpstreamError
from core.http_retry import http_retry
from core.search.interfaces import (
    IndexStats,
    SearchIndex,
    SearchQuery,
    SearchResult,
    build_filter_expression,
)

logger = logging.getLogger(__name__)


class AlgoliaClient(SearchIndex):
    """
    Client for the Algolia REST API.

    Responsibilities:
    - Own a requests.Session for connection reuse
    - Retry timeouts, 429 and 5xx responses
    - Translate SearchQuery into Algolia search params
    """

    def __init__(
        self,
        app_id: str,
        api_key: str,
        timeout_seconds: float = 10.0,
        base_url: Optional[str] = None
    ):
        if not (app_id and api_key):
            raise ValueError("Algolia requires app_id and api_key")

        self.app_id = app_id
        self.timeout_seconds = timeout_seconds
        self.base_url = (base_url or f"https://{app_id}.algolia.net").rstrip("/")

        self.session = requests.Session()
        self.session.headers.update({
            "X-Algolia-Application-Id": app_id,
            "X-Algolia-API-Key": api_key,
            "Content-Type": "application/json",
        })

        logger.info(f"AlgoliaClient initialized: app_id={app_id}, timeout={timeout_seconds}s")

    @http_retry()
    def _request(self, method: str, path: str, body: Optional[Any] = None) -> Dict[str, Any]:
        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            data=json.dumps(body) if body is not None else None,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json() if response.content else {}

    def _call(self, description: str, method: str, path: str, body: Optional[Any] = None) -> Dict[str, Any]:
        try:
            return self._request(method, path, body)
        except requests.RequestException as e:
            raise UpstreamError(f"Algolia {description} failed: {_error_message(e)}", cause=e) from e

    @staticmethod
    def _index_path(index: str) -> str:
        return f"/1/indexes/{quote(index, safe='')}"

    def save_object(self, index: str, record: Dict[str, Any]) -> None:
        object_id = quote(str(record["objectID"]), safe="")
        self._call("save object", "PUT", f"{self._index_path(index)}/{object_id}", record)

    def save_objects(self, index: str, records: List[Dict[str, Any]]) -> None:
        if not records:
            return
        body = {"requests": [{"action": "updateObject", "body": record} for record in records]}
        self._call("batch save", "POST", f"{self._index_path(index)}/batch", body)
        logger.debug(f"Saved {len(records)} objects to {index}")

    def delete_object(self, index: str, object_id: str) -> None:
        self._call("delete object", "DELETE", f"{self._index_path(index)}/{quote(str(object_id), safe='')}")

    def clear(self, index: str) -> None:
        self._call("clear", "POST", f"{self._index_path(index)}/clear")

    def set_settings(self, index: str, settings: Dict[str, Any]) -> None:
        self._call("set settings", "PUT", f"{self._index_path(index)}/settings", settings)

    def search(self, index: str, query: SearchQuery) -> SearchResult:
        # Sorting uses replica indices named <index>_<sortBy>
        target = f"{index}_{query.sort_by}" if query.sort_by else index

        params: Dict[str, Any] = {
            "query": query.q,
            "hitsPerPage": query.limit,
            "page": query.page,
        }
        filters = build_filter_expression(query.filters)
        if filters:
            params["filters"] = filters
        if query.facets:
            params["facets"] = json.dumps(query.facets)
        if query.around_lat_lng:
            params["aroundLatLng"] = query.around_lat_lng
            if query.around_radius:
                params["aroundRadius"] = query.around_radius

        result = self._call("search", "POST", f"{self._index_path(target)}/query", {"params": urlencode(params)})

        return SearchResult(
            hits=result.get("hits", []),
            facets=result.get("facets", {}),
            total=result.get("nbHits", 0),
            page=result.get("page", query.page),
            pages=result.get("nbPages", 0),
            limit=result.get("hitsPerPage", query.limit),
            processing_time_ms=result.get("processingTimeMS", 0),
        )

    def list_indices(self) -> List[IndexStats]:
        result = self._call("list indices", "GET", "/1/indexes")
        return [
            IndexStats(
                name=item["name"],
                entries=item.get("entries", 0),
                data_size=item.get("dataSize", 0),
                updated_at=item.get("updatedAt"),
            )
            for item in result.get("items", [])
        ]


def _error_message(exc: requests.RequestException) -> str:
    response = getattr(exc, "response", None)
    if response is not None:
        try:
            return response.json().get("message", f"HTTP {response.status_code}")
        except ValueError:
            return f"HTTP {response.status_code}"
    return str(exc)
