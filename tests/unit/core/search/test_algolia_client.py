"""Tests for the Algolia REST adapter and filter translation."""
import json
from unittest.mock import MagicMock
from urllib.parse import parse_qs

import pytest
import requests

from core.exceptions import UpstreamError
from core.search.algolia_client import AlgoliaClient
from core.search.interfaces import SearchQuery, build_filter_expression


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"{}"
    response.json.return_value = payload or {}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status_code}", response=response)
    return response


@pytest.fixture
def client():
    client = AlgoliaClient(app_id="APP", api_key="KEY", timeout_seconds=3)
    client.session = MagicMock()
    return client


class TestBuildFilterExpression:

    def test_scalar_list_and_bool(self):
        expression = build_filter_expression({
            "status": "active",
            "skills": ["Go", "Rust"],
            "isRemote": True,
            "empty": "",
        })

        assert expression == 'status:"active" AND (skills:"Go" OR skills:"Rust") AND isRemote:true'

    def test_quotes_are_escaped(self):
        assert build_filter_expression({"title": 'The "Lead"'}) == 'title:"The \\"Lead\\""'


class TestAlgoliaClient:

    def test_headers_carry_credentials(self):
        client = AlgoliaClient(app_id="APP", api_key="KEY")

        assert client.session.headers["X-Algolia-Application-Id"] == "APP"
        assert client.base_url == "https://APP.algolia.net"

    def test_save_object_puts_by_object_id(self, client):
        client.session.request.return_value = _response()

        client.save_object("candidates", {"objectID": "c/1", "fullName": "Jane"})

        method, url = client.session.request.call_args[0]
        assert method == "PUT"
        assert url == "https://APP.algolia.net/1/indexes/candidates/c%2F1"
        assert json.loads(client.session.request.call_args[1]["data"])["fullName"] == "Jane"

    def test_empty_batch_makes_no_request(self, client):
        client.save_objects("jobs", [])

        client.session.request.assert_not_called()

    def test_search_translates_query(self, client):
        client.session.request.return_value = _response(payload={
            "hits": [{"objectID": "1"}],
            "nbHits": 1,
            "page": 0,
            "nbPages": 1,
            "hitsPerPage": 10,
            "processingTimeMS": 2,
        })
        query = SearchQuery(q="python", filters={"status": "active"}, limit=10, sort_by="createdAt_desc",
                            facets=["skills"], around_lat_lng="47.37,8.54", around_radius=5000)

        result = client.search("candidates", query)

        url = client.session.request.call_args[0][1]
        params = parse_qs(json.loads(client.session.request.call_args[1]["data"])["params"])
        assert url.endswith("/1/indexes/candidates_createdAt_desc/query")
        assert params["query"] == ["python"]
        assert params["filters"] == ['status:"active"']
        assert params["aroundRadius"] == ["5000"]
        assert result.total == 1
        assert result.processing_time_ms == 2

    def test_http_error_becomes_upstream_error(self, client):
        client.session.request.return_value = _response(403, {"message": "Invalid API key"})

        with pytest.raises(UpstreamError, match="Invalid API key"):
            client.delete_object("jobs", "1")

        assert client.session.request.call_count == 1

    def test_list_indices(self, client):
        client.session.request.return_value = _response(payload={
            "items": [{"name": "candidates", "entries": 3, "dataSize": 120, "updatedAt": "2024-01-01T00:00:00Z"}]
        })

        stats = client.list_indices()

        assert stats[0].name == "candidates"
        assert stats[0].entries == 3
