"""In-memory search index for offline runs and tests."""
import logging
import math
import threading
from collections import Counter, defaultdict
from typing import Any, Dict, List

from core.exceptions import UpstreamError
from core.search.interfaces import IndexStats, SearchIndex, SearchQuery, SearchResult

logger = logging.getLogger(__name__)


def _matches_text(record: Dict[str, Any], text: str) -> bool:
    if not text:
        return True
    haystack = " ".join(str(value) for value in record.values()).lower()
    return all(term in haystack for term in text.lower().split())


def _matches_filters(record: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    for key, expected in filters.items():
        if expected is None or expected == "" or expected == []:
            continue
        actual = record.get(key)
        actual_values = actual if isinstance(actual, list) else [actual]
        wanted = expected if isinstance(expected, list) else [expected]
        if not any(str(a).lower() == str(w).lower() for a in actual_values for w in wanted):
            return False
    return True


class InMemorySearchIndex(SearchIndex):
    """
    Dict-backed index with substring matching and exact-value filters.

    Set ``reachable = False`` to make every call raise, simulating an outage.
    """

    def __init__(self):
        self.indices: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self.settings: Dict[str, Dict[str, Any]] = {}
        self.reachable = True
        self._lock = threading.Lock()

    def _check(self) -> None:
        if not self.reachable:
            raise UpstreamError("Search service unreachable")

    def save_object(self, index: str, record: Dict[str, Any]) -> None:
        self._check()
        with self._lock:
            self.indices[index][str(record["objectID"])] = dict(record)

    def save_objects(self, index: str, records: List[Dict[str, Any]]) -> None:
        self._check()
        with self._lock:
            for record in records:
                self.indices[index][str(record["objectID"])] = dict(record)

    def delete_object(self, index: str, object_id: str) -> None:
        self._check()
        with self._lock:
            self.indices[index].pop(str(object_id), None)

    def clear(self, index: str) -> None:
        self._check()
        with self._lock:
            self.indices[index].clear()

    def set_settings(self, index: str, settings: Dict[str, Any]) -> None:
        self._check()
        self.settings[index] = dict(settings)

    def search(self, index: str, query: SearchQuery) -> SearchResult:
        self._check()
        with self._lock:
            records = list(self.indices[index].values())

        matched = [
            r for r in records
            if _matches_text(r, query.q) and _matches_filters(r, query.filters)
        ]
        matched.sort(key=lambda r: r["objectID"])

        facets: Dict[str, Dict[str, int]] = {}
        for facet in query.facets:
            counts: Counter = Counter()
            for record in matched:
                value = record.get(facet)
                for item in (value if isinstance(value, list) else [value]):
                    if item is not None:
                        counts[str(item)] += 1
            facets[facet] = dict(counts)

        start = query.page * query.limit
        return SearchResult(
            hits=matched[start:start + query.limit],
            facets=facets,
            total=len(matched),
            page=query.page,
            pages=math.ceil(len(matched) / query.limit) if matched else 0,
            limit=query.limit,
            processing_time_ms=0,
        )

    def list_indices(self) -> List[IndexStats]:
        self._check()
        with self._lock:
            return [IndexStats(name=name, entries=len(objects)) for name, objects in sorted(self.indices.items())]
