"""
Search Index Interface - the capability set the synchronizer needs.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

FilterValue = Union[str, int, float, bool, List[str]]


class SearchQuery(BaseModel):
    """Query options shared by every search endpoint."""
    q: str = ""
    filters: Dict[str, FilterValue] = Field(default_factory=dict)
    page: int = Field(default=0, ge=0)
    limit: int = Field(default=20, ge=1, le=1000)
    facets: List[str] = Field(default_factory=list)
    sort_by: Optional[str] = None
    around_lat_lng: Optional[str] = None
    around_radius: Optional[int] = Field(default=None, ge=1)


class SearchResult(BaseModel):
    hits: List[Dict[str, Any]] = Field(default_factory=list)
    facets: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    total: int = 0
    page: int = 0
    pages: int = 0
    limit: int = 20
    processing_time_ms: int = 0


class IndexStats(BaseModel):
    name: str
    entries: int = 0
    data_size: int = 0
    updated_at: Optional[str] = None


def build_filter_expression(filters: Dict[str, FilterValue]) -> str:
    """{'status': 'active', 'skills': ['Go', 'Rust']} -> status:"active" AND (skills:"Go" OR skills:"Rust")"""
    clauses = []
    for key, value in filters.items():
        if value is None or value == "" or value == []:
            continue
        if isinstance(value, list):
            options = " OR ".join(f'{key}:"{_quote(item)}"' for item in value)
            clauses.append(f"({options})" if len(value) > 1 else options)
        elif isinstance(value, bool):
            clauses.append(f"{key}:{str(value).lower()}")
        else:
            clauses.append(f'{key}:"{_quote(value)}"')
    return " AND ".join(clauses)


def _quote(value: Any) -> str:
    return str(value).replace('"', '\\"')


class SearchIndex(ABC):
    """
    Abstract interface for search index providers.

    Writes are full-object replacements keyed by objectID, so repeating
    a write is harmless. Implementations raise core.exceptions.UpstreamError.
    """

    @abstractmethod
    def save_object(self, index: str, record: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def save_objects(self, index: str, records: List[Dict[str, Any]]) -> None:
        """Batch full-object replacement."""
        pass

    @abstractmethod
    def delete_object(self, index: str, object_id: str) -> None:
        """Deleting an absent object is not an error."""
        pass

    @abstractmethod
    def clear(self, index: str) -> None:
        pass

    @abstractmethod
    def set_settings(self, index: str, settings: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def search(self, index: str, query: SearchQuery) -> SearchResult:
        pass

    @abstractmethod
    def list_indices(self) -> List[IndexStats]:
        pass
