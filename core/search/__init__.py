"""Search index - interfaces, adapters and the index synchronizer."""
from core.search.interfaces import IndexStats, SearchIndex, SearchQuery, SearchResult
from core.search.algolia_client import AlgoliaClient
from core.search.memory_index import InMemorySearchIndex
from core.search.records import RecordType
from core.search.synchronizer import IndexSynchronizer, SyncFailure

__all__ = [
    'IndexStats',
    'SearchIndex',
    'SearchQuery',
    'SearchResult',
    'AlgoliaClient',
    'InMemorySearchIndex',
    'RecordType',
    'IndexSynchronizer',
    'SyncFailure',
]
