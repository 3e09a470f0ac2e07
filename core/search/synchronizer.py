"""
Index Synchronizer - mirror primary records into the search index.

Writes re-read the latest primary record, so whichever call runs last leaves
the index holding the newest state. Calls for the same (record type, id) are
serialized inside the process; different ids run concurrently.
"""
import contextlib
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, Tuple, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.exceptions import SyncFailed, UpstreamError
from core.search.interfaces import SearchIndex, SearchQuery, SearchResult
from core.search.records import (
    INDEX_SETTINGS,
    RecordType,
    candidate_record,
    competence_file_record,
    job_record,
)
from database.repository import RecruitmentRepository
from database.uow import recruitment_uow

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INDEX_NAMES = {
    RecordType.CANDIDATE: "candidates",
    RecordType.JOB: "jobs",
    RecordType.COMPETENCE_FILE: "competence_files",
}


@dataclass(frozen=True)
class SyncFailure:
    operation: str
    record_type: str
    record_id: Optional[str]
    error: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "recordType": self.record_type,
            "recordId": self.record_id,
            "error": self.error,
            "occurredAt": self.occurred_at.isoformat(),
        }


class IndexSynchronizer:
    """
    Keeps the search index consistent with the primary store.

    upsert/remove/reindex_all/stats raise SyncFailed. Request handlers use
    safe_upsert/safe_remove, which log and record the failure instead.
    """

    def __init__(
        self,
        index: SearchIndex,
        session_factory: Optional[sessionmaker] = None,
        index_names: Optional[Dict[RecordType, str]] = None,
        batch_size: int = 1000,
        failure_log_size: int = 100
    ):
        self.index = index
        self.session_factory = session_factory
        self.index_names = {**DEFAULT_INDEX_NAMES, **(index_names or {})}
        self.batch_size = batch_size
        self._failures: Deque[SyncFailure] = deque(maxlen=failure_log_size)

        self._locks: Dict[Tuple[RecordType, str], List[Any]] = {}
        self._locks_guard = threading.Lock()

    def index_name(self, record_type: RecordType) -> str:
        return self.index_names[RecordType(record_type)]

    # ------------------------------------------------------------------
    # Per-id sequencing
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def _serialized(self, record_type: RecordType, record_id: str) -> Iterator[None]:
        key = (record_type, record_id)
        with self._locks_guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def _guard(self, description: str, operation: Callable[[], T]) -> T:
        try:
            return operation()
        except SyncFailed:
            raise
        except (UpstreamError, SQLAlchemyError) as e:
            raise SyncFailed(f"Index sync failed during {description}: {e}", cause=e) from e

    # ------------------------------------------------------------------
    # Record loading
    # ------------------------------------------------------------------

    def _load_record(self, repo: RecruitmentRepository, record_type: RecordType, record_id: str) -> Optional[Dict]:
        """Latest indexable view of a record, or None when it is missing or archived."""
        if record_type == RecordType.CANDIDATE:
            candidate = repo.candidates.get_by_id(record_id)
            if candidate is None or candidate.is_archived:
                return None
            return candidate_record(candidate)

        if record_type == RecordType.JOB:
            job = repo.jobs.get_by_id(record_id)
            if job is None or job.is_archived:
                return None
            return job_record(job)

        document = repo.documents.get_by_id(record_id)
        if document is None:
            return None
        return competence_file_record(document, repo.candidates.get_by_id(document.candidate_id))

    def _iter_records(self, repo: RecruitmentRepository, record_type: RecordType) -> Iterator[List[Dict]]:
        if record_type == RecordType.CANDIDATE:
            for batch in repo.candidates.iter_active(self.batch_size):
                yield [candidate_record(c) for c in batch]
        elif record_type == RecordType.JOB:
            for batch in repo.jobs.iter_active(self.batch_size):
                yield [job_record(j) for j in batch]
        else:
            for batch in repo.documents.iter_all(self.batch_size):
                yield [
                    competence_file_record(d, repo.candidates.get_by_id(d.candidate_id))
                    for d in batch
                ]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def upsert(self, record_type: RecordType, record_id: str) -> str:
        """
        Mirror the latest state of one record.

        Returns:
            'indexed' or 'removed' (missing or archived records are removed)
        """
        record_type = RecordType(record_type)
        index_name = self.index_name(record_type)

        def _run() -> str:
            with self._serialized(record_type, record_id):
                with recruitment_uow(self.session_factory) as repo:
                    record = self._load_record(repo, record_type, record_id)

                if record is None:
                    self.index.delete_object(index_name, record_id)
                    logger.info(f"Removed {record_type.value} {record_id} from {index_name}")
                    return "removed"

                self.index.save_object(index_name, record)
                logger.info(f"Indexed {record_type.value} {record_id} in {index_name}")
                return "indexed"

        return self._guard(f"upsert of {record_type.value} {record_id}", _run)

    def remove(self, record_type: RecordType, record_id: str) -> None:
        record_type = RecordType(record_type)
        index_name = self.index_name(record_type)

        def _run() -> None:
            with self._serialized(record_type, record_id):
                self.index.delete_object(index_name, record_id)
            logger.info(f"Removed {record_type.value} {record_id} from {index_name}")

        self._guard(f"removal of {record_type.value} {record_id}", _run)

    def reindex_all(self, record_type: RecordType) -> int:
        """
        Batch-upsert every indexable record. Safe to re-run: writes are
        full-object replacements keyed by id.

        Returns:
            Number of records written
        """
        record_type = RecordType(record_type)
        index_name = self.index_name(record_type)

        def _run() -> int:
            written = 0
            with recruitment_uow(self.session_factory) as repo:
                for records in self._iter_records(repo, record_type):
                    self.index.save_objects(index_name, records)
                    written += len(records)
                    logger.debug(f"Reindexed batch of {len(records)} into {index_name}")
            logger.info(f"Reindexed {written} {record_type.value} records into {index_name}")
            return written

        return self._guard(f"reindex of {record_type.value}", _run)

    def stats(self) -> Dict[str, Any]:
        """Entry counts per configured index. Read-only."""
        def _run() -> Dict[str, Any]:
            by_name = {s.name: s for s in self.index.list_indices()}
            result = {}
            for record_type, name in self.index_names.items():
                stats = by_name.get(name)
                result[record_type.value] = {
                    "index": name,
                    "entries": stats.entries if stats else 0,
                    "dataSize": stats.data_size if stats else 0,
                    "updatedAt": stats.updated_at if stats else None,
                }
            return result

        return self._guard("stats", _run)

    def initialize(self) -> None:
        """Apply searchable attributes, facets and ranking to every index."""
        def _run() -> None:
            for record_type, settings in INDEX_SETTINGS.items():
                self.index.set_settings(self.index_name(record_type), settings)
                logger.info(f"Configured index {self.index_name(record_type)}")

        self._guard("initialize", _run)

    def clear(self, record_type: Optional[RecordType] = None) -> None:
        """Clear one index, or all of them when record_type is None."""
        targets = [RecordType(record_type)] if record_type else list(self.index_names)

        def _run() -> None:
            for target in targets:
                self.index.clear(self.index_name(target))
                logger.warning(f"Cleared index {self.index_name(target)}")

        self._guard("clear", _run)

    def search(self, record_type: RecordType, query: SearchQuery) -> SearchResult:
        record_type = RecordType(record_type)
        return self._guard(
            f"search of {record_type.value}",
            lambda: self.index.search(self.index_name(record_type), query)
        )

    # ------------------------------------------------------------------
    # Fire-and-continue wrappers
    # ------------------------------------------------------------------

    def _record_failure(self, operation: str, record_type: RecordType, record_id: str, error: SyncFailed) -> None:
        logger.warning(f"Index {operation} of {record_type.value} {record_id} failed: {error.message}")
        self._failures.append(SyncFailure(
            operation=operation,
            record_type=record_type.value,
            record_id=record_id,
            error=error.message,
        ))

    def safe_upsert(self, record_type: RecordType, record_id: str) -> Optional[str]:
        try:
            return self.upsert(record_type, record_id)
        except SyncFailed as e:
            self._record_failure("upsert", RecordType(record_type), record_id, e)
            return None

    def safe_remove(self, record_type: RecordType, record_id: str) -> None:
        try:
            self.remove(record_type, record_id)
        except SyncFailed as e:
            self._record_failure("remove", RecordType(record_type), record_id, e)

    def recent_failures(self) -> List[SyncFailure]:
        return list(self._failures)
