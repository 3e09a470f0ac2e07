import logging
from typing import Iterator, List, Optional

from sqlalchemy import select

from database.models import CompetenceDocumentRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class CompetenceDocumentRepository(BaseRepository):
    def get_by_id(self, document_id: str) -> Optional[CompetenceDocumentRecord]:
        return self.db.get(CompetenceDocumentRecord, document_id)

    def add(self, record: CompetenceDocumentRecord) -> CompetenceDocumentRecord:
        self.db.add(record)
        self.db.flush()
        return record

    def save(self, record: CompetenceDocumentRecord) -> CompetenceDocumentRecord:
        self.db.flush()
        return record

    def list_for_candidate(self, candidate_id: str) -> List[CompetenceDocumentRecord]:
        stmt = (
            select(CompetenceDocumentRecord)
            .where(CompetenceDocumentRecord.candidate_id == candidate_id)
            .order_by(CompetenceDocumentRecord.created_at)
        )
        return list(self.db.execute(stmt).scalars())

    def iter_all(self, batch_size: int = 500) -> Iterator[List[CompetenceDocumentRecord]]:
        last_id = ''
        while True:
            stmt = (
                select(CompetenceDocumentRecord)
                .where(CompetenceDocumentRecord.id > last_id)
                .order_by(CompetenceDocumentRecord.id)
                .limit(batch_size)
            )
            batch = list(self.db.execute(stmt).scalars())
            if not batch:
                return
            yield batch
            last_id = batch[-1].id
