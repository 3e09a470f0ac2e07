import logging
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import select, func

from database.models import Candidate, utcnow
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    'full_name', 'email', 'phone', 'location', 'current_title', 'years_of_experience',
    'summary', 'skills', 'experience', 'education', 'certifications', 'languages',
)


class CandidateRepository(BaseRepository):
    def get_by_id(self, candidate_id: str) -> Optional[Candidate]:
        return self.db.get(Candidate, candidate_id)

    def get_by_email(self, email: str) -> Optional[Candidate]:
        stmt = select(Candidate).where(func.lower(Candidate.email) == email.lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, data: Dict[str, Any], created_by: Optional[str] = None) -> Candidate:
        candidate = Candidate(
            **{field: data[field] for field in PROFILE_FIELDS if field in data},
            created_by=created_by,
        )
        self.db.add(candidate)
        self.db.flush()
        return candidate

    def update(self, candidate: Candidate, changes: Dict[str, Any]) -> Candidate:
        for field in PROFILE_FIELDS:
            if field in changes:
                setattr(candidate, field, changes[field])
        candidate.updated_at = utcnow()
        self.db.flush()
        return candidate

    def archive(self, candidate: Candidate) -> Candidate:
        candidate.status = 'archived'
        candidate.archived_at = utcnow()
        candidate.updated_at = candidate.archived_at
        self.db.flush()
        return candidate

    def list_active(self, limit: int = 50, offset: int = 0) -> List[Candidate]:
        stmt = (
            select(Candidate)
            .where(Candidate.status != 'archived')
            .order_by(Candidate.created_at.desc(), Candidate.id)
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.execute(stmt).scalars())

    def iter_active(self, batch_size: int = 500) -> Iterator[List[Candidate]]:
        """Yield non-archived candidates in id order, one batch at a time."""
        last_id = ''
        while True:
            stmt = (
                select(Candidate)
                .where(Candidate.status != 'archived', Candidate.id > last_id)
                .order_by(Candidate.id)
                .limit(batch_size)
            )
            batch = list(self.db.execute(stmt).scalars())
            if not batch:
                return
            yield batch
            last_id = batch[-1].id

    def count_active(self) -> int:
        stmt = select(func.count()).select_from(Candidate).where(Candidate.status != 'archived')
        return self.db.execute(stmt).scalar_one()
