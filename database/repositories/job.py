import logging
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import select, func

from database.models import Job, utcnow
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

JOB_FIELDS = (
    'title', 'company', 'location', 'is_remote', 'description', 'skills', 'employment_type',
    'min_years_experience', 'salary_min', 'salary_max', 'currency', 'status',
)


class JobRepository(BaseRepository):
    def get_by_id(self, job_id: str) -> Optional[Job]:
        return self.db.get(Job, job_id)

    def create(self, data: Dict[str, Any], created_by: Optional[str] = None) -> Job:
        job = Job(**{field: data[field] for field in JOB_FIELDS if field in data}, created_by=created_by)
        self.db.add(job)
        self.db.flush()
        return job

    def update(self, job: Job, changes: Dict[str, Any]) -> Job:
        for field in JOB_FIELDS:
            if field in changes:
                setattr(job, field, changes[field])
        job.updated_at = utcnow()
        self.db.flush()
        return job

    def archive(self, job: Job) -> Job:
        job.status = 'archived'
        job.updated_at = utcnow()
        self.db.flush()
        return job

    def list_active(self, limit: int = 50, offset: int = 0) -> List[Job]:
        stmt = (
            select(Job)
            .where(Job.status != 'archived')
            .order_by(Job.created_at.desc(), Job.id)
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.execute(stmt).scalars())

    def iter_active(self, batch_size: int = 500) -> Iterator[List[Job]]:
        last_id = ''
        while True:
            stmt = (
                select(Job)
                .where(Job.status != 'archived', Job.id > last_id)
                .order_by(Job.id)
                .limit(batch_size)
            )
            batch = list(self.db.execute(stmt).scalars())
            if not batch:
                return
            yield batch
            last_id = batch[-1].id
