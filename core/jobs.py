"""Job records - thin CRUD that keeps the search index in step."""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import sessionmaker

from core.context import RequestContext
from core.exceptions import NotFoundError
from core.search.records import RecordType
from core.search.synchronizer import IndexSynchronizer
from database.models import Job
from database.uow import recruitment_uow

logger = logging.getLogger(__name__)


def job_to_dict(job: Job) -> Dict[str, Any]:
    return {
        "id": job.id,
        "title": job.title,
        "company": job.company,
        "location": job.location,
        "isRemote": bool(job.is_remote),
        "description": job.description,
        "skills": job.skills or [],
        "employmentType": job.employment_type,
        "minYearsExperience": job.min_years_experience,
        "salaryMin": float(job.salary_min) if job.salary_min is not None else None,
        "salaryMax": float(job.salary_max) if job.salary_max is not None else None,
        "currency": job.currency,
        "status": job.status,
        "createdAt": job.created_at.isoformat() if job.created_at else None,
        "updatedAt": job.updated_at.isoformat() if job.updated_at else None,
    }


class JobService:
    def __init__(self, synchronizer: IndexSynchronizer, session_factory: Optional[sessionmaker] = None):
        self.synchronizer = synchronizer
        self.session_factory = session_factory

    def create(self, ctx: RequestContext, data: Dict[str, Any]) -> Dict[str, Any]:
        with recruitment_uow(self.session_factory) as repo:
            result = job_to_dict(repo.jobs.create(data, created_by=ctx.user_id))

        logger.info(f"User {ctx.user_id} created job {result['id']}")
        self.synchronizer.safe_upsert(RecordType.JOB, result["id"])
        return result

    def get(self, job_id: str) -> Dict[str, Any]:
        with recruitment_uow(self.session_factory) as repo:
            job = repo.jobs.get_by_id(job_id)
            if job is None:
                raise NotFoundError(f"Job {job_id} not found")
            return job_to_dict(job)

    def list(self, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
        with recruitment_uow(self.session_factory) as repo:
            return [job_to_dict(j) for j in repo.jobs.list_active(limit, offset)]

    def update(self, ctx: RequestContext, job_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        with recruitment_uow(self.session_factory) as repo:
            job = repo.jobs.get_by_id(job_id)
            if job is None:
                raise NotFoundError(f"Job {job_id} not found")
            result = job_to_dict(repo.jobs.update(job, changes))

        logger.info(f"User {ctx.user_id} updated job {job_id}")
        self.synchronizer.safe_upsert(RecordType.JOB, job_id)
        return result

    def archive(self, ctx: RequestContext, job_id: str) -> Dict[str, Any]:
        with recruitment_uow(self.session_factory) as repo:
            job = repo.jobs.get_by_id(job_id)
            if job is None:
                raise NotFoundError(f"Job {job_id} not found")
            result = job_to_dict(repo.jobs.archive(job))

        logger.info(f"User {ctx.user_id} archived job {job_id}")
        self.synchronizer.safe_upsert(RecordType.JOB, job_id)
        return result
