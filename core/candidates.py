"""
Candidate records - thin CRUD that keeps the search index in step.

Every mutation commits first, then fires an index upsert whose failure is
logged and recorded but never returned to the caller.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from core.context import RequestContext
from core.exceptions import ConflictError, NotFoundError
from core.search.records import RecordType
from core.search.synchronizer import IndexSynchronizer
from database.models import Candidate
from database.uow import recruitment_uow
from etl.resume.models import CandidateProfile

logger = logging.getLogger(__name__)


def candidate_to_dict(candidate: Candidate) -> Dict[str, Any]:
    return {
        "id": candidate.id,
        "fullName": candidate.full_name,
        "email": candidate.email,
        "phone": candidate.phone,
        "location": candidate.location,
        "currentTitle": candidate.current_title,
        "yearsOfExperience": candidate.years_of_experience,
        "summary": candidate.summary,
        "skills": candidate.skills or [],
        "experience": candidate.experience or [],
        "education": candidate.education or [],
        "certifications": candidate.certifications or [],
        "languages": candidate.languages or [],
        "status": candidate.status,
        "createdAt": candidate.created_at.isoformat() if candidate.created_at else None,
        "updatedAt": candidate.updated_at.isoformat() if candidate.updated_at else None,
    }


def profile_to_columns(profile: CandidateProfile) -> Dict[str, Any]:
    """Column values for a validated profile; experience is stored camelCase."""
    payload = profile.to_payload()
    return {
        "full_name": profile.full_name,
        "email": profile.email,
        "phone": profile.phone,
        "location": profile.location,
        "current_title": profile.current_title,
        "years_of_experience": profile.years_of_experience,
        "summary": profile.summary,
        "skills": payload["skills"],
        "experience": payload["experience"],
        "education": payload["education"],
        "certifications": payload["certifications"],
        "languages": payload["languages"],
    }


def _is_email_conflict(error: IntegrityError) -> bool:
    """A unique-email violation from a concurrent insert that slipped past the lookup."""
    return "email" in str(error.orig).lower()


class CandidateService:
    def __init__(self, synchronizer: IndexSynchronizer, session_factory: Optional[sessionmaker] = None):
        self.synchronizer = synchronizer
        self.session_factory = session_factory

    def _sync(self, candidate_id: str, document_ids: List[str]) -> None:
        """Mirror the candidate and every competence file that shows its name or title."""
        self.synchronizer.safe_upsert(RecordType.CANDIDATE, candidate_id)
        for document_id in document_ids:
            self.synchronizer.safe_upsert(RecordType.COMPETENCE_FILE, document_id)

    def create(self, ctx: RequestContext, profile: CandidateProfile) -> Dict[str, Any]:
        try:
            with recruitment_uow(self.session_factory) as repo:
                if profile.email and repo.candidates.get_by_email(profile.email):
                    raise ConflictError(
                        f"A candidate with email {profile.email} already exists",
                        details={"email": profile.email}
                    )
                candidate = repo.candidates.create(profile_to_columns(profile), created_by=ctx.user_id)
                result = candidate_to_dict(candidate)
        except IntegrityError as e:
            if not _is_email_conflict(e):
                raise
            raise ConflictError(f"A candidate with email {profile.email} already exists", details={"email": profile.email}) from e

        logger.info(f"User {ctx.user_id} created candidate {result['id']}")
        self.synchronizer.safe_upsert(RecordType.CANDIDATE, result["id"])
        return result

    def get(self, candidate_id: str) -> Dict[str, Any]:
        with recruitment_uow(self.session_factory) as repo:
            candidate = repo.candidates.get_by_id(candidate_id)
            if candidate is None:
                raise NotFoundError(f"Candidate {candidate_id} not found")
            return candidate_to_dict(candidate)

    def list(self, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
        with recruitment_uow(self.session_factory) as repo:
            return [candidate_to_dict(c) for c in repo.candidates.list_active(limit, offset)]

    def update(self, ctx: RequestContext, candidate_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply column changes (snake_case keys)."""
        email = changes.get("email")
        try:
            with recruitment_uow(self.session_factory) as repo:
                candidate = repo.candidates.get_by_id(candidate_id)
                if candidate is None:
                    raise NotFoundError(f"Candidate {candidate_id} not found")

                if email:
                    existing = repo.candidates.get_by_email(email)
                    if existing is not None and existing.id != candidate_id:
                        raise ConflictError(f"A candidate with email {email} already exists", details={"email": email})

                result = candidate_to_dict(repo.candidates.update(candidate, changes))
                document_ids = [d.id for d in repo.documents.list_for_candidate(candidate_id)]
        except IntegrityError as e:
            if not _is_email_conflict(e):
                raise
            raise ConflictError(f"A candidate with email {email} already exists", details={"email": email}) from e

        logger.info(f"User {ctx.user_id} updated candidate {candidate_id}")
        self._sync(candidate_id, document_ids)
        return result

    def archive(self, ctx: RequestContext, candidate_id: str) -> Dict[str, Any]:
        with recruitment_uow(self.session_factory) as repo:
            candidate = repo.candidates.get_by_id(candidate_id)
            if candidate is None:
                raise NotFoundError(f"Candidate {candidate_id} not found")
            result = candidate_to_dict(repo.candidates.archive(candidate))
            document_ids = [d.id for d in repo.documents.list_for_candidate(candidate_id)]

        logger.info(f"User {ctx.user_id} archived candidate {candidate_id}")
        # upsert sees the archived status and removes the index entry
        self._sync(candidate_id, document_ids)
        return result
