from sqlalchemy.orm import Session

from database.repositories import (
    CandidateRepository,
    CompetenceDocumentRepository,
    JobRepository,
)


class RecruitmentRepository:
    """All repositories bound to one Session (one unit of work)."""

    def __init__(self, db: Session):
        self.db = db
        self.candidates = CandidateRepository(db)
        self.jobs = JobRepository(db)
        self.documents = CompetenceDocumentRepository(db)
