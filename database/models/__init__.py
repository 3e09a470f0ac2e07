from .base import Base, generate_id, utcnow
from .candidate import Candidate
from .job import Job
from .competence_document import CompetenceDocumentRecord

__all__ = [
    'Base',
    'generate_id',
    'utcnow',
    'Candidate',
    'Job',
    'CompetenceDocumentRecord',
]
