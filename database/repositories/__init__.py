from database.repositories.base import BaseRepository
from database.repositories.candidate import CandidateRepository
from database.repositories.job import JobRepository
from database.repositories.competence_document import CompetenceDocumentRepository

__all__ = [
    'BaseRepository',
    'CandidateRepository',
    'JobRepository',
    'CompetenceDocumentRepository',
]
