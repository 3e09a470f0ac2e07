from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, JSON, ForeignKey, Index

from .base import Base, generate_id, utcnow


class CompetenceDocumentRecord(Base):
    """
    Persisted competence document. Sections are stored as a JSON list
    and validated into core.documents.sections models on load.
    """
    __tablename__ = 'competence_document'

    id = Column(String(36), primary_key=True, default=generate_id)
    candidate_id = Column(String(36), ForeignKey('candidate.id'), nullable=False)

    template = Column(Text, nullable=False)
    sections = Column(JSON, nullable=False, default=list)
    status = Column(Text, nullable=False, default='Draft')  # Draft|Generated
    version = Column(Integer, nullable=False, default=1)
    is_anonymized = Column(Boolean, nullable=False, default=False)

    # Rendered artifact, null until a render succeeds
    artifact_url = Column(Text)
    artifact_storage_id = Column(Text)

    created_by = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_competence_document_candidate', 'candidate_id'),
    )
