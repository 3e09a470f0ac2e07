from sqlalchemy import Column, String, Text, Float, DateTime, JSON, Index

from .base import Base, generate_id, utcnow


class Candidate(Base):
    """
    Primary candidate record. Archived rather than deleted.
    """
    __tablename__ = 'candidate'

    id = Column(String(36), primary_key=True, default=generate_id)

    # Identity
    full_name = Column(Text, nullable=False)
    email = Column(Text, unique=True)
    phone = Column(Text)
    location = Column(Text)

    # Profile
    current_title = Column(Text)
    years_of_experience = Column(Float)
    summary = Column(Text)
    skills = Column(JSON, nullable=False, default=list)
    experience = Column(JSON, nullable=False, default=list)
    education = Column(JSON, nullable=False, default=list)
    certifications = Column(JSON, nullable=False, default=list)
    languages = Column(JSON, nullable=False, default=list)

    status = Column(Text, nullable=False, default='active')  # active|archived

    # Audit
    created_by = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    archived_at = Column(DateTime(timezone=True))

    __table_args__ = (
        Index('idx_candidate_status', 'status'),
    )

    @property
    def is_archived(self) -> bool:
        return self.status == 'archived'
