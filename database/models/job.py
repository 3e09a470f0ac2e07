from sqlalchemy import Column, String, Text, Integer, Numeric, Boolean, DateTime, JSON, Index

from .base import Base, generate_id, utcnow


class Job(Base):
    __tablename__ = 'job'

    id = Column(String(36), primary_key=True, default=generate_id)

    # Core Identity
    title = Column(Text, nullable=False)
    company = Column(Text, nullable=False)
    location = Column(Text)
    is_remote = Column(Boolean, nullable=False, default=False)

    # Content
    description = Column(Text)
    skills = Column(JSON, nullable=False, default=list)
    employment_type = Column(Text)  # full-time|part-time|contract|freelance
    min_years_experience = Column(Integer)
    salary_min = Column(Numeric)
    salary_max = Column(Numeric)
    currency = Column(Text)

    status = Column(Text, nullable=False, default='active')  # draft|active|closed|archived

    created_by = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_job_status', 'status'),
    )

    @property
    def is_archived(self) -> bool:
        return self.status == 'archived'
