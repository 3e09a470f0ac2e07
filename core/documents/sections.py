"""
Competence document domain models.

A CompetenceDocument owns an ordered list of typed sections. Section kinds are
a closed enum; every consumer dispatches on it exhaustively.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SectionType(str, Enum):
    HEADER = "header"
    SUMMARY = "summary"
    SKILLS = "skills"
    TECHNICAL_SKILLS = "technical-skills"
    FUNCTIONAL_SKILLS = "functional-skills"
    EXPERIENCE = "experience"
    EXPERIENCE_SUMMARY = "experience-summary"
    CORE_COMPETENCIES = "core-competencies"
    TECHNICAL_EXPERTISE = "technical-expertise"
    EDUCATION = "education"
    CERTIFICATIONS = "certifications"
    LANGUAGES = "languages"
    CUSTOM = "custom"


class DocumentStatus(str, Enum):
    DRAFT = "Draft"
    GENERATED = "Generated"


DEFAULT_SECTION_TITLES = {
    SectionType.HEADER: "Header",
    SectionType.SUMMARY: "Professional Summary",
    SectionType.SKILLS: "Skills",
    SectionType.TECHNICAL_SKILLS: "Technical Skills",
    SectionType.FUNCTIONAL_SKILLS: "Functional Skills",
    SectionType.EXPERIENCE: "Professional Experience",
    SectionType.EXPERIENCE_SUMMARY: "Professional Experiences Summary",
    SectionType.CORE_COMPETENCIES: "Core Competencies",
    SectionType.TECHNICAL_EXPERTISE: "Technical Expertise",
    SectionType.EDUCATION: "Education",
    SectionType.CERTIFICATIONS: "Certifications",
    SectionType.LANGUAGES: "Languages",
    SectionType.CUSTOM: "Additional Information",
}

# Layout used when a document is created without explicit sections
DEFAULT_LAYOUT = (
    SectionType.HEADER,
    SectionType.SUMMARY,
    SectionType.CORE_COMPETENCIES,
    SectionType.TECHNICAL_SKILLS,
    SectionType.EXPERIENCE_SUMMARY,
    SectionType.EXPERIENCE,
    SectionType.EDUCATION,
    SectionType.CERTIFICATIONS,
    SectionType.LANGUAGES,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentSection(_DocumentModel):
    """One section of a competence document. Content is constrained markdown."""
    id: str = Field(..., min_length=1)
    title: str = ""
    type: SectionType
    content: str = ""
    visible: bool = True
    order: int = 0

    @field_validator('content', mode='before')
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    def display_title(self) -> str:
        return self.title or DEFAULT_SECTION_TITLES[self.type]


class ArtifactRef(_DocumentModel):
    """Where the rendered document lives in object storage."""
    url: str
    storage_id: str


class CompetenceDocument(_DocumentModel):
    id: str
    candidate_id: str
    template: str
    sections: List[DocumentSection] = Field(default_factory=list)
    status: DocumentStatus = DocumentStatus.DRAFT
    version: int = Field(default=1, ge=1)
    artifact: Optional[ArtifactRef] = None
    is_anonymized: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator('sections')
    @classmethod
    def _unique_section_ids(cls, sections: List[DocumentSection]) -> List[DocumentSection]:
        seen = set()
        for section in sections:
            if section.id in seen:
                raise ValueError(f"Duplicate section id: {section.id}")
            seen.add(section.id)
        return sections

    def section(self, section_id: str) -> Optional[DocumentSection]:
        return next((s for s in self.sections if s.id == section_id), None)

    def ordered_sections(self, visible_only: bool = True) -> List[DocumentSection]:
        """Sections in render order. sorted() is stable, so equal orders keep list order."""
        sections = [s for s in self.sections if s.visible or not visible_only]
        return sorted(sections, key=lambda s: s.order)

    def content_fingerprint(self) -> list:
        """Everything that counts as document content for versioning purposes."""
        return [
            self.template,
            self.is_anonymized,
            [s.model_dump(mode='json') for s in self.sections],
        ]


class JobDescription(_DocumentModel):
    """The role a competence document is being tailored for."""
    title: Optional[str] = None
    company: Optional[str] = None
    text: str = ""
    requirements: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)

    def keywords(self) -> List[str]:
        """Lower-cased skill and requirement terms used to rank candidate skills."""
        return [term.strip().lower() for term in self.skills + self.requirements if term.strip()]
