#!/usr/bin/env python3
"""
Request models for API endpoints.

Bodies are camelCase on the wire; every model also accepts snake_case names.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal, Optional

from core.documents.sections import JobDescription
from core.search.interfaces import FilterValue, SearchQuery
from etl.resume.models import ExperienceEntry


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResumeTextRequest(_CamelModel):
    """Pasted résumé text, the JSON alternative to a file upload."""
    text: str = Field(..., description="Résumé text")


class CandidateUpdate(_CamelModel):
    """Partial candidate update. Only fields present in the body are changed."""
    full_name: Optional[str] = Field(None, min_length=1)
    current_title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    years_of_experience: Optional[float] = Field(None, ge=0)
    summary: Optional[str] = None
    skills: Optional[List[str]] = None
    experience: Optional[List[ExperienceEntry]] = None
    education: Optional[List[str]] = None
    certifications: Optional[List[str]] = None
    languages: Optional[List[str]] = None

    @field_validator("full_name")
    @classmethod
    def _full_name_not_null(cls, value: Optional[str]) -> str:
        # omitted leaves the name alone; explicit null would violate NOT NULL
        if value is None:
            raise ValueError("fullName cannot be null")
        return value

    def to_changes(self) -> Dict[str, Any]:
        """snake_case column changes; experience is stored camelCase."""
        changes = self.model_dump(exclude_unset=True, exclude={"experience"})
        if "experience" in self.model_fields_set:
            changes["experience"] = [
                entry.model_dump(by_alias=True, mode="json") for entry in self.experience or []
            ]
        return changes


class JobCreate(_CamelModel):
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: Optional[str] = None
    is_remote: bool = False
    description: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    employment_type: Optional[Literal["full-time", "part-time", "contract", "freelance"]] = None
    min_years_experience: Optional[int] = Field(None, ge=0)
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    status: Literal["draft", "active", "closed"] = "active"


class JobUpdate(_CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    company: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = None
    is_remote: Optional[bool] = None
    description: Optional[str] = None
    skills: Optional[List[str]] = None
    employment_type: Optional[Literal["full-time", "part-time", "contract", "freelance"]] = None
    min_years_experience: Optional[int] = Field(None, ge=0)
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    status: Optional[Literal["draft", "active", "closed"]] = None


class SectionInput(_CamelModel):
    """A section as sent by the editor. Ids are assigned when omitted."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    type: str
    title: Optional[str] = None
    content: str = ""
    visible: bool = True
    order: Optional[int] = None


def _sections_payload(sections: Optional[List[SectionInput]]) -> Optional[List[Dict[str, Any]]]:
    if sections is None:
        return None
    return [s.model_dump(exclude_none=True) for s in sections]


class _TargetRole(_CamelModel):
    """Optional role and client that generated content is tailored to."""
    job_description: Optional[JobDescription] = None
    client_name: Optional[str] = None

    def job_description_payload(self) -> Optional[Dict[str, Any]]:
        if self.job_description is None:
            return None
        return self.job_description.model_dump()


class CompetenceFileCreate(_TargetRole):
    candidate_id: str = Field(..., min_length=1)
    template: str = "professional"
    sections: Optional[List[SectionInput]] = None
    is_anonymized: bool = False
    generate_missing: bool = Field(False, description="Generate content for empty sections")

    def sections_payload(self) -> Optional[List[Dict[str, Any]]]:
        return _sections_payload(self.sections)


class CompetenceFileUpdate(_CamelModel):
    sections: Optional[List[SectionInput]] = None
    template: Optional[str] = None
    is_anonymized: Optional[bool] = None

    def sections_payload(self) -> Optional[List[Dict[str, Any]]]:
        return _sections_payload(self.sections)


class SectionGenerateRequest(_TargetRole):
    pass


class RenderRequest(_CamelModel):
    format: str = Field("pdf", description="pdf or html")
    logo_url: Optional[str] = None


class GenerateDocumentRequest(_TargetRole):
    """Stateless render of an inline candidate; nothing is stored."""
    candidate_data: Dict[str, Any]
    template: str = "professional"
    sections: Optional[List[SectionInput]] = None
    format: str = "pdf"
    is_anonymized: bool = False
    logo_url: Optional[str] = None
    generate_missing: bool = False

    def sections_payload(self) -> Optional[List[Dict[str, Any]]]:
        return _sections_payload(self.sections)


class SyncRequest(_CamelModel):
    """Administrative index operation."""
    action: Literal["initialize", "index_all", "index_single", "remove", "clear", "stats"]
    type: str = Field("all", description="candidates, jobs, competence-files or all")
    id: Optional[str] = None


class SearchRequest(_CamelModel):
    q: str = ""
    filters: Dict[str, FilterValue] = Field(default_factory=dict)
    page: int = Field(0, ge=0)
    limit: int = Field(20, ge=1, le=1000)
    facets: List[str] = Field(default_factory=list)
    sort_by: Optional[str] = None
    around_lat_lng: Optional[str] = None
    around_radius: Optional[int] = Field(None, ge=1)

    @field_validator("facets", mode="before")
    @classmethod
    def _split_facets(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    def to_query(self) -> SearchQuery:
        return SearchQuery(**self.model_dump())
