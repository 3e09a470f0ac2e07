"""
Index records - flattened, search-friendly views of primary records.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from core.exceptions import ValidationError
from core.rendering.document_renderer import initials
from database.models import Candidate, CompetenceDocumentRecord, Job


class RecordType(str, Enum):
    CANDIDATE = "candidate"
    JOB = "job"
    COMPETENCE_FILE = "competence_file"

    @classmethod
    def parse(cls, value: str) -> "RecordType":
        """Accept singular, plural and dashed spellings ('jobs', 'competence-files')."""
        normalized = (value or "").strip().lower().replace("-", "_")
        aliases = {
            "candidate": cls.CANDIDATE,
            "candidates": cls.CANDIDATE,
            "job": cls.JOB,
            "jobs": cls.JOB,
            "competence_file": cls.COMPETENCE_FILE,
            "competence_files": cls.COMPETENCE_FILE,
        }
        if normalized not in aliases:
            raise ValidationError(
                f"Unknown record type: {value}",
                details={"supported": sorted(aliases)}
            )
        return aliases[normalized]


INDEX_SETTINGS: Dict[RecordType, Dict[str, Any]] = {
    RecordType.CANDIDATE: {
        "searchableAttributes": [
            "fullName", "email", "currentTitle", "location", "summary",
            "skills", "languages", "certifications", "education", "_searchableText",
        ],
        "attributesForFaceting": ["status", "skills", "languages", "location"],
        "customRanking": ["desc(experienceYears)", "desc(createdAt)"],
    },
    RecordType.JOB: {
        "searchableAttributes": ["title", "company", "location", "description", "skills", "_searchableText"],
        "attributesForFaceting": ["status", "employmentType", "isRemote", "skills", "company", "location"],
        "customRanking": ["desc(createdAt)"],
    },
    RecordType.COMPETENCE_FILE: {
        "searchableAttributes": ["candidateName", "candidateTitle", "template", "sectionTypes"],
        "attributesForFaceting": ["status", "template", "isAnonymized", "candidateId"],
        "customRanking": ["desc(updatedAt)"],
    },
}


def _timestamp(value: Optional[datetime]) -> Optional[int]:
    return int(value.timestamp()) if value else None


def _searchable_text(*parts: Any) -> str:
    flat = []
    for part in parts:
        if isinstance(part, (list, tuple)):
            flat.extend(str(p) for p in part if p)
        elif part:
            flat.append(str(part))
    return " ".join(flat)


def candidate_record(candidate: Candidate) -> Dict[str, Any]:
    experience = candidate.experience or []
    return {
        "objectID": candidate.id,
        "fullName": candidate.full_name,
        "email": candidate.email,
        "phone": candidate.phone,
        "location": candidate.location,
        "currentTitle": candidate.current_title,
        "experienceYears": candidate.years_of_experience,
        "summary": candidate.summary,
        "skills": list(candidate.skills or []),
        "languages": list(candidate.languages or []),
        "certifications": list(candidate.certifications or []),
        "education": list(candidate.education or []),
        "companies": [entry.get("company") for entry in experience if entry.get("company")],
        "status": candidate.status,
        "createdAt": _timestamp(candidate.created_at),
        "updatedAt": _timestamp(candidate.updated_at),
        "_searchableText": _searchable_text(
            candidate.full_name,
            candidate.current_title,
            candidate.summary,
            candidate.skills,
            [entry.get("title") for entry in experience],
        ),
    }


def job_record(job: Job) -> Dict[str, Any]:
    return {
        "objectID": job.id,
        "title": job.title,
        "company": job.company,
        "location": job.location,
        "isRemote": bool(job.is_remote),
        "description": (job.description or "")[:5000],
        "skills": list(job.skills or []),
        "employmentType": job.employment_type,
        "minYearsExperience": job.min_years_experience,
        "salaryMin": float(job.salary_min) if job.salary_min is not None else None,
        "salaryMax": float(job.salary_max) if job.salary_max is not None else None,
        "currency": job.currency,
        "status": job.status,
        "createdAt": _timestamp(job.created_at),
        "updatedAt": _timestamp(job.updated_at),
        "_searchableText": _searchable_text(job.title, job.company, job.location, job.skills),
    }


def competence_file_record(record: CompetenceDocumentRecord, candidate: Optional[Candidate]) -> Dict[str, Any]:
    name = candidate.full_name if candidate else ""
    if record.is_anonymized and name:
        name = initials(name)

    return {
        "objectID": record.id,
        "candidateId": record.candidate_id,
        "candidateName": name,
        "candidateTitle": candidate.current_title if candidate else None,
        "template": record.template,
        "status": record.status,
        "version": record.version,
        "isAnonymized": bool(record.is_anonymized),
        "sectionTypes": sorted({s.get("type") for s in (record.sections or []) if s.get("type")}),
        "artifactUrl": record.artifact_url,
        "createdAt": _timestamp(record.created_at),
        "updatedAt": _timestamp(record.updated_at),
    }
