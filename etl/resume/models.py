#!/usr/bin/env python3
"""
Resume Models - Data structures for résumé intake and extraction.
"""

import re
from dataclasses import dataclass
from datetime import datetime, date
from typing import List, Optional, Any

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

import logging
logger = logging.getLogger(__name__)

_CURRENT_MARKERS = {'present', 'current', 'now', 'today', 'ongoing'}
_DATE_FORMATS = ('%Y-%m', '%Y/%m', '%m/%Y', '%b %Y', '%B %Y', '%Y')


@dataclass(frozen=True)
class RawDocument:
    """An uploaded document as received. Lives for one request only."""
    content: bytes
    mime_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)


class _ProfileModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra='ignore',
    )


class ExperienceEntry(_ProfileModel):
    """One role held by the candidate."""
    company: str = ""
    title: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    responsibilities: str = ""

    @field_validator('responsibilities', mode='before')
    @classmethod
    def _join_responsibilities(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return "\n".join(str(item).strip() for item in value if str(item).strip())
        return str(value)

    @field_validator('company', 'title', mode='before')
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def is_current(self) -> bool:
        return not self.end_date or self.end_date.strip().lower() in _CURRENT_MARKERS


def _parse_partial_date(text: Optional[str]) -> Optional[date]:
    if not text:
        return None
    cleaned = text.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None


class CandidateProfile(_ProfileModel):
    """Structured résumé data. Immutable once returned by the extractor."""
    full_name: str
    current_title: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    years_of_experience: Optional[float] = None
    skills: List[str] = Field(default_factory=list)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    summary: str = ""

    @field_validator('years_of_experience', mode='before')
    @classmethod
    def _parse_years(cls, value: Any) -> Optional[float]:
        # Models often answer "8+" or "about 5 years"
        if value is None or isinstance(value, (int, float)):
            return value
        match = re.search(r"\d+(?:\.\d+)?", str(value))
        return float(match.group()) if match else None

    @field_validator('skills', 'education', 'certifications', 'languages', mode='before')
    @classmethod
    def _coerce_string_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(',') if part.strip()]
        items = []
        for item in value:
            if isinstance(item, dict):
                # {"degree": ..., "institution": ...} style entries
                item = ", ".join(str(v) for v in item.values() if v)
            text = str(item).strip()
            if text:
                items.append(text)
        return items

    @field_validator('current_title', 'summary', mode='before')
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def calculate_experience_from_dates(self) -> float:
        """Calculate total years of experience from the experience date ranges."""
        total_months = 0

        for entry in self.experience:
            start = _parse_partial_date(entry.start_date)
            if start is None:
                continue

            end = date.today() if entry.is_current else _parse_partial_date(entry.end_date)
            if end is None:
                logger.warning(f"Could not parse end date '{entry.end_date}' for {entry.company}")
                continue

            diff = relativedelta(end, start)
            total_months += max(0, diff.years * 12 + diff.months)

        return round(total_months / 12, 1)

    def with_computed_experience(self) -> "CandidateProfile":
        """Return a copy with years_of_experience filled from dates when absent."""
        if self.years_of_experience is not None or not self.experience:
            return self
        return self.model_copy(update={'years_of_experience': self.calculate_experience_from_dates()})

    def to_payload(self) -> dict:
        """camelCase JSON-ready dict, as returned to API clients."""
        return self.model_dump(by_alias=True, mode='json')
