"""
Section Generator - constrained markdown for competence document sections.

AI-written sections go through a fixed prompt template per section type.
Sections that are a plain projection of the profile are built locally.
"""
import json
import logging
import re
from typing import Callable, Dict, List, Optional

from core.exceptions import GenerationFailed, UpstreamError, ValidationError
from core.documents.sections import JobDescription, SectionType
from core.llm.interfaces import LLMProvider
from core.llm.system_prompts import (
    CORE_COMPETENCIES_TEMPLATE,
    EXPERIENCE_SUMMARY_TEMPLATE,
    FUNCTIONAL_SKILLS_TEMPLATE,
    PROFESSIONAL_EXPERIENCE_TEMPLATE,
    PROFESSIONAL_SUMMARY_TEMPLATE,
    SECTION_SYSTEM_PROMPT,
    TARGET_ROLE_TEMPLATE,
    TECHNICAL_EXPERTISE_TEMPLATE,
)
from etl.resume.models import CandidateProfile

logger = logging.getLogger(__name__)

PROMPT_TEMPLATES: Dict[SectionType, str] = {
    SectionType.SUMMARY: PROFESSIONAL_SUMMARY_TEMPLATE,
    SectionType.EXPERIENCE: PROFESSIONAL_EXPERIENCE_TEMPLATE,
    SectionType.EXPERIENCE_SUMMARY: EXPERIENCE_SUMMARY_TEMPLATE,
    SectionType.CORE_COMPETENCIES: CORE_COMPETENCIES_TEMPLATE,
    SectionType.TECHNICAL_EXPERTISE: TECHNICAL_EXPERTISE_TEMPLATE,
    SectionType.FUNCTIONAL_SKILLS: FUNCTIONAL_SKILLS_TEMPLATE,
}

_OUTER_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n(.*?)\n?```\s*$", re.DOTALL)
_STRONG_TAG_RE = re.compile(r"<(strong|b)>(.*?)</\1>", re.IGNORECASE | re.DOTALL)


def normalize_generated_markdown(text: str) -> str:
    """Strip a wrapping code fence and rewrite <strong>/<b> tags as **bold**."""
    cleaned = (text or '').strip()
    match = _OUTER_FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1).strip()
    return _STRONG_TAG_RE.sub(lambda m: f"**{m.group(2)}**", cleaned)


# ---------------------------------------------------------------------------
# Profile-derived sections
# ---------------------------------------------------------------------------

def _header(profile: CandidateProfile) -> str:
    # Name and contact details are added at render time so anonymization can hide them
    lines = []
    if profile.current_title:
        lines.append(f"### {profile.current_title}")
    facts = []
    if profile.years_of_experience:
        facts.append(f"**{profile.years_of_experience:g} years** of experience")
    if profile.location:
        facts.append(profile.location)
    if facts:
        lines.append(" | ".join(facts))
    return "\n\n".join(lines)


def _skills(profile: CandidateProfile) -> str:
    return ", ".join(f"`{skill}`" for skill in profile.skills)


def _technical_skills(profile: CandidateProfile) -> str:
    return "\n".join(f"- `{skill}`" for skill in profile.skills)


def _bullets(items) -> str:
    return "\n".join(f"- {item}" for item in items)


def _mentions(text: str, term: str) -> bool:
    # \b misbehaves on terms such as C# or C++, and "c" must not match inside "c#"
    return re.search(rf"(?<![\w#+]){re.escape(term)}(?![\w#+])", text) is not None


def prioritize_skills(skills: List[str], job_description: JobDescription) -> List[str]:
    """Skills the role asks for first, each group in its original order."""
    keywords = job_description.keywords()
    if not keywords:
        return list(skills)

    def matches(skill: str) -> bool:
        term = skill.strip().lower()
        return bool(term) and any(_mentions(keyword, term) or _mentions(term, keyword) for keyword in keywords)

    matching = [skill for skill in skills if matches(skill)]
    return matching + [skill for skill in skills if not matches(skill)]


def target_role_context(job_description: Optional[JobDescription], client_name: Optional[str]) -> str:
    """Prompt block describing the target role, or an empty string when untargeted."""
    if job_description is None and not client_name:
        return ""

    role = job_description.model_dump(by_alias=True, exclude_none=True) if job_description else {}
    role = {key: value for key, value in role.items() if value}
    if client_name:
        role["client"] = client_name
    return f"{TARGET_ROLE_TEMPLATE.strip()}\n\nTarget role:\n{json.dumps(role, indent=2, ensure_ascii=False)}"


_SKILL_SECTIONS = (SectionType.SKILLS, SectionType.TECHNICAL_SKILLS)

_PROFILE_SECTIONS: Dict[SectionType, Callable[[CandidateProfile], str]] = {
    SectionType.HEADER: _header,
    SectionType.SKILLS: _skills,
    SectionType.TECHNICAL_SKILLS: _technical_skills,
    SectionType.EDUCATION: lambda profile: _bullets(profile.education),
    SectionType.CERTIFICATIONS: lambda profile: _bullets(profile.certifications),
    SectionType.LANGUAGES: lambda profile: _bullets(profile.languages),
}


class SectionGenerator:
    """
    Produces constrained markdown for one section at a time.

    Output is not validated structurally; the markdown renderer tolerates
    near-miss formatting. GenerationFailed is recoverable for callers.
    """

    def __init__(self, llm: LLMProvider):
        self.llm = llm

    @staticmethod
    def is_ai_generated(section_type: SectionType) -> bool:
        return section_type in PROMPT_TEMPLATES

    @staticmethod
    def can_generate(section_type: SectionType) -> bool:
        return section_type in PROMPT_TEMPLATES or section_type in _PROFILE_SECTIONS

    def generate(
        self,
        profile: CandidateProfile,
        section_type: SectionType,
        job_description: Optional[JobDescription] = None,
        client_name: Optional[str] = None
    ) -> str:
        """
        Generate markdown content for a section.

        With a job description or client name the AI prompt is tailored to that
        role, and skill lists put the skills the role asks for first.

        Raises:
            ValidationError: The section type has no generator (custom sections)
            GenerationFailed: Upstream error or empty content
        """
        section_type = SectionType(section_type)

        builder = _PROFILE_SECTIONS.get(section_type)
        if builder is not None:
            if job_description is not None and section_type in _SKILL_SECTIONS:
                profile = profile.model_copy(update={"skills": prioritize_skills(profile.skills, job_description)})
            return builder(profile)

        template = PROMPT_TEMPLATES.get(section_type)
        if template is None:
            raise ValidationError(
                f"Section type '{section_type.value}' cannot be generated",
                details={"section_type": section_type.value}
            )

        user_message = (
            f"{template.strip()}\n\n"
            f"Candidate data:\n{json.dumps(profile.to_payload(), indent=2, ensure_ascii=False)}"
        )
        role_context = target_role_context(job_description, client_name)
        if role_context:
            user_message = f"{user_message}\n\n{role_context}"

        try:
            raw = self.llm.generate_text(SECTION_SYSTEM_PROMPT, user_message)
        except UpstreamError as e:
            logger.warning(f"Generation of {section_type.value} for {profile.full_name} failed: {e}")
            raise GenerationFailed(f"Section generation failed: {e.message}", cause=e) from e

        content = normalize_generated_markdown(raw)
        if not content:
            raise GenerationFailed(f"Completion service returned empty content for {section_type.value}")

        logger.info(f"Generated {section_type.value} section ({len(content)} chars) for {profile.full_name}")
        return content
