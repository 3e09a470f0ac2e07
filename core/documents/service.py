"""
Competence document lifecycle.

Create -> edit sections (each content change bumps the version and returns
the document to Draft) -> render and publish (Generated, no version bump).
A failed publish leaves the stored document untouched.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import sessionmaker

from core.context import RequestContext
from core.documents.section_generator import SectionGenerator
from core.documents.sections import (
    DEFAULT_LAYOUT,
    DEFAULT_SECTION_TITLES,
    ArtifactRef,
    CompetenceDocument,
    DocumentSection,
    DocumentStatus,
    JobDescription,
    SectionType,
    utcnow,
)
from core.exceptions import GenerationFailed, NotFoundError, ValidationError
from core.rendering.document_renderer import DocumentRenderer, get_template, initials
from core.search.records import RecordType
from core.search.synchronizer import IndexSynchronizer
from core.storage.publisher import ArtifactCategory, ArtifactPublisher, artifact_filename, document_filename
from database.models import Candidate, CompetenceDocumentRecord
from database.uow import recruitment_uow
from etl.resume.models import CandidateProfile

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = {
    "pdf": "application/pdf",
    "html": "text/html; charset=utf-8",
}


def new_section_id(section_type: SectionType) -> str:
    return f"{section_type.value}-{uuid.uuid4().hex[:8]}"


def invalid_input(message: str, error: PydanticValidationError) -> ValidationError:
    return ValidationError(message, details={"errors": error.errors(include_url=False, include_context=False, include_input=False)})


def profile_from_candidate(candidate: Candidate) -> CandidateProfile:
    return CandidateProfile(
        full_name=candidate.full_name,
        current_title=candidate.current_title or "",
        email=candidate.email,
        phone=candidate.phone,
        location=candidate.location,
        years_of_experience=candidate.years_of_experience,
        skills=candidate.skills or [],
        experience=candidate.experience or [],
        education=candidate.education or [],
        certifications=candidate.certifications or [],
        languages=candidate.languages or [],
        summary=candidate.summary or "",
    )


def parse_job_description(raw: Optional[Dict[str, Any]]) -> Optional[JobDescription]:
    if raw is None:
        return None
    try:
        return JobDescription.model_validate(raw)
    except PydanticValidationError as e:
        raise invalid_input("Invalid job description", e)


def build_sections(raw_sections: Optional[List[Dict[str, Any]]]) -> List[DocumentSection]:
    """Validate incoming sections, filling ids, titles and order where absent."""
    if raw_sections is None:
        return [
            DocumentSection(
                id=new_section_id(section_type),
                title=DEFAULT_SECTION_TITLES[section_type],
                type=section_type,
                order=position,
            )
            for position, section_type in enumerate(DEFAULT_LAYOUT)
        ]

    sections = []
    for position, raw in enumerate(raw_sections):
        data = dict(raw)
        try:
            section_type = SectionType(data.get("type", SectionType.CUSTOM))
        except ValueError:
            raise ValidationError(
                f"Unknown section type: {data.get('type')}",
                details={"supported": [t.value for t in SectionType]}
            )
        data["type"] = section_type
        if not data.get("id"):
            data["id"] = new_section_id(section_type)
        data.setdefault("order", position)
        if not data.get("title"):
            data["title"] = DEFAULT_SECTION_TITLES[section_type]
        try:
            sections.append(DocumentSection.model_validate(data))
        except PydanticValidationError as e:
            raise invalid_input("Invalid section", e)

    ids = [s.id for s in sections]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ValidationError("Section ids must be unique", details={"duplicates": duplicates})
    return sections


def _to_document(record: CompetenceDocumentRecord) -> CompetenceDocument:
    artifact = None
    if record.artifact_url:
        artifact = ArtifactRef(url=record.artifact_url, storage_id=record.artifact_storage_id or "")
    return CompetenceDocument(
        id=record.id,
        candidate_id=record.candidate_id,
        template=record.template,
        sections=[DocumentSection.model_validate(s) for s in record.sections or []],
        status=DocumentStatus(record.status),
        version=record.version,
        artifact=artifact,
        is_anonymized=record.is_anonymized,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _write_document(record: CompetenceDocumentRecord, document: CompetenceDocument) -> None:
    record.template = document.template
    record.sections = [s.model_dump(mode="json") for s in document.sections]
    record.status = document.status.value
    record.version = document.version
    record.is_anonymized = document.is_anonymized
    record.artifact_url = document.artifact.url if document.artifact else None
    record.artifact_storage_id = document.artifact.storage_id if document.artifact else None
    record.updated_at = utcnow()


class CompetenceDocumentService:
    """Create, edit, generate and publish competence documents."""

    def __init__(
        self,
        generator: SectionGenerator,
        renderer: DocumentRenderer,
        publisher: ArtifactPublisher,
        synchronizer: IndexSynchronizer,
        session_factory: Optional[sessionmaker] = None
    ):
        self.generator = generator
        self.renderer = renderer
        self.publisher = publisher
        self.synchronizer = synchronizer
        self.session_factory = session_factory

    def _uow(self):
        return recruitment_uow(self.session_factory)

    def _load(self, document_id: str) -> Tuple[CompetenceDocument, CandidateProfile]:
        with self._uow() as repo:
            record = repo.documents.get_by_id(document_id)
            if record is None:
                raise NotFoundError(f"Competence file {document_id} not found")
            candidate = repo.candidates.get_by_id(record.candidate_id)
            if candidate is None:
                raise NotFoundError(f"Candidate {record.candidate_id} not found")
            return _to_document(record), profile_from_candidate(candidate)

    def get(self, document_id: str) -> CompetenceDocument:
        return self._load(document_id)[0]

    def create(
        self,
        ctx: RequestContext,
        candidate_id: str,
        template: str,
        sections: Optional[List[Dict[str, Any]]] = None,
        is_anonymized: bool = False,
        generate_missing: bool = False,
        job_description: Optional[Dict[str, Any]] = None,
        client_name: Optional[str] = None
    ) -> CompetenceDocument:
        """
        Create a Draft document at version 1.

        With generate_missing, empty generatable sections are filled in, tailored
        to job_description and client_name when given; a section whose
        generation fails is left empty.
        """
        get_template(template)
        built = build_sections(sections)
        job = parse_job_description(job_description)

        with self._uow() as repo:
            candidate = repo.candidates.get_by_id(candidate_id)
            if candidate is None:
                raise NotFoundError(f"Candidate {candidate_id} not found")
            profile = profile_from_candidate(candidate)

        document = CompetenceDocument(
            id=str(uuid.uuid4()),
            candidate_id=candidate_id,
            template=template.lower(),
            sections=built,
            is_anonymized=is_anonymized,
        )

        if generate_missing:
            filled = self._fill_sections(profile, document.sections, job, client_name)
            document = document.model_copy(update={"sections": filled})

        with self._uow() as repo:
            record = CompetenceDocumentRecord(
                id=document.id,
                candidate_id=candidate_id,
                created_by=ctx.user_id,
            )
            _write_document(record, document)
            repo.documents.add(record)
            document = _to_document(record)

        logger.info(f"User {ctx.user_id} created competence file {document.id} for candidate {candidate_id}")
        self.synchronizer.safe_upsert(RecordType.COMPETENCE_FILE, document.id)
        return document

    def _fill_sections(
        self,
        profile: CandidateProfile,
        sections: List[DocumentSection],
        job_description: Optional[JobDescription] = None,
        client_name: Optional[str] = None
    ) -> List[DocumentSection]:
        filled = []
        for section in sections:
            if section.content.strip() or not self.generator.can_generate(section.type):
                filled.append(section)
                continue
            try:
                content = self.generator.generate(profile, section.type, job_description, client_name)
            except GenerationFailed as e:
                logger.warning(f"Leaving section {section.id} empty: {e.message}")
                filled.append(section)
                continue
            filled.append(section.model_copy(update={"content": content}))
        return filled

    def update(
        self,
        ctx: RequestContext,
        document_id: str,
        sections: Optional[List[Dict[str, Any]]] = None,
        template: Optional[str] = None,
        is_anonymized: Optional[bool] = None
    ) -> CompetenceDocument:
        """Apply edits. Content changes bump the version and reset to Draft."""
        changes: Dict[str, Any] = {}
        if sections is not None:
            changes["sections"] = build_sections(sections)
        if template is not None:
            get_template(template)
            changes["template"] = template.lower()
        if is_anonymized is not None:
            changes["is_anonymized"] = is_anonymized

        return self._apply_changes(ctx, document_id, changes)

    def _apply_changes(self, ctx: RequestContext, document_id: str, changes: Dict[str, Any]) -> CompetenceDocument:
        with self._uow() as repo:
            record = repo.documents.get_by_id(document_id)
            if record is None:
                raise NotFoundError(f"Competence file {document_id} not found")

            current = _to_document(record)
            # Re-validate so duplicate section ids are rejected
            updated = CompetenceDocument.model_validate({**current.model_dump(), **changes})

            if updated.content_fingerprint() == current.content_fingerprint():
                return current

            updated = updated.model_copy(update={
                "version": current.version + 1,
                "status": DocumentStatus.DRAFT,
                "artifact": None,
            })
            _write_document(record, updated)
            repo.documents.save(record)
            document = _to_document(record)

        logger.info(f"User {ctx.user_id} updated competence file {document_id} to version {document.version}")
        self.synchronizer.safe_upsert(RecordType.COMPETENCE_FILE, document_id)
        return document

    def generate_section(
        self,
        ctx: RequestContext,
        document_id: str,
        section_id: str,
        job_description: Optional[Dict[str, Any]] = None,
        client_name: Optional[str] = None
    ) -> CompetenceDocument:
        """
        Regenerate one section's content, optionally tailored to a target role.

        Raises:
            GenerationFailed: The document is left unchanged
        """
        job = parse_job_description(job_description)
        document, profile = self._load(document_id)
        section = document.section(section_id)
        if section is None:
            raise NotFoundError(f"Section {section_id} not found in competence file {document_id}")

        content = self.generator.generate(profile, section.type, job, client_name)

        sections = [
            s.model_copy(update={"content": content}) if s.id == section_id else s
            for s in document.sections
        ]
        return self._apply_changes(ctx, document_id, {"sections": sections})

    def preview(self, document_id: str, logo_url: Optional[str] = None) -> str:
        document, profile = self._load(document_id)
        return self.renderer.render_html(document, profile, logo_url)

    def _render_bytes(
        self,
        document: CompetenceDocument,
        profile: CandidateProfile,
        output_format: str,
        logo_url: Optional[str]
    ) -> Tuple[bytes, str]:
        output_format = (output_format or "pdf").lower()
        if output_format not in OUTPUT_FORMATS:
            raise ValidationError(
                f"Unsupported output format: {output_format}",
                details={"supported": sorted(OUTPUT_FORMATS)}
            )
        if output_format == "pdf":
            content = self.renderer.render_pdf(document, profile, logo_url)
        else:
            content = self.renderer.render_html(document, profile, logo_url).encode("utf-8")
        return content, OUTPUT_FORMATS[output_format]

    def render(
        self,
        ctx: RequestContext,
        document_id: str,
        output_format: str = "pdf",
        logo_url: Optional[str] = None
    ) -> CompetenceDocument:
        """
        Render, publish and mark the document Generated.

        Raises:
            PublishFailed: Nothing is written; the document keeps its status
        """
        document, profile = self._load(document_id)
        content, _ = self._render_bytes(document, profile, output_format, logo_url)

        filename = artifact_filename(document.candidate_id, document.template, (output_format or "pdf").lower())
        artifact = self.publisher.publish(content, filename, ArtifactCategory.DOCUMENT)

        with self._uow() as repo:
            record = repo.documents.get_by_id(document_id)
            if record.version != document.version:
                # Edited while rendering; the artifact is already stale
                logger.warning(
                    f"Competence file {document_id} changed during render "
                    f"(v{document.version} -> v{record.version}); not marking Generated"
                )
                return _to_document(record)

            record.artifact_url = artifact.url
            record.artifact_storage_id = artifact.storage_id
            record.status = DocumentStatus.GENERATED.value
            record.updated_at = utcnow()
            repo.documents.save(record)
            document = _to_document(record)

        logger.info(f"User {ctx.user_id} published competence file {document_id} v{document.version}")
        self.synchronizer.safe_upsert(RecordType.COMPETENCE_FILE, document_id)
        return document

    def generate_from_payload(
        self,
        candidate_data: Dict[str, Any],
        template: str,
        sections: Optional[List[Dict[str, Any]]],
        output_format: str = "pdf",
        is_anonymized: bool = False,
        logo_url: Optional[str] = None,
        generate_missing: bool = False,
        job_description: Optional[Dict[str, Any]] = None,
        client_name: Optional[str] = None
    ) -> Tuple[bytes, str, str]:
        """
        Stateless generation from an inline candidate and section list.

        generate_missing fills empty sections the same way create does.

        Returns:
            Tuple of (content, content_type, filename)
        """
        get_template(template)
        try:
            profile = CandidateProfile.model_validate(candidate_data)
        except PydanticValidationError as e:
            raise invalid_input("Invalid candidate data", e)
        job = parse_job_description(job_description)
        document = CompetenceDocument(
            id="inline",
            candidate_id="inline",
            template=template.lower(),
            sections=build_sections(sections),
            is_anonymized=is_anonymized,
        )

        if generate_missing:
            filled = self._fill_sections(profile, document.sections, job, client_name)
            document = document.model_copy(update={"sections": filled})

        content, content_type = self._render_bytes(document, profile, output_format, logo_url)
        name = initials(profile.full_name) if is_anonymized else profile.full_name
        return content, content_type, document_filename(name, document.template, (output_format or "pdf").lower())
