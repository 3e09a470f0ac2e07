#!/usr/bin/env python3
"""
Profile Extractor - turn an uploaded résumé into a CandidateProfile.

Handles:
1. Declared type and size validation (before any network call)
2. Upload under a short-lived upstream handle
3. One schema-constrained extraction request
4. Lenient JSON parsing and required-field validation
5. Guaranteed release of the upstream handle
"""
import json
import logging
import re
from contextlib import contextmanager
from pathlib import PurePath
from typing import Any, Dict, Iterator, Optional

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import (
    ExtractionFailed,
    IncompleteProfile,
    SizeExceeded,
    UnsupportedFormat,
    UpstreamError,
    ValidationError,
)
from core.llm.interfaces import LLMProvider
from core.llm.schema_models import CANDIDATE_PROFILE_SCHEMA
from core.llm.system_prompts import PROFILE_EXTRACTION_PROMPT
from etl.resume.models import CandidateProfile, RawDocument

logger = logging.getLogger(__name__)

MB = 1024 * 1024

DOCX_MIME = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

SUPPORTED_MIME_TYPES = {
    'application/pdf': '.pdf',
    'application/msword': '.doc',
    DOCX_MIME: '.docx',
    'text/plain': '.txt',
}

# Browsers and curl often send these for files they cannot classify
GENERIC_MIME_TYPES = {'', 'application/octet-stream', 'binary/octet-stream'}

_EXTENSION_TO_MIME = {ext: mime for mime, ext in SUPPORTED_MIME_TYPES.items()}

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def resolve_mime_type(declared: Optional[str], filename: Optional[str]) -> str:
    """Normalize a declared MIME type, falling back to the extension for generic ones.

    Raises:
        UnsupportedFormat: If neither the MIME type nor the extension is accepted
    """
    mime = (declared or '').split(';', 1)[0].strip().lower()
    if mime in SUPPORTED_MIME_TYPES:
        return mime

    if mime in GENERIC_MIME_TYPES and filename:
        by_extension = _EXTENSION_TO_MIME.get(PurePath(filename).suffix.lower())
        if by_extension:
            return by_extension

    raise UnsupportedFormat(declared or '', SUPPORTED_MIME_TYPES.keys())


def parse_profile_json(raw: str) -> Dict[str, Any]:
    """Parse model output into a dict.

    Strips ```json fences, then falls back to the outermost {...} block.

    Raises:
        ExtractionFailed: If no JSON object can be recovered
    """
    text = (raw or '').strip()
    if not text:
        raise ExtractionFailed("Extraction service returned an empty response")

    candidates = [_FENCE_RE.sub('', text).strip()]
    match = _OBJECT_RE.search(text)
    if match:
        candidates.append(match.group())

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    logger.error(f"Unparseable extraction response: {text[:200]}")
    raise ExtractionFailed("Extraction service returned a malformed response")


class ProfileExtractor:
    """
    Extraction client for résumé documents.

    The upstream completion service is injected so the extractor can run
    against OpenAI in production and an in-memory fake in tests.
    """

    def __init__(
        self,
        llm: LLMProvider,
        max_file_bytes: int = 25 * MB,
        min_text_chars: int = 50,
        max_text_chars: int = 50000
    ):
        self.llm = llm
        self.max_file_bytes = max_file_bytes
        self.min_text_chars = min_text_chars
        self.max_text_chars = max_text_chars

    def validate(self, document: RawDocument) -> str:
        """Check declared type and size. Returns the resolved MIME type."""
        mime_type = resolve_mime_type(document.mime_type, document.filename)

        if document.size > self.max_file_bytes:
            raise SizeExceeded(document.size, self.max_file_bytes)
        if document.size == 0:
            raise ValidationError("Uploaded file is empty", details={"filename": document.filename})

        return mime_type

    def extract(self, document: RawDocument) -> CandidateProfile:
        """
        Extract a CandidateProfile from an uploaded document.

        Raises:
            UnsupportedFormat, SizeExceeded, ValidationError: Before any network call
            ExtractionFailed: Upstream error or unparseable response
            IncompleteProfile: No full name in the extracted result
        """
        mime_type = self.validate(document)
        logger.info(f"Extracting profile from {document.filename} ({mime_type}, {document.size} bytes)")

        with self._uploaded(document, mime_type) as file_id:
            try:
                raw = self.llm.extract_from_file(file_id, CANDIDATE_PROFILE_SCHEMA, PROFILE_EXTRACTION_PROMPT)
            except UpstreamError as e:
                raise ExtractionFailed(f"Profile extraction failed: {e.message}", cause=e) from e

            return self._build_profile(raw)

    def extract_from_text(self, text: str) -> CandidateProfile:
        """Extract a CandidateProfile from pasted résumé text. No upstream handle is used."""
        stripped = (text or '').strip()
        if len(stripped) < self.min_text_chars:
            raise ValidationError(
                f"Resume text must be at least {self.min_text_chars} characters",
                details={"length": len(stripped)}
            )
        if len(stripped) > self.max_text_chars:
            raise ValidationError(
                f"Resume text must be at most {self.max_text_chars} characters",
                details={"length": len(stripped)}
            )

        try:
            raw = self.llm.extract_from_text(stripped, CANDIDATE_PROFILE_SCHEMA, PROFILE_EXTRACTION_PROMPT)
        except UpstreamError as e:
            raise ExtractionFailed(f"Profile extraction failed: {e.message}", cause=e) from e

        return self._build_profile(raw)

    @contextmanager
    def _uploaded(self, document: RawDocument, mime_type: str) -> Iterator[str]:
        try:
            file_id = self.llm.upload_file(document.filename or 'resume', document.content, mime_type)
        except UpstreamError as e:
            raise ExtractionFailed(f"Document upload failed: {e.message}", cause=e) from e

        try:
            yield file_id
        finally:
            try:
                self.llm.delete_file(file_id)
            except Exception as e:
                logger.warning(f"Failed to release upstream file {file_id}: {e}")

    def _build_profile(self, raw: str) -> CandidateProfile:
        data = parse_profile_json(raw)

        full_name = data.get('fullName', data.get('full_name'))
        if not isinstance(full_name, str) or not full_name.strip():
            raise IncompleteProfile(
                "Extracted profile is missing the candidate's full name",
                details={"missing": ["fullName"]}
            )

        try:
            profile = CandidateProfile.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"Extracted profile failed validation: {e}")
            raise ExtractionFailed("Extraction service returned an invalid profile", cause=e) from e

        profile = profile.with_computed_experience()
        logger.info(
            f"Extracted profile for {profile.full_name} with "
            f"{len(profile.experience)} experience entries"
        )
        return profile
