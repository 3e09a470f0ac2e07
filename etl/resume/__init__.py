#!/usr/bin/env python3
"""
Resume Intake Module - turning uploaded résumés into structured profiles.

Handles:
- AI-assisted profile extraction with guaranteed upstream cleanup
- Local text extraction for PDF/DOCX/TXT
"""
from etl.resume.models import CandidateProfile, ExperienceEntry, RawDocument
from etl.resume.extractor import ProfileExtractor, SUPPORTED_MIME_TYPES
from etl.resume.parser import DocumentTextReader, ParsedDocument

__all__ = [
    'CandidateProfile',
    'ExperienceEntry',
    'RawDocument',
    'ProfileExtractor',
    'SUPPORTED_MIME_TYPES',
    'DocumentTextReader',
    'ParsedDocument',
]
