"""
Document Renderer - assemble a full competence file page.

Every SectionType has an entry in SECTION_RENDERERS; the table is checked at
import so a new section kind cannot be silently dropped.
"""
import html
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from core.documents.sections import CompetenceDocument, DocumentSection, SectionType
from core.exceptions import ValidationError
from core.rendering.markdown_renderer import render_markdown
from core.rendering.pdf_printer import PdfPrinter
from etl.resume.models import CandidateProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateStyle:
    name: str
    primary_color: str
    accent_color: str
    font_family: str
    header_background: str


TEMPLATES: Dict[str, TemplateStyle] = {
    "professional": TemplateStyle(
        name="professional",
        primary_color="#1f2937",
        accent_color="#2563eb",
        font_family="'Inter', 'Helvetica Neue', Arial, sans-serif",
        header_background="#f8fafc",
    ),
    "antaes": TemplateStyle(
        name="antaes",
        primary_color="#073C51",
        accent_color="#FFB800",
        font_family="'Montserrat', Arial, sans-serif",
        header_background="#ffffff",
    ),
    "emineon": TemplateStyle(
        name="emineon",
        primary_color="#0A2F5A",
        accent_color="#C9A84C",
        font_family="'Inter', Arial, sans-serif",
        header_background="#f5f7fa",
    ),
}


def get_template(template: str) -> TemplateStyle:
    style = TEMPLATES.get((template or "").lower())
    if style is None:
        raise ValidationError(
            f"Unknown template: {template}",
            details={"template": template, "supported": sorted(TEMPLATES)}
        )
    return style


def initials(full_name: str) -> str:
    """'Jane Marie Doe' -> 'J. M. D.'"""
    return " ".join(f"{part[0].upper()}." for part in full_name.split() if part)


@dataclass
class RenderContext:
    profile: CandidateProfile
    anonymize: bool
    style: TemplateStyle
    logo_url: Optional[str] = None


def _section_wrapper(section: DocumentSection, body: str) -> str:
    title = ""
    # Generated content usually carries its own "## TITLE" line
    if not section.content.lstrip().startswith("## "):
        title = f'<h2 class="section-title">{html.escape(section.display_title())}</h2>\n'
    return (
        f'<section class="section section-{section.type.value}" id="section-{html.escape(section.id)}">\n'
        f'{title}<div class="section-content">\n{body}\n</div>\n</section>'
    )


def _render_header(section: DocumentSection, ctx: RenderContext) -> str:
    profile = ctx.profile
    name = initials(profile.full_name) if ctx.anonymize else profile.full_name
    lines = [f'<h1 class="candidate-name">{html.escape(name)}</h1>']

    if not ctx.anonymize:
        contact = [value for value in (profile.email, profile.phone, profile.location) if value]
        if contact:
            lines.append(f'<p class="candidate-contact">{html.escape(" | ".join(contact))}</p>')

    body = render_markdown(section.content)
    if body:
        lines.append(body)

    logo = ""
    if ctx.logo_url:
        logo = f'<img class="company-logo" src="{html.escape(ctx.logo_url)}" alt="Logo">\n'

    return (
        f'<header class="document-header" id="section-{html.escape(section.id)}">\n'
        f'{logo}' + "\n".join(lines) + "\n</header>"
    )


def _render_markdown_section(section: DocumentSection, ctx: RenderContext) -> str:
    body = render_markdown(section.content)
    if not body:
        return ""
    return _section_wrapper(section, body)


SECTION_RENDERERS: Dict[SectionType, Callable[[DocumentSection, RenderContext], str]] = {
    SectionType.HEADER: _render_header,
    SectionType.SUMMARY: _render_markdown_section,
    SectionType.SKILLS: _render_markdown_section,
    SectionType.TECHNICAL_SKILLS: _render_markdown_section,
    SectionType.FUNCTIONAL_SKILLS: _render_markdown_section,
    SectionType.EXPERIENCE: _render_markdown_section,
    SectionType.EXPERIENCE_SUMMARY: _render_markdown_section,
    SectionType.CORE_COMPETENCIES: _render_markdown_section,
    SectionType.TECHNICAL_EXPERTISE: _render_markdown_section,
    SectionType.EDUCATION: _render_markdown_section,
    SectionType.CERTIFICATIONS: _render_markdown_section,
    SectionType.LANGUAGES: _render_markdown_section,
    SectionType.CUSTOM: _render_markdown_section,
}

_missing = set(SectionType) - set(SECTION_RENDERERS)
if _missing:
    raise RuntimeError(f"No renderer for section types: {sorted(t.value for t in _missing)}")


def _stylesheet(style: TemplateStyle) -> str:
    return f"""
    @page {{ size: A4; margin: 15mm 12mm; }}
    body {{ font-family: {style.font_family}; color: {style.primary_color}; font-size: 11pt; line-height: 1.5; margin: 0; }}
    .document-header {{ background: {style.header_background}; border-bottom: 3px solid {style.accent_color}; padding: 16px 20px; margin-bottom: 16px; }}
    .company-logo {{ float: right; max-width: 120px; max-height: 60px; }}
    .candidate-name {{ margin: 0; font-size: 22pt; }}
    .candidate-contact {{ margin: 4px 0 0; color: #4b5563; }}
    .section {{ margin: 0 20px 16px; page-break-inside: avoid; }}
    .section-title, .section-header {{ color: {style.primary_color}; border-bottom: 1px solid {style.accent_color}; font-size: 13pt; text-transform: uppercase; padding-bottom: 4px; }}
    .subsection-header {{ color: {style.primary_color}; font-size: 11.5pt; margin: 12px 0 4px; }}
    .structured-list {{ list-style: none; padding-left: 0; margin: 4px 0; }}
    .bullet-item {{ margin: 2px 0; }}
    .bullet {{ color: {style.accent_color}; margin-right: 6px; }}
    .metric-emphasis {{ color: {style.accent_color}; font-weight: 700; }}
    .tech-tag {{ background: #f3f4f6; border-radius: 3px; padding: 0 4px; font-family: inherit; font-size: 10pt; }}
    .content-paragraph {{ margin: 4px 0; }}
    """


class DocumentRenderer:
    """Builds the HTML page for a competence document and optionally prints it."""

    def __init__(self, pdf_printer: Optional[PdfPrinter] = None):
        self.pdf_printer = pdf_printer

    def render_sections(self, document: CompetenceDocument, ctx: RenderContext) -> List[str]:
        fragments = []
        for section in document.ordered_sections():
            fragment = SECTION_RENDERERS[section.type](section, ctx)
            if fragment:
                fragments.append(fragment)
        return fragments

    def render_html(
        self,
        document: CompetenceDocument,
        profile: CandidateProfile,
        logo_url: Optional[str] = None
    ) -> str:
        """Complete standalone HTML page for preview and printing."""
        style = get_template(document.template)
        ctx = RenderContext(
            profile=profile,
            anonymize=document.is_anonymized,
            style=style,
            logo_url=logo_url,
        )
        body = "\n".join(self.render_sections(document, ctx))
        title = initials(profile.full_name) if document.is_anonymized else profile.full_name

        logger.debug(f"Rendered document {document.id} with template {style.name}")
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
            f"<title>{html.escape(title)} - Competence File</title>\n"
            f"<style>{_stylesheet(style)}</style>\n"
            f'</head>\n<body class="template-{style.name}">\n{body}\n</body>\n</html>\n'
        )

    def render_pdf(
        self,
        document: CompetenceDocument,
        profile: CandidateProfile,
        logo_url: Optional[str] = None
    ) -> bytes:
        if self.pdf_printer is None:
            raise ValidationError("PDF output is not available on this deployment")
        return self.pdf_printer.print_pdf(self.render_html(document, profile, logo_url))
