"""Rendering - constrained markdown, document assembly and PDF printing."""
from core.rendering.markdown_renderer import render_markdown
from core.rendering.document_renderer import DocumentRenderer, TEMPLATES
from core.rendering.pdf_printer import PdfPrinter, PlaywrightPdfPrinter

__all__ = ['render_markdown', 'DocumentRenderer', 'TEMPLATES', 'PdfPrinter', 'PlaywrightPdfPrinter']
