"""
Document Text Reader - local text extraction from uploaded documents.

Supports:
- Plain Text (text/plain)
- Word Documents (.docx)
- PDF (.pdf)

Used by the extract-text endpoint, which needs text without a call to the
completion service. Legacy .doc files are not readable locally.
"""
import io
import logging
from dataclasses import dataclass
from typing import Optional

from docx import Document
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from core.exceptions import UnsupportedFormat, ValidationError
from etl.resume.extractor import DOCX_MIME, resolve_mime_type
from etl.resume.models import RawDocument

logger = logging.getLogger(__name__)


@dataclass
class ParsedDocument:
    """Result of reading a document.

    Attributes:
        text: Extracted text
        format: Detected format ('txt', 'docx' or 'pdf')
        filename: Declared filename
        pages: Page count for PDFs, None otherwise
    """
    text: str
    format: str
    filename: str
    pages: Optional[int] = None

    @property
    def word_count(self) -> int:
        return len(self.text.split())


class DocumentTextReader:
    """Read text out of uploaded documents.

    Routes on the resolved MIME type; the same type rules as the profile
    extractor apply, minus legacy Word.
    """

    READABLE_TYPES = {'text/plain', DOCX_MIME, 'application/pdf'}

    def __init__(self, max_file_bytes: int):
        self.max_file_bytes = max_file_bytes

    def read(self, document: RawDocument) -> ParsedDocument:
        """Extract text from an uploaded document.

        Raises:
            UnsupportedFormat: Type is not locally readable
            ValidationError: Empty, oversized or corrupt document
        """
        mime_type = resolve_mime_type(document.mime_type, document.filename)
        if mime_type not in self.READABLE_TYPES:
            raise UnsupportedFormat(document.mime_type, self.READABLE_TYPES)
        if document.size == 0:
            raise ValidationError("Uploaded file is empty")
        if document.size > self.max_file_bytes:
            raise ValidationError(
                f"File size {document.size} bytes exceeds the {self.max_file_bytes} byte limit",
                details={"size": document.size, "max_bytes": self.max_file_bytes}
            )

        logger.info(f"Reading text from {document.filename} ({mime_type})")

        if mime_type == 'text/plain':
            return self._read_txt(document)
        elif mime_type == DOCX_MIME:
            return self._read_docx(document)
        return self._read_pdf(document)

    def _read_txt(self, document: RawDocument) -> ParsedDocument:
        try:
            text = document.content.decode('utf-8')
        except UnicodeDecodeError:
            # Windows exports
            text = document.content.decode('latin-1')

        return ParsedDocument(text=text.strip(), format='txt', filename=document.filename)

    def _read_docx(self, document: RawDocument) -> ParsedDocument:
        """Extract text from paragraphs and tables (common in résumés)."""
        try:
            doc = Document(io.BytesIO(document.content))
        except Exception as e:
            raise ValidationError(f"Failed to read DOCX file {document.filename}: {e}")

        paragraphs = [para.text.strip() for para in doc.paragraphs if para.text.strip()]

        for table in doc.tables:
            for row in table.rows:
                row_texts = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if row_texts:
                    paragraphs.append(' '.join(row_texts))

        text = '\n\n'.join(paragraphs)
        if not text:
            logger.warning(f"Empty or minimal content in DOCX: {document.filename}")

        return ParsedDocument(text=text, format='docx', filename=document.filename)

    def _read_pdf(self, document: RawDocument) -> ParsedDocument:
        try:
            reader = PdfReader(io.BytesIO(document.content))
            page_count = len(reader.pages)
        except PdfReadError as e:
            raise ValidationError(f"Failed to read PDF file {document.filename}: {e}")

        pages_text = []
        for i, page in enumerate(reader.pages):
            try:
                page_text = page.extract_text()
            except Exception as e:
                logger.warning(f"Failed to extract text from page {i + 1}: {e}")
                continue
            if page_text and page_text.strip():
                pages_text.append(page_text.strip())

        text = '\n\n'.join(pages_text)
        if not text:
            logger.warning(
                f"No text extracted from PDF {document.filename}. "
                f"The PDF may be scanned images or have text extraction disabled."
            )

        logger.debug(f"Read PDF {document.filename} ({page_count} pages, {len(text)} chars)")
        return ParsedDocument(text=text, format='pdf', filename=document.filename, pages=page_count)
