"""
PDF printing for rendered competence documents.

PlaywrightPdfPrinter drives headless Chromium. Call it from a worker thread
(FastAPI runs sync endpoints in its threadpool); the sync API refuses to run
inside a running event loop.
"""
import logging
from abc import ABC, abstractmethod

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class PdfPrinter(ABC):
    """Turns a complete HTML page into PDF bytes."""

    @abstractmethod
    def print_pdf(self, html: str) -> bytes:
        pass


class PlaywrightPdfPrinter(PdfPrinter):
    """Headless Chromium printer, one browser per call."""

    def __init__(self, timeout_seconds: float = 30.0, page_format: str = "A4"):
        self.timeout_ms = int(timeout_seconds * 1000)
        self.page_format = page_format

    def print_pdf(self, html: str) -> bytes:
        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch(args=["--no-sandbox", "--disable-dev-shm-usage"])
                try:
                    page = browser.new_page()
                    page.set_content(html, wait_until="networkidle", timeout=self.timeout_ms)
                    pdf = page.pdf(
                        format=self.page_format,
                        print_background=True,
                        margin={"top": "15mm", "bottom": "15mm", "left": "12mm", "right": "12mm"},
                    )
                finally:
                    browser.close()
        except PlaywrightError as e:
            logger.error(f"PDF rendering failed: {e}")
            raise UpstreamError(f"PDF rendering failed: {e}", cause=e) from e

        logger.info(f"Printed PDF ({len(pdf)} bytes)")
        return pdf
