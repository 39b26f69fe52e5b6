from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pypdf import PdfReader

from riskreport.config import PageGeometry

logger = logging.getLogger(__name__)

_PAGE_LABEL_RE = re.compile(r'Page\s+(\d+)\s+of\s+(\d+)')


@dataclass
class PdfSummary:
    page_count: int
    pages: list[str] = field(default_factory=list)
    footers: list[str] = field(default_factory=list)
    title: str | None = None

    def page_labels(self) -> list[tuple[int, int] | None]:
        labels: list[tuple[int, int] | None] = []
        for text in self.pages:
            match = _PAGE_LABEL_RE.search(text)
            labels.append((int(match.group(1)), int(match.group(2))) if match else None)
        return labels

    def to_dict(self) -> dict[str, Any]:
        return {'page_count': self.page_count, 'title': self.title, 'footers': self.footers}


def _page_text(page: Any, footer_band: float) -> tuple[str, str]:
    """Page text plus the runs drawn below ``footer_band``, joined left to right."""
    runs: list[tuple[float, str]] = []

    def collect(text: str, cm: list[float], tm: list[float], font_dict: Any, font_size: float) -> None:
        if not text or not text.strip():
            return
        y = tm[4] * cm[1] + tm[5] * cm[3] + cm[5]
        if 0 <= y < footer_band:
            runs.append((tm[4] * cm[0] + tm[5] * cm[2] + cm[4], ' '.join(text.split())))

    text = page.extract_text(visitor_text=collect) or ''
    runs.sort(key=lambda run: run[0])
    return text, ' '.join(run for _, run in runs)


def summarize_pdf(pdf_bytes: bytes, *, footer_band: float = PageGeometry().bottom) -> PdfSummary:
    """Read back page count, per-page text and footer lines from a finished PDF."""
    reader = PdfReader(io.BytesIO(pdf_bytes))
    pages: list[str] = []
    footers: list[str] = []
    for index, page in enumerate(reader.pages):
        try:
            text, footer = _page_text(page, footer_band)
        except Exception as exc:
            logger.warning('Failed to extract text from page %s: %s', index + 1, exc)
            text, footer = '', ''
        pages.append(text)
        footers.append(footer)

    metadata = reader.metadata
    title = str(metadata.title) if metadata is not None and metadata.title else None
    return PdfSummary(page_count=len(reader.pages), pages=pages, footers=footers, title=title)
