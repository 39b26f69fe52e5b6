from __future__ import annotations

from typing import Sequence

from riskreport.report.palette import MUTED, WATERMARK_DRAFT, WATERMARK_SUPERSEDED
from riskreport.report.pagination import PageDecorator
from riskreport.report.surface import Page, ReportFonts
from riskreport.report.text import sanitize_pdf_text

DRAFT_TEXT = 'DRAFT'
DRAFT_SIZE = 80
SUPERSEDED_TEXT = 'SUPERSEDED'
SUPERSEDED_SIZE = 80
WATERMARK_OPACITY = 0.3
WATERMARK_ANGLE = -45
FOOTER_SIZE = 8
FOOTER_OFFSET = 30


def draft_watermark(fonts: ReportFonts) -> PageDecorator:
    def _stamp(page: Page) -> None:
        geometry = page.geometry
        page.draw_text(
            DRAFT_TEXT,
            x=geometry.width / 2 - 80,
            y=geometry.height / 2,
            font=fonts.regular,
            size=DRAFT_SIZE,
            color=WATERMARK_DRAFT,
            opacity=WATERMARK_OPACITY,
            rotate=WATERMARK_ANGLE,
        )

    return _stamp


def apply_superseded_overlay(pages: Sequence[Page], fonts: ReportFonts) -> int:
    """Stamp every registered page, lead pages included."""
    text_width = fonts.width(SUPERSEDED_TEXT, SUPERSEDED_SIZE, bold=True)
    for page in pages:
        geometry = page.geometry
        page.draw_text(
            SUPERSEDED_TEXT,
            x=(geometry.width - text_width) / 2,
            y=(geometry.height - SUPERSEDED_SIZE) / 2,
            font=fonts.bold,
            size=SUPERSEDED_SIZE,
            color=WATERMARK_SUPERSEDED,
            opacity=WATERMARK_OPACITY,
            rotate=WATERMARK_ANGLE,
        )
    return len(pages)


def footer_text(*, report_name: str, title: str, version: int, generated: str) -> str:
    return f'{report_name} — {title} — v{version} — Generated {generated}'


def apply_footers(pages: Sequence[Page], fonts: ReportFonts, *, text: str, skip: int = 0) -> int:
    """Stamp footer text and ``Page i of N`` on every page after the first ``skip`` lead pages.

    Returns N, the number of numbered pages.
    """
    skip = max(0, min(skip, len(pages)))
    numbered = pages[skip:]
    total = len(numbered)
    safe_text = sanitize_pdf_text(text)
    for number, page in enumerate(numbered, start=1):
        geometry = page.geometry
        y = geometry.margin - FOOTER_OFFSET
        label = f'Page {number} of {total}'
        label_width = fonts.width(label, FOOTER_SIZE)
        available = geometry.content_width - label_width - 12
        page.draw_text(
            _fit(safe_text, available, fonts),
            x=geometry.margin,
            y=y,
            font=fonts.regular,
            size=FOOTER_SIZE,
            color=MUTED,
        )
        page.draw_text(
            label,
            x=geometry.width - geometry.margin - label_width,
            y=y,
            font=fonts.regular,
            size=FOOTER_SIZE,
            color=MUTED,
        )
    return total


def _fit(text: str, max_width: float, fonts: ReportFonts) -> str:
    if fonts.width(text, FOOTER_SIZE) <= max_width:
        return text
    trimmed = text
    while trimmed and fonts.width(trimmed + '...', FOOTER_SIZE) > max_width:
        trimmed = trimmed[:-1]
    return trimmed.rstrip() + '...'
