from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from reportlab.lib.utils import ImageReader

from riskreport.report.blocks import centered, chip, label_value_rows, rule
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import ALERT, BLACK, INK, ISSUED_GREEN, LABEL, MUTED
from riskreport.report.text import WidthFn, format_date, truncate_to_width, wrap_text
from riskreport.types import DocumentMode

logger = logging.getLogger(__name__)

ISSUED_COVER_MARGIN = 56.7
LOGO_MAX_WIDTH = 340.2
LOGO_MAX_HEIGHT = 85.05
TITLE_SIZE = 24
TITLE_MAX_LINES = 3


@dataclass(frozen=True)
class CoverSpec:
    """Content of the simple (non-branded) cover; each report flavor fills its own."""

    headings: tuple[str, ...]
    title: str
    rows: tuple[tuple[str, str], ...] = ()
    status_chip: str | None = None
    status_issued: bool = False
    lines: tuple[str, ...] = ()
    footnote: str | None = None


def render_cover(pager: Paginator, ctx: ReportContext, spec: CoverSpec) -> None:
    pager.advance(60)
    for text in spec.headings:
        centered(pager, text, size=24, leading=30, bold=True)
    pager.advance(10)
    centered(pager, spec.title or 'Untitled Assessment', size=18, leading=25, bold=True, color=INK)
    pager.advance(20)

    if spec.status_chip:
        label = spec.status_chip.upper()
        width = max(100.0, pager.fonts.width(label, 12, bold=True) + 16)
        page = pager.ensure_room(40)
        chip(
            page,
            label,
            x=pager.geometry.center_x - width / 2,
            y=pager.cursor,
            width=width,
            height=25,
            fill=ISSUED_GREEN if spec.status_issued else MUTED,
            font=pager.fonts.bold,
            size=12,
            padding=8,
        )
        pager.advance(45)

    rule(pager, gap_after=30)
    if spec.rows:
        label_value_rows(pager, spec.rows)
    if spec.lines:
        pager.advance(10)
        for line in spec.lines:
            centered(pager, line, size=12, leading=20, color=LABEL)

    if spec.footnote:
        pager.advance(30)
        page = pager.ensure_room(14)
        page.draw_text(spec.footnote, x=pager.left + 10, y=pager.cursor, font=pager.fonts.regular, size=10,
                       color=MUTED)
        pager.advance(14)


def _logo_image(pager: Paginator, ctx: ReportContext) -> ImageReader | None:
    branding = ctx.branding
    if not branding.has_logo:
        return None
    try:
        image = ImageReader(io.BytesIO(branding.logo_bytes or b''))
        width, height = image.getSize()
    except Exception as exc:
        logger.warning('Failed to decode logo from tier %s: %s', branding.source_tier, exc)
        pager.diagnostics.warning('logo_unreadable', f'Logo could not be decoded: {exc}', tier=branding.source_tier)
        return None
    if not width or not height:
        return None
    return image


def title_lines_for_cover(title: str, max_width: float, width_fn: WidthFn) -> list[str]:
    lines = wrap_text(title, max_width, TITLE_SIZE, width_fn)
    kept = [truncate_to_width(line, max_width, TITLE_SIZE, width_fn) for line in lines[:TITLE_MAX_LINES]]
    if len(lines) > TITLE_MAX_LINES:
        # The joined text never fits, so the last kept line always ends in an ellipsis.
        overflow = f'{lines[TITLE_MAX_LINES - 1]} {lines[TITLE_MAX_LINES]}'
        kept[-1] = truncate_to_width(overflow, max_width, TITLE_SIZE, width_fn)
    return kept


def render_issued_cover(pager: Paginator, ctx: ReportContext, report_name: str) -> None:
    """Fixed-position branded cover drawn on the page directly.

    The title is capped at three lines so the lower blocks keep their place.
    """
    page = pager.page
    fonts = pager.fonts
    geometry = pager.geometry
    document = ctx.document
    y = geometry.height - ISSUED_COVER_MARGIN

    image = _logo_image(pager, ctx)
    if image is not None:
        width, height = image.getSize()
        scale = min(LOGO_MAX_WIDTH / width, LOGO_MAX_HEIGHT / height, 1)
        scaled_width, scaled_height = width * scale, height * scale
        page.draw_image(image, x=ISSUED_COVER_MARGIN, y=y - scaled_height, width=scaled_width, height=scaled_height)
        y -= scaled_height + 40
    else:
        page.draw_text(ctx.branding.brand_name, x=ISSUED_COVER_MARGIN, y=y, font=fonts.bold, size=24, color=INK)
        y -= 50

    y -= 60
    title_lines = title_lines_for_cover(document.title or 'Untitled Assessment', geometry.content_width,
                                        fonts.width_fn(bold=True))
    for line in title_lines:
        page.draw_text(line, x=geometry.center_x - fonts.width(line, TITLE_SIZE, bold=True) / 2, y=y,
                       font=fonts.bold, size=TITLE_SIZE)
        y -= 30

    y -= 20
    page.draw_text(report_name, x=geometry.center_x - fonts.width(report_name, 14) / 2, y=y, font=fonts.regular,
                   size=14, color=LABEL)
    y -= 60

    for label, value in (('Client', _client(ctx)), ('Site', _site(ctx))):
        if not value:
            continue
        text = f'{label}: {value}'
        page.draw_text(text, x=geometry.center_x - fonts.width(text, 12) / 2, y=y, font=fonts.regular, size=12)
        y -= 20

    right = geometry.width - ISSUED_COVER_MARGIN
    version_text = f'Version {document.version}.0'
    issue_text = format_date(document.issue_date, placeholder='DRAFT')
    status_text = ctx.mode.value.upper()
    page.draw_text(version_text, x=right - fonts.width(version_text, 11, bold=True), y=ISSUED_COVER_MARGIN + 40,
                   font=fonts.bold, size=11)
    page.draw_text(issue_text, x=right - fonts.width(issue_text, 10), y=ISSUED_COVER_MARGIN + 25,
                   font=fonts.regular, size=10)
    page.draw_text(status_text, x=right - fonts.width(status_text, 10, bold=True), y=ISSUED_COVER_MARGIN + 10,
                   font=fonts.bold, size=10, color=BLACK if ctx.mode == DocumentMode.issued else ALERT)
    pager.move_to(y)


def _client(ctx: ReportContext) -> str | None:
    return ctx.document.client_name or ctx.document.responsible_person


def _site(ctx: ReportContext) -> str | None:
    return ctx.document.site_name or ctx.document.scope_description


REVISION_COLUMNS = (('Version', 60), ('Date', 80), ('Change Summary', 230), ('Issued By', 100))
# Revision rows stop this far above the bottom margin; the page never continues.
REVISION_FLOOR = 60


def render_document_control(pager: Paginator, ctx: ReportContext, data: object = None) -> None:
    page = pager.page
    fonts = pager.fonts
    document = ctx.document
    left = pager.left
    y = pager.geometry.top - 20

    page.draw_text('DOCUMENT CONTROL & REVISION HISTORY', x=left, y=y, font=fonts.bold, size=16)
    y -= 40
    page.draw_text('Document Control', x=left, y=y, font=fonts.bold, size=12)
    y -= 25

    status_labels = {
        DocumentMode.issued: 'Issued',
        DocumentMode.superseded: 'Superseded',
        DocumentMode.draft: 'Draft',
    }
    rows = (
        ('Report Title', document.title),
        ('Client', _client(ctx) or '-'),
        ('Site', _site(ctx) or '-'),
        ('Version', f'{document.version}.0'),
        ('Issue Date', format_date(document.issue_date, placeholder='DRAFT')),
        ('Issue Status', status_labels[ctx.mode]),
        ('Prepared By', document.assessor_name or '-'),
        ('Issued By', document.issued_by_name or '-'),
        ('Supersedes', f'Version {document.version - 1}.0' if document.version > 1 else '-'),
    )
    value_width = pager.content_width - 150
    for label, value in rows:
        page.draw_text(f'{label}:', x=left, y=y, font=fonts.bold, size=10)
        lines = wrap_text(value, value_width, 10, fonts.width_fn())
        for index, line in enumerate(lines[:2]):
            if index:
                y -= 12
            page.draw_text(line, x=left + 150, y=y, font=fonts.regular, size=10)
        y -= 18

    y -= 30
    page.draw_text('Revision History', x=left, y=y, font=fonts.bold, size=12)
    y -= 25

    x = left
    for header, width in REVISION_COLUMNS:
        page.draw_text(header, x=x, y=y, font=fonts.bold, size=9)
        x += width
    y -= 15
    page.draw_line(x1=left, y1=y, x2=pager.right, y2=y, color=MUTED, width=0.5)
    y -= 12

    drawn = 0
    history = ctx.revision_history
    for revision in history:
        if y < pager.geometry.bottom + REVISION_FLOOR:
            break
        cells = (
            f'{revision.version_number}.0',
            format_date(revision.issue_date),
            revision.change_summary or 'Initial issue',
            revision.issued_by_name or '-',
        )
        x = left
        for value, (_, width) in zip(cells, REVISION_COLUMNS):
            first_line = wrap_text(value, width - 5, 8, fonts.width_fn())[0]
            page.draw_text(first_line, x=x, y=y, font=fonts.regular, size=8)
            x += width
        y -= 15
        drawn += 1

    if drawn < len(history):
        pager.diagnostics.warning(
            'revision_rows_dropped',
            f'{len(history) - drawn} revision rows did not fit on the document control page',
            dropped=len(history) - drawn,
        )

    note = f'Document controlled and issued using {ctx.settings.brand_name}'
    page.draw_text(
        note,
        x=(pager.geometry.width - fonts.width(note, 8)) / 2,
        y=pager.geometry.bottom + 20,
        font=fonts.regular,
        size=8,
        color=MUTED,
    )
    pager.move_to(y)
