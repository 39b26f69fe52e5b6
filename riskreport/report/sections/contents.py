from __future__ import annotations

from riskreport.report.blocks import heading
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import BLACK, INK_SOFT, PANEL

COMBINED_CONTENTS: tuple[str, ...] = (
    'Part 1: Fire Risk Assessment (FRA)',
    '  - Regulatory Framework',
    '  - Responsible Person Duties',
    '  - Fire Hazards',
    '  - Management Controls',
    '  - Emergency Arrangements',
    '  - Means of Escape',
    '  - Fire Protection Measures',
    '',
    'Part 2: Fire Strategy Document (FSD)',
    '  - Purpose and Scope',
    '  - Regulatory Basis',
    '  - Evacuation Strategy',
    '  - Means of Escape Design',
    '  - Passive Fire Protection',
    '  - Active Fire Systems',
    '  - Fire Service Access',
    '',
    'Appendices',
    '  - Action Register',
    '  - Attachments Index',
    '  - Assumptions and Limitations',
)

PART_HEADER_HEIGHT = 60


def render_table_of_contents(
    pager: Paginator,
    ctx: ReportContext,
    data: tuple[str, ...] | None = COMBINED_CONTENTS,
) -> None:
    fonts = pager.fonts
    heading(pager, 'Table of Contents', size=16)
    for line in data or COMBINED_CONTENTS:
        if not line:
            pager.advance(10)
            continue
        page = pager.ensure_room(20)
        indented = line.startswith('  ')
        page.draw_text(
            line.strip(),
            x=pager.left + (20 if indented else 0),
            y=pager.cursor,
            font=fonts.regular if indented else fonts.bold,
            size=11,
            color=INK_SOFT if indented else BLACK,
        )
        pager.advance(20)


def render_part_header(pager: Paginator, ctx: ReportContext, data: str) -> None:
    """Shaded title band opening one part of a combined report."""
    page = pager.ensure_room(PART_HEADER_HEIGHT + 30)
    bottom = pager.cursor - PART_HEADER_HEIGHT
    page.draw_rect(x=pager.left, y=bottom, width=pager.content_width, height=PART_HEADER_HEIGHT, fill=PANEL)
    page.draw_text(data, x=pager.left + 20, y=bottom + 20, font=pager.fonts.bold, size=18, color=BLACK)
    pager.move_to(bottom - 30)
