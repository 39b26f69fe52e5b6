from __future__ import annotations

from riskreport.report.blocks import chip, paragraph
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import BORDER, CALLOUT_FILL, INK, LABEL, MUTED, TIP, quick_action_color
from riskreport.report.text import wrap_text
from riskreport.rules.info_gaps import detect_info_gaps, info_gap_title
from riskreport.types import ModuleInstance

CALLOUT_TITLE = 'Assessment notes (incomplete information)'
CALLOUT_TIP = (
    'Tip: Address these information gaps to improve assessment completeness and reduce risk uncertainty.'
)
REASON_LEADING = 13


def render_info_gap_callout(pager: Paginator, ctx: ReportContext, instance: ModuleInstance) -> bool:
    """Bordered reasons box followed by the prioritized quick actions.

    Returns False, drawing nothing, when the module shows no information gap.
    """
    detection = detect_info_gaps(instance.module_key, instance.data, instance.outcome, ctx.document_context())
    if not detection.has_info_gap:
        return False

    fonts = pager.fonts
    left = pager.left
    reason_width = pager.content_width - 30
    wrapped = [wrap_text(reason, reason_width, 9, fonts.width_fn()) for reason in detection.reasons]
    # Measured before placing so the box is drawn once at its final size.
    box_height = 30 + sum(len(lines) * REASON_LEADING for lines in wrapped) + 12

    pager.advance(20)
    page = pager.ensure_room(box_height)
    top = pager.cursor + 12
    page.draw_rect(
        x=left,
        y=top - box_height,
        width=pager.content_width,
        height=box_height,
        fill=CALLOUT_FILL,
        stroke=BORDER,
        stroke_width=1,
    )
    page.draw_text('i', x=left + 8, y=pager.cursor, font=fonts.bold, size=11, color=MUTED)
    page.draw_text(CALLOUT_TITLE, x=left + 25, y=pager.cursor, font=fonts.bold, size=11, color=LABEL)
    pager.advance(25)

    for lines in wrapped:
        page = pager.ensure_room(REASON_LEADING)
        page.draw_text('*', x=left + 8, y=pager.cursor, font=fonts.regular, size=10, color=MUTED)
        for line in lines:
            page = pager.ensure_room(REASON_LEADING)
            page.draw_text(line, x=left + 18, y=pager.cursor, font=fonts.regular, size=9, color=LABEL)
            pager.advance(REASON_LEADING)
    pager.advance(22)

    if detection.quick_actions:
        page = pager.ensure_room(20 + 18 + 14)
        page.draw_text('Recommended actions:', x=left + 8, y=pager.cursor, font=fonts.bold, size=10, color=LABEL)
        pager.advance(20)

        for quick_action in detection.quick_actions:
            page = pager.ensure_room(18 + 14 + REASON_LEADING)
            chip(
                page,
                quick_action.priority,
                x=left + 10,
                y=pager.cursor,
                width=25,
                height=14,
                fill=quick_action_color(quick_action.priority),
                font=fonts.bold,
                size=8,
                padding=3,
            )
            pager.advance(18)
            paragraph(pager, quick_action.action, size=10, leading=14, indent=15, bold=True, color=INK,
                      width=pager.content_width - 15)
            paragraph(pager, f'Why: {quick_action.reason}', size=9, leading=REASON_LEADING, indent=15, color=LABEL,
                      width=pager.content_width - 15)
            pager.advance(10)

        pager.advance(5)
        paragraph(pager, CALLOUT_TIP, size=8, leading=12, indent=10, color=TIP, width=pager.content_width - 10)

    pager.advance(15)
    pager.diagnostics.info(
        'info_gap_detected',
        info_gap_title(instance.module_key),
        module_key=instance.module_key,
        reasons=len(detection.reasons),
        quick_actions=len(detection.quick_actions),
    )
    return True
