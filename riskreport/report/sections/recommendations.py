from __future__ import annotations

from riskreport.report.blocks import heading, paragraph, rule
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import ALERT, INK_SOFT, LABEL, MUTED, priority_color
from riskreport.report.text import format_date, humanize
from riskreport.rules.ordering import sort_recommendations
from riskreport.types import Action

NO_RECOMMENDATIONS_TEXT = 'No recommendations were identified at the time of inspection.'


def _metadata_row(pager: Paginator, recommendation: Action, *, fallback_version: int) -> None:
    fonts = pager.fonts
    page = pager.ensure_room(14)
    priority = recommendation.priority_band or 'P4'
    first_raised = recommendation.first_raised_in_version or fallback_version
    page.draw_text(f'Priority: {priority}', x=pager.left, y=pager.cursor, font=fonts.bold, size=9,
                   color=priority_color(priority))
    page.draw_text(f'Status: {humanize(recommendation.status)}', x=pager.left + 150, y=pager.cursor,
                   font=fonts.regular, size=9, color=LABEL)
    page.draw_text(f'First raised: Version {first_raised}.0', x=pager.left + 280, y=pager.cursor,
                   font=fonts.regular, size=9, color=LABEL)
    pager.advance(14)


def render_recommendations(pager: Paginator, ctx: ReportContext, data: object = None) -> None:
    fonts = pager.fonts
    heading(pager, 'RECOMMENDATIONS')

    ordered = sort_recommendations(ctx.actions)
    if not ordered:
        paragraph(pager, NO_RECOMMENDATIONS_TEXT, size=11, leading=16, color=MUTED)
        return

    for recommendation in ordered:
        page = pager.ensure_room(16 + 13 + 14)
        page.draw_text(recommendation.reference_number or 'R-??', x=pager.left, y=pager.cursor, font=fonts.bold,
                       size=11)
        pager.advance(16)
        paragraph(pager, recommendation.recommended_action or 'Untitled recommendation', size=10, leading=13,
                  indent=10, width=pager.content_width - 10, color=INK_SOFT)
        pager.advance(4)
        _metadata_row(pager, recommendation, fallback_version=ctx.document.version)
        if recommendation.closed_at is not None:
            paragraph(pager, f'Closed: {format_date(recommendation.closed_at)}', size=9, leading=13, color=LABEL)
        if recommendation.superseded_by_action_id:
            paragraph(pager, 'Superseded by newer recommendation', size=9, leading=13, color=ALERT)
        rule(pager, gap_before=6, gap_after=15)

    pager.diagnostics.info('recommendations', f'{len(ordered)} recommendations listed', count=len(ordered))
