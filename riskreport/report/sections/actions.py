from __future__ import annotations

from riskreport.modules import module_display_name
from riskreport.report.blocks import chip, heading, paragraph, rule
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import INK, LABEL, MUTED, priority_color
from riskreport.report.text import format_date, humanize
from riskreport.rules.ordering import sort_actions_for_register
from riskreport.types import Action

NO_ACTIONS_TEXT = 'No actions have been created for this assessment.'
# Chip row plus first text line plus the metadata line.
ENTRY_MIN_HEIGHT = 18 + 14 + 12


def rating_text(ctx: ReportContext, action: Action) -> str:
    rating = ctx.latest_rating(action.id)
    if rating is None:
        return 'LxI: -'
    score = rating.score if rating.score is not None else rating.likelihood * rating.impact
    return f'L{rating.likelihood} x I{rating.impact} = {score}'


def _metadata(ctx: ReportContext, action: Action) -> str:
    parts: list[str] = []
    if action.owner:
        parts.append(f'Owner: {action.owner}')
    if action.target_date is not None:
        parts.append(f'Target: {format_date(action.target_date)}')
    parts.append(f'Status: {humanize(action.status)}')
    module = ctx.module_index.get(action.module_instance_id)
    if module is not None:
        parts.append(f'Module: {module_display_name(module.module_key)}')
    return ' | '.join(parts)


def render_action_register(pager: Paginator, ctx: ReportContext, data: object = None) -> None:
    fonts = pager.fonts
    heading(pager, 'ACTION REGISTER')

    ordered = sort_actions_for_register(ctx.actions)
    if not ordered:
        page = pager.ensure_room(20)
        page.draw_text(NO_ACTIONS_TEXT, x=pager.left, y=pager.cursor, font=fonts.regular, size=11, color=MUTED)
        pager.advance(20)
        return

    for action in ordered:
        page = pager.ensure_room(ENTRY_MIN_HEIGHT)
        priority = action.priority_band or 'P4'
        chip(
            page,
            priority,
            x=pager.left,
            y=pager.cursor,
            width=30,
            height=16,
            fill=priority_color(priority),
            font=fonts.bold,
            size=9,
        )
        page.draw_text(rating_text(ctx, action), x=pager.left + 35, y=pager.cursor, font=fonts.regular, size=9,
                       color=LABEL)
        pager.advance(18)

        width = pager.content_width - 5
        paragraph(pager, action.recommended_action or 'Untitled action', size=10, leading=14, indent=5,
                  width=width, color=INK)
        paragraph(pager, _metadata(ctx, action), size=8, leading=12, indent=5, width=width, color=MUTED)
        rule(pager, gap_before=8, gap_after=15)

    pager.diagnostics.info('action_register', f'{len(ordered)} actions listed', count=len(ordered))
