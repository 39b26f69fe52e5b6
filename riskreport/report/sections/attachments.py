from __future__ import annotations

from riskreport.modules import module_display_name
from riskreport.report.blocks import heading, paragraph, rule
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import BLACK, LABEL, MUTED
from riskreport.report.text import format_date
from riskreport.types import Attachment


def attachment_reference(position: int) -> str:
    """1-based evidence reference: 1 -> E-001."""
    return f'E-{position:03d}'


def _linked_to(ctx: ReportContext, attachment: Attachment) -> list[str]:
    links: list[str] = []
    module = ctx.module_index.get(attachment.module_instance_id)
    if module is not None:
        links.append(f'Module: {module_display_name(module.module_key)}')
    action = ctx.find_action(attachment.action_id)
    if action is not None:
        links.append(f'Action: [{action.priority_band}] {action.recommended_action[:40]}...')
    return links


def _upload_line(attachment: Attachment) -> str:
    line = f'Uploaded: {format_date(attachment.taken_at or attachment.created_at)}'
    if attachment.file_size_bytes:
        line += f' | Size: {int(attachment.file_size_bytes / 1024 + 0.5)} KB'
    return line


def render_attachments_index(pager: Paginator, ctx: ReportContext, data: object = None) -> None:
    fonts = pager.fonts
    heading(pager, 'ATTACHMENTS & EVIDENCE INDEX')

    for position, attachment in enumerate(ctx.attachments, start=1):
        pager.ensure_room(14 + 12 + 12)
        paragraph(
            pager,
            f'{attachment_reference(position)} {attachment.file_name or "Unnamed file"}',
            size=10,
            leading=14,
            bold=True,
            color=BLACK,
        )
        width = pager.content_width - 10
        if attachment.caption:
            paragraph(pager, attachment.caption, size=9, leading=12, indent=10, width=width, color=LABEL)
        links = _linked_to(ctx, attachment)
        if links:
            paragraph(pager, f"Linked to: {', '.join(links)}", size=8, leading=12, indent=10, width=width,
                      color=MUTED)
        page = pager.ensure_room(12)
        page.draw_text(_upload_line(attachment), x=pager.left + 10, y=pager.cursor, font=fonts.regular, size=8,
                       color=MUTED)
        pager.advance(12)
        rule(pager, gap_before=8, gap_after=15)

    pager.diagnostics.info('attachments_index', f'{len(ctx.attachments)} attachments listed',
                           count=len(ctx.attachments))
