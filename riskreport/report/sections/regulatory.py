from __future__ import annotations

from dataclasses import dataclass

from riskreport.report.blocks import heading, paragraph, subheading
from riskreport.report.boilerplate import explosive_atmospheres_references, parse_marked_paragraphs
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import INK_SOFT


@dataclass(frozen=True)
class TextSection:
    """A titled block of canned or free text. ``**heading**`` paragraphs get a bold heading."""

    title: str
    body: str
    heading_size: float = 16
    size: float = 10
    leading: float = 14


def render_text_section(pager: Paginator, ctx: ReportContext, data: TextSection) -> None:
    heading(pager, data.title, size=data.heading_size)
    for block in parse_marked_paragraphs(data.body):
        if block.heading:
            pager.advance(4)
            subheading(pager, block.heading, size=12, space_after=16)
        if block.body:
            paragraph(pager, block.body, size=data.size, leading=data.leading, color=INK_SOFT)
        pager.advance(8)


def render_references(pager: Paginator, ctx: ReportContext, data: object = None) -> None:
    heading(pager, 'REFERENCES AND COMPLIANCE')
    for reference in explosive_atmospheres_references(ctx.document.jurisdiction):
        pager.ensure_room(16 + 14)
        paragraph(pager, reference.label, size=11, leading=16, prefix='* ', bold=True)
        if reference.detail:
            paragraph(pager, reference.detail, size=10, leading=14, indent=20)
        pager.advance(8)
