from __future__ import annotations

from typing import Iterable

from reportlab.lib import colors

from riskreport.report.pagination import Paginator
from riskreport.report.palette import BLACK, INK_SOFT, LABEL, RULE, WHITE
from riskreport.report.surface import Page
from riskreport.report.text import split_paragraphs, wrap_text

# Smallest room a heading needs so it never sits alone at the foot of a page.
HEADING_KEEP_WITH_NEXT = 48


def heading(
    pager: Paginator,
    text: str,
    *,
    size: float = 16,
    space_before: float = 20,
    space_after: float = 30,
    color: colors.Color = BLACK,
) -> None:
    pager.ensure_room(space_before + size + HEADING_KEEP_WITH_NEXT)
    pager.advance(space_before)
    pager.page.draw_text(text, x=pager.left, y=pager.cursor, font=pager.fonts.bold, size=size, color=color)
    pager.advance(space_after)


def subheading(pager: Paginator, text: str, *, size: float = 11, space_after: float = 18) -> None:
    heading(pager, text, size=size, space_before=0, space_after=space_after)


def paragraph(
    pager: Paginator,
    text: object,
    *,
    size: float = 10,
    leading: float = 14,
    indent: float = 0,
    width: float | None = None,
    color: colors.Color = INK_SOFT,
    bold: bool = False,
    prefix: str = '',
    max_lines: int | None = None,
) -> int:
    """Flow wrapped text line by line; a line is never split across pages."""
    fonts = pager.fonts
    max_width = (width if width is not None else pager.content_width) - indent
    lines = wrap_text(f'{prefix}{text}' if prefix else text, max_width, size, fonts.width_fn(bold=bold))
    if max_lines is not None:
        lines = lines[:max_lines]
    font = fonts.bold if bold else fonts.regular
    for line in lines:
        page = pager.ensure_room(leading)
        page.draw_text(line, x=pager.left + indent, y=pager.cursor, font=font, size=size, color=color)
        pager.advance(leading)
    return len(lines)


def paragraphs(
    pager: Paginator,
    text: object,
    *,
    size: float = 11,
    leading: float = 16,
    gap: float = 8,
    color: colors.Color = INK_SOFT,
) -> int:
    count = 0
    for block in split_paragraphs(text):
        count += paragraph(pager, block, size=size, leading=leading, color=color)
        pager.advance(gap)
    return count


def centered(
    pager: Paginator,
    text: object,
    *,
    size: float,
    leading: float,
    bold: bool = False,
    color: colors.Color = BLACK,
) -> int:
    fonts = pager.fonts
    font = fonts.bold if bold else fonts.regular
    lines = wrap_text(text, pager.content_width, size, fonts.width_fn(bold=bold))
    for line in lines:
        page = pager.ensure_room(leading)
        x = pager.geometry.center_x - fonts.width(line, size, bold=bold) / 2
        page.draw_text(line, x=x, y=pager.cursor, font=font, size=size, color=color)
        pager.advance(leading)
    return len(lines)


def labeled_field(
    pager: Paginator,
    label: str,
    value: object,
    *,
    size: float = 10,
    leading: float = 14,
    indent: float = 10,
) -> None:
    pager.ensure_room(leading * 2)
    pager.page.draw_text(f'{label}:', x=pager.left, y=pager.cursor, font=pager.fonts.bold, size=size, color=LABEL)
    pager.advance(leading)
    paragraph(pager, value, size=size, leading=leading, indent=indent)
    pager.advance(5)


def label_value_rows(
    pager: Paginator,
    rows: Iterable[tuple[str, object]],
    *,
    value_offset: float = 180,
    label_indent: float = 20,
    size: float = 11,
    leading: float = 22,
    value_color: colors.Color = INK_SOFT,
) -> None:
    fonts = pager.fonts
    value_width = pager.content_width - value_offset
    for label, value in rows:
        lines = wrap_text(value, value_width, size, fonts.width_fn())
        page = pager.ensure_room(leading)
        page.draw_text(label, x=pager.left + label_indent, y=pager.cursor, font=fonts.bold, size=size, color=LABEL)
        for index, line in enumerate(lines):
            if index:
                pager.advance(size + 3)
                page = pager.ensure_room(leading)
            page.draw_text(line, x=pager.left + value_offset, y=pager.cursor, font=fonts.regular, size=size,
                           color=value_color)
        pager.advance(leading)


def bullets(
    pager: Paginator,
    items: Iterable[object],
    *,
    size: float = 9,
    leading: float = 12,
    indent: float = 10,
    marker: str = '*',
) -> int:
    count = 0
    for item in items:
        paragraph(pager, item, size=size, leading=leading, indent=indent, prefix=f'{marker} ')
        count += 1
    return count


def rule(pager: Paginator, *, color: colors.Color = RULE, width: float = 0.5, gap_before: float = 0,
         gap_after: float = 15) -> None:
    pager.advance(gap_before)
    page = pager.ensure_room(1)
    page.draw_line(x1=pager.left, y1=pager.cursor, x2=pager.right, y2=pager.cursor, color=color, width=width)
    pager.advance(gap_after)


def chip(
    page: Page,
    text: str,
    *,
    x: float,
    y: float,
    width: float,
    height: float,
    fill: colors.Color,
    font: str,
    size: float,
    text_color: colors.Color = WHITE,
    padding: float = 4,
) -> None:
    """Colored badge; ``y`` is the text baseline."""
    page.draw_rect(x=x, y=y - 3, width=width, height=height, fill=fill)
    page.draw_text(text, x=x + padding, y=y, font=font, size=size, color=text_color)
