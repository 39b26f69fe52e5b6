from __future__ import annotations

from riskreport.report.decorations import (
    SUPERSEDED_TEXT,
    apply_footers,
    apply_superseded_overlay,
    draft_watermark,
    footer_text,
)
from riskreport.report.pagination import Paginator


def _pages(pager: Paginator, count: int):
    for _ in range(count):
        pager.new_page()
    return pager.pages


def test_footer_text_layout():
    text = footer_text(report_name='Fire Risk Assessment', title='Depot', version=3, generated='07 Mar 2026')
    assert text == 'Fire Risk Assessment — Depot — v3 — Generated 07 Mar 2026'


def test_footers_skip_lead_pages(pager: Paginator, fonts):
    pages = _pages(pager, 5)
    total = apply_footers(pages, fonts, text='Fire Risk Assessment — Depot', skip=2)
    assert total == 3
    assert 'Page' not in pages[0].plain_text()
    assert 'Page' not in pages[1].plain_text()
    assert 'Page 1 of 3' in pages[2].plain_text()
    assert 'Page 3 of 3' in pages[4].plain_text()
    # Typographic dashes never reach the PDF.
    assert '—' not in pages[2].plain_text()


def test_footer_skip_is_clamped(pager: Paginator, fonts):
    pages = _pages(pager, 1)
    assert apply_footers(pages, fonts, text='x', skip=4) == 0


def test_long_footer_text_is_truncated(pager: Paginator, fonts):
    pages = _pages(pager, 1)
    apply_footers(pages, fonts, text='Very long title ' * 40)
    footer = pages[0].texts[0].text
    assert footer.endswith('...')
    assert fonts.width(footer, 8) < pager.geometry.content_width


def test_superseded_overlay_stamps_every_page(pager: Paginator, fonts):
    pages = _pages(pager, 4)
    assert apply_superseded_overlay(pages, fonts) == 4
    assert all(page.texts[-1].text == SUPERSEDED_TEXT for page in pages)


def test_draft_watermark_is_drawn_first_on_each_page(geometry, fonts):
    pager = Paginator(geometry=geometry, fonts=fonts, page_decorators=[draft_watermark(fonts)])
    pager.new_page()
    pager.page.draw_text('Body', x=50, y=500, font=fonts.regular, size=10)
    pager.new_page()
    for page in pager.pages:
        assert page.texts[0].text == 'DRAFT'
