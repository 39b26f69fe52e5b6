from __future__ import annotations

from riskreport.report.blocks import heading, paragraph, rule
from riskreport.report.pagination import Paginator


def test_first_ensure_room_opens_a_page(pager: Paginator):
    assert pager.page_count == 0
    pager.ensure_room(10)
    assert pager.page_count == 1
    assert pager.cursor == pager.geometry.top


def test_ensure_room_breaks_only_when_content_does_not_fit(pager: Paginator):
    pager.new_page()
    pager.advance(pager.remaining() - 30)
    pager.ensure_room(20)
    assert pager.page_count == 1
    pager.ensure_room(40)
    assert pager.page_count == 2
    assert pager.cursor == pager.geometry.top


def test_oversized_block_on_fresh_page_does_not_loop(pager: Paginator):
    pager.new_page()
    huge = pager.geometry.height * 2
    pager.ensure_room(huge)
    pager.ensure_room(huge)
    assert pager.page_count == 1


def test_advance_ignores_non_positive_amounts(pager: Paginator):
    pager.new_page()
    before = pager.cursor
    pager.advance(0)
    pager.advance(-25)
    assert pager.cursor == before


def test_cursor_never_crosses_bottom_margin(pager: Paginator):
    text = ' '.join(['Fire doors must close fully onto their rebates.'] * 300)
    paragraph(pager, text, size=10, leading=14)
    assert pager.page_count > 1
    bottom = pager.geometry.bottom
    for page in pager.pages:
        assert all(run.y >= bottom for run in page.texts)


def test_heading_is_kept_with_following_content(pager: Paginator):
    pager.new_page()
    pager.advance(pager.remaining() - 40)
    heading(pager, 'ACTION REGISTER')
    assert pager.page_count == 2
    assert pager.pages[1].texts[0].text == 'ACTION REGISTER'


def test_page_decorators_run_for_every_new_page(geometry, fonts):
    seen: list[int] = []
    pager = Paginator(geometry=geometry, fonts=fonts, page_decorators=[lambda page: seen.append(page.index)])
    pager.new_page()
    pager.new_page()
    pager.ensure_room(5)
    assert seen == [0, 1]


def test_move_to_never_goes_above_top(pager: Paginator):
    pager.new_page()
    pager.move_to(pager.geometry.height + 100)
    assert pager.cursor == pager.geometry.top
    rule(pager)
    assert pager.cursor < pager.geometry.top
