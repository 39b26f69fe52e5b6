from __future__ import annotations

from conftest import document_payload, make_input
from riskreport.report.sections.actions import NO_ACTIONS_TEXT, rating_text, render_action_register
from riskreport.report.sections.attachments import attachment_reference, render_attachments_index
from riskreport.report.sections.contents import COMBINED_CONTENTS, render_table_of_contents
from riskreport.report.sections.cover import TITLE_MAX_LINES, TITLE_SIZE, render_issued_cover, title_lines_for_cover
from riskreport.report.sections.recommendations import render_recommendations
from riskreport.types import Attachment


def test_register_entries_carry_rating_and_metadata(pager, make_context, text_of):
    ctx = make_context()
    pager.new_page()
    render_action_register(pager, ctx)

    text = text_of(pager)
    assert text.index('Remove the chain') < text.index('Replace faded')
    assert 'L4 x I5 = 20' in text
    assert 'LxI: -' in text
    assert 'Owner: Site Manager | Target: 07 Mar 2026' in text
    assert pager.diagnostics.has('action_register')


def test_latest_rating_wins(make_context):
    report = make_input(
        action_ratings=[
            {'action_id': 'a-p1', 'likelihood': 4, 'impact': 5, 'rated_at': '2026-03-01T09:05:00Z'},
            {'action_id': 'a-p1', 'likelihood': 2, 'impact': 3, 'score': 6, 'rated_at': '2026-03-05T09:05:00Z'},
        ],
    )
    ctx = make_context(report)
    assert rating_text(ctx, ctx.find_action('a-p1')) == 'L2 x I3 = 6'


def test_empty_register_shows_placeholder(pager, make_context, text_of):
    pager.new_page()
    render_action_register(pager, make_context(make_input(actions=[], action_ratings=[])))
    assert NO_ACTIONS_TEXT in text_of(pager)


def test_attachment_references_follow_input_order(pager, make_context, text_of):
    ctx = make_context(
        attachments=[
            Attachment(file_name='rear-exit.jpg', file_size_bytes=40960),
            Attachment(file_name='panel.jpg', caption='Alarm panel in fault'),
            Attachment(file_name='plan.pdf'),
        ],
    )
    pager.new_page()
    render_attachments_index(pager, ctx)

    text = text_of(pager)
    assert 'E-001 rear-exit.jpg' in text
    assert 'E-002 panel.jpg' in text
    assert 'E-003 plan.pdf' in text
    assert 'Alarm panel in fault' in text
    assert 'Uploaded: - | Size: 40 KB' in text
    assert attachment_reference(12) == 'E-012'


def test_recommendations_list_metadata_and_lifecycle_markers(pager, make_context, text_of):
    report = make_input(
        actions=[
            {
                'id': 'r-closed',
                'recommended_action': 'Fit self-closers to stair doors.',
                'priority_band': 'P2',
                'status': 'closed',
                'reference_number': 'R-02',
                'closed_at': '2026-02-20',
            },
            {
                'id': 'r-open',
                'recommended_action': 'Install sprinkler protection to the high-bay racking.',
                'priority_band': 'P1',
                'status': 'in_progress',
                'reference_number': 'R-01',
                'first_raised_in_version': 1,
                'superseded_by_action_id': 'r-new',
            },
        ],
        action_ratings=[],
    )
    pager.new_page()
    render_recommendations(pager, make_context(report))

    text = text_of(pager)
    assert text.index('R-01') < text.index('R-02')
    assert 'Status: in progress' in text
    assert 'First raised: Version 1.0' in text
    assert 'Closed: 20 Feb 2026' in text
    assert 'Superseded by newer recommendation' in text
    assert pager.diagnostics.find('recommendations')[0].detail['count'] == 2


def test_issued_cover_caps_long_titles(pager, make_context, geometry):
    title = ' '.join(['Basement plant room and loading dock refurbishment'] * 8)
    report = make_input(document=document_payload(title=title, status='issued', issue_date='2026-03-10'))
    pager.new_page()
    render_issued_cover(pager, make_context(report), 'Fire Risk Assessment')

    runs = pager.page.texts
    title_runs = [run for run in runs if run.size == TITLE_SIZE and run.text != 'EziRisk']
    assert len(title_runs) == TITLE_MAX_LINES
    assert title_runs[-1].text.endswith('...')
    assert all(pager.fonts.width(run.text, TITLE_SIZE, bold=True) <= geometry.content_width for run in title_runs)
    assert all(run.y >= geometry.bottom for run in runs)
    report_name = next(run for run in runs if run.text == 'Fire Risk Assessment')
    version = next(run for run in runs if run.text == 'Version 1.0')
    assert report_name.y > version.y + 40


def test_short_cover_title_is_left_alone(fonts, geometry):
    width_fn = fonts.width_fn(bold=True)
    assert title_lines_for_cover('Riverside Warehouse', geometry.content_width, width_fn) == ['Riverside Warehouse']


def test_table_of_contents_defaults_without_data(pager, make_context, text_of):
    pager.new_page()
    render_table_of_contents(pager, make_context(), None)

    text = text_of(pager)
    assert 'Table of Contents' in text
    for line in COMBINED_CONTENTS:
        assert line.strip() in text
