from __future__ import annotations

import io

import pytest
from pypdf import PdfReader

from conftest import FIXED_NOW, document_payload, fra_modules, make_input
from riskreport.config import Settings
from riskreport.report.builder import build_report
from riskreport.report.inspect import summarize_pdf
from riskreport.report.sections.recommendations import NO_RECOMMENDATIONS_TEXT
from riskreport.report.surface import ReportBuildError
from riskreport.types import DocumentMode, ReportInput, ReportKind


async def _build(report, kind, settings):
    result = await build_report(report, kind=kind, settings=settings, now=FIXED_NOW)
    summary = summarize_pdf(result.pdf_bytes)
    assert summary.page_count == result.page_count
    return result, summary


def _shown_strings(pdf_bytes: bytes, index: int) -> list[str]:
    page = PdfReader(io.BytesIO(pdf_bytes)).pages[index]
    operations = page.get_contents().operations
    return [str(operands[0]) for operands, operator in operations if operator == b'Tj' and operands]


def _assert_numbered_after(summary, lead_pages: int) -> None:
    labels = summary.page_labels()
    assert labels[:lead_pages] == [None] * lead_pages
    total = summary.page_count - lead_pages
    assert labels[lead_pages:] == [(number, total) for number in range(1, total + 1)]


async def test_draft_fra_orders_register_by_priority(settings):
    result, summary = await _build(make_input(), ReportKind.fra, settings)

    assert 'DRAFT' in summary.pages[0]
    assert 'FIRE RISK ASSESSMENT' in summary.pages[0]

    text = '\n'.join(summary.pages)
    register = text[text.index('ACTION REGISTER'):]
    assert register.index('Remove the chain') < register.index('Replace faded')
    assert 'ATTACHMENTS & EVIDENCE INDEX' not in text
    assert 'ASSUMPTIONS & LIMITATIONS' in text
    assert 'Roof void not accessed.' in text

    _assert_numbered_after(summary, lead_pages=1)
    assert 'Fire Risk Assessment - Riverside Warehouse - v1' in summary.footers[1]
    assert summary.footers[1].endswith(f'Page 1 of {summary.page_count - 1}')
    assert not result.diagnostics.has('superseded_overlay')
    assert result.diagnostics.find('pages_created')[0].detail['count'] == result.page_count


async def test_superseded_issued_document_is_stamped_on_every_page(settings):
    report = make_input(
        document=document_payload(status='superseded', version=2, issue_date='2026-02-01', base_document_id='base-1'),
    )
    result, summary = await _build(report, ReportKind.fra, settings)

    overlay = result.diagnostics.find('superseded_overlay')
    assert overlay[0].detail['count'] == result.page_count
    assert 'DOCUMENT CONTROL & REVISION HISTORY' in summary.pages[1]
    assert 'Revision issued' in summary.pages[1]
    _assert_numbered_after(summary, lead_pages=2)


async def test_superseded_without_issue_date_keeps_simple_cover(settings):
    report = make_input(document=document_payload(status='superseded'))
    result, summary = await _build(report, ReportKind.fra, settings)

    assert 'DOCUMENT CONTROL & REVISION HISTORY' not in '\n'.join(summary.pages)
    assert result.diagnostics.find('superseded_overlay')[0].detail['count'] == result.page_count
    _assert_numbered_after(summary, lead_pages=1)


async def test_issued_cover_uses_default_logo_and_synthesized_history(logo_file):
    settings = Settings(_env_file=None, default_logo_path=logo_file, org_logo_base_url=None, records_base_url=None)
    report = make_input(
        document=document_payload(status='issued', issue_date='2026-03-10', site_name='Riverside Estate'),
    )
    result, summary = await _build(report, ReportKind.fra, settings)

    assert 'Fire Risk Assessment' in summary.pages[0]
    assert 'Site: Riverside Estate' in summary.pages[0]
    assert 'ISSUED' in summary.pages[0]
    assert 'Initial issue' in summary.pages[1]
    assert not result.diagnostics.has('logo_unreadable')
    assert not result.diagnostics.has('logo_fetch_failed')
    _assert_numbered_after(summary, lead_pages=2)


async def test_attachments_are_indexed_with_evidence_references(settings):
    report = make_input(
        attachments=[
            {'id': 'att-1', 'file_name': 'rear-exit.jpg', 'file_size_bytes': 40960, 'action_id': 'a-p1'},
            {'id': 'att-2', 'file_name': 'alarm-panel.jpg', 'module_instance_id': 'm-fra3'},
        ],
    )
    result, summary = await _build(report, ReportKind.fra, settings)

    text = '\n'.join(summary.pages)
    assert 'ATTACHMENTS & EVIDENCE INDEX' in text
    assert 'E-001' in text
    assert 'E-002' in text
    assert 'rear-exit.jpg' in text
    assert result.diagnostics.has('attachments_index')


async def test_dsear_renders_structured_module_content(settings):
    report = make_input(
        document=document_payload(document_type='DSEAR', title='Solvent Store'),
        modules=[
            {
                'id': 'm-d1',
                'module_key': 'DSEAR_1_DANGEROUS_SUBSTANCES',
                'data': {'substances': [{'name': 'Acetone', 'physical_state': 'liquid', 'flash_point': '-20C'}]},
            },
            {'id': 'm-d3', 'module_key': 'DSEAR_3_HAZARDOUS_AREA_CLASSIFICATION', 'data': {}},
        ],
        actions=[],
        action_ratings=[],
    )
    result, summary = await _build(report, ReportKind.dsear, settings)

    text = '\n'.join(summary.pages)
    assert 'DSEAR Risk Assessment' in summary.pages[0]
    assert 'ZONE DEFINITIONS' in text
    assert '1. Acetone' in text
    assert 'No zones recorded' in text
    assert 'REFERENCES AND COMPLIANCE' in text
    assert 'No actions have been created for this assessment.' in text
    assert 'Overall Outcome:' in text
    assert 'Satisfactory with Improvements' in text
    headline = result.diagnostics.find('headline_outcome')[0]
    assert headline.detail['strategy'] == 'engine_derived'


async def test_irish_dsear_uses_explosive_atmospheres_title(settings):
    report = make_input(document=document_payload(jurisdiction='IE'), modules=[], actions=[], action_ratings=[])
    _, summary = await _build(report, ReportKind.dsear, settings)
    assert 'Explosive Atmospheres Risk Assessment' in summary.pages[0]


async def test_combined_report_has_contents_and_part_headers(settings):
    report = make_input(
        modules=[
            *fra_modules(),
            {'id': 'm-fsd1', 'module_key': 'FSD_1_REG_BASIS', 'data': {'regulatory_basis': 'Approved Document B'}},
            {'id': 'm-fsd6', 'module_key': 'FSD_6_FRS_ACCESS', 'data': {}},
        ],
    )
    result, summary = await _build(report, ReportKind.combined, settings)

    text = '\n'.join(summary.pages)
    assert 'Table of Contents' in text
    assert text.count('Part 1: Fire Risk Assessment (FRA)') >= 2
    assert text.count('Part 2: Fire Strategy Document (FSD)') >= 2
    assert text.count('Responsible Person Duties') >= 2
    assert 'Fire Strategy Limitations' in text
    assert 'FSD-6 - Fire & Rescue Service Access' in text
    assert 'Combined FRA + FSD Report' in summary.footers[1]
    assert result.diagnostics.has('section_rendered')


async def test_fsd_appends_project_limitations(settings):
    report = make_input(
        document=document_payload(document_type='FSD', limitations_assumptions='Existing drawings were not verified.'),
        modules=[{'id': 'm-fsd5', 'module_key': 'FSD_5_ACTIVE_SYSTEMS', 'data': {'sprinkler_provision': 'yes'}}],
        actions=[],
        action_ratings=[],
    )
    result, summary = await _build(report, ReportKind.fsd, settings)

    text = '\n'.join(summary.pages)
    assert 'Fire Strategy Document' in summary.pages[0]
    assert 'Project-Specific Limitations' in text
    assert 'Existing drawings were not verified.' in text
    assert 'ACTION REGISTER' not in text
    omitted = [entry.message for entry in result.diagnostics.find('section_omitted')]
    assert 'Action Register' in omitted


async def test_survey_report_without_recommendations(settings):
    report = make_input(
        modules=[
            {'id': 'm-re1', 'module_key': 'RE_01_CONSTRUCTION', 'assessor_notes': 'Roof is a steel deck.'},
            {'id': 'm-re2', 'module_key': 'RE_02_OCCUPANCY', 'assessor_notes': 'Bulk warehousing.'},
        ],
        actions=[],
        action_ratings=[],
        selected_modules=['RE_01_CONSTRUCTION'],
    )
    _, summary = await _build(report, ReportKind.survey, settings)

    text = '\n'.join(summary.pages)
    assert 'Version 1.0 - DRAFT' in summary.pages[0]
    assert 'RE_01_CONSTRUCTION' in text
    assert 'Roof is a steel deck.' in text
    assert 'RE_02_OCCUPANCY' not in text
    assert NO_RECOMMENDATIONS_TEXT in text


async def test_unknown_kind_is_rejected(settings):
    with pytest.raises(ReportBuildError):
        await build_report(make_input(), kind='BOGUS', settings=settings, now=FIXED_NOW)


async def test_kind_accepts_enum_names(settings):
    result = await build_report(make_input(), kind='combined', settings=settings, now=FIXED_NOW)
    assert result.page_count > 3


def _draft_with_mixed_actions():
    modules = {module['id']: module for module in fra_modules()}
    return make_input(
        modules=[modules['m-a1'], modules['m-fra2'], modules['m-fra3']],
        actions=[
            {
                'id': 'a-done',
                'recommended_action': 'Refresh the fire action notices in the canteen.',
                'priority_band': 'P3',
                'status': 'complete',
                'target_date': '2026-04-30',
            },
            {
                'id': 'a-urgent',
                'recommended_action': 'Unlock the rear final exit door during occupancy.',
                'priority_band': 'P1',
                'status': 'open',
                'target_date': None,
            },
        ],
        action_ratings=[],
        attachments=[],
    )


async def test_draft_build_stamps_cover_and_omits_empty_attachments(settings):
    report = _draft_with_mixed_actions()
    result, summary = await _build(report, ReportKind.fra, settings)

    # Status chip plus the watermark on the cover, watermark alone on body pages.
    assert _shown_strings(result.pdf_bytes, 0).count('DRAFT') == 2
    assert all('DRAFT' in _shown_strings(result.pdf_bytes, index) for index in range(1, result.page_count))
    text = '\n'.join(summary.pages)
    register = text[text.index('ACTION REGISTER'):]
    assert register.index('Unlock the rear final exit') < register.index('Refresh the fire action notices')
    assert 'Status: complete' in register
    assert 'ATTACHMENTS & EVIDENCE INDEX' not in text
    assert not result.diagnostics.has('attachments_index')
    assert not result.diagnostics.has('superseded_overlay')


async def test_superseded_build_keeps_draft_page_count(settings):
    draft = _draft_with_mixed_actions()
    superseded = draft.model_copy(update={'mode': DocumentMode.superseded})

    draft_result, draft_summary = await _build(draft, ReportKind.fra, settings)
    result, summary = await _build(superseded, ReportKind.fra, settings)

    assert result.page_count == draft_result.page_count
    assert summary.page_labels() == draft_summary.page_labels()
    assert result.diagnostics.find('superseded_overlay')[0].detail['count'] == result.page_count
    for index in range(result.page_count):
        shown = _shown_strings(result.pdf_bytes, index)
        assert 'SUPERSEDED' in shown
        assert 'DRAFT' not in shown


async def test_null_text_fields_fall_back_to_placeholders(settings):
    report = ReportInput.model_validate(
        {
            'document': document_payload(id=None, title=None, document_type=None, status=None, version=None),
            'modules': None,
            'actions': [{'id': None, 'recommended_action': None, 'priority_band': None, 'status': None}],
            'action_ratings': None,
            'organisation': {'id': None, 'name': None},
            'attachments': [{'id': None, 'file_name': None}],
        }
    )
    assert report.document.title == ''
    assert report.document.version == 1
    assert report.document.mode == DocumentMode.draft
    assert report.actions[0].recommended_action == ''
    assert report.organisation.name == ''

    result, summary = await _build(report, ReportKind.fra, settings)

    text = '\n'.join(summary.pages)
    assert 'Untitled Assessment' in summary.pages[0]
    assert 'Untitled action' in text
    assert 'E-001 Unnamed file' in text
    assert result.page_count > 1
