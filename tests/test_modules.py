from __future__ import annotations

from riskreport.modules import (
    DecodedModule,
    ModuleKind,
    SubstancesAnswers,
    UnknownModule,
    decode_module,
    generic_entries,
    key_details,
    module_display_name,
)
from riskreport.report.sections.modules import ModuleContent, ModuleSection, render_module_section
from riskreport.types import ModuleInstance


def test_catalog_names_and_unknown_keys():
    assert module_display_name('FSD_6_FRS_ACCESS') == 'FSD-6 - Fire & Rescue Service Access'
    assert module_display_name('FSD_7_DRAWINGS') == 'FSD-7 - Drawings & Schedules'
    assert module_display_name('BESPOKE_CHECKLIST') == 'BESPOKE_CHECKLIST'
    assert ModuleKind.parse('nope') is None


def test_decode_known_module_with_numbers_coerced():
    module = decode_module(
        ModuleInstance(module_key='A2_BUILDING_PROFILE', data={'building_height_m': 21, 'number_of_storeys': 6})
    )
    assert isinstance(module, DecodedModule)
    assert [detail.as_bullet() for detail in key_details(module)] == ['Height: 21m', 'Storeys: 6']


def test_decode_failure_falls_back_to_unknown_module():
    module = decode_module(
        ModuleInstance(module_key='DSEAR_1_DANGEROUS_SUBSTANCES', data={'substances': 'acetone'})
    )
    assert isinstance(module, UnknownModule)
    assert module.error
    assert module.name == 'DSEAR-1 - Dangerous Substances Register'
    assert key_details(module) == []


def test_key_details_skip_absent_answers():
    module = decode_module(
        ModuleInstance(
            module_key='FSD_5_ACTIVE_SYSTEMS',
            data={'detection_alarm_design_category': 'L1', 'sprinkler_provision': 'no', 'sprinkler_standard': 'BS EN 12845'},
        )
    )
    assert [detail.as_bullet() for detail in key_details(module)] == ['Detection: L1', 'Sprinklers: no']


def test_substance_aliases():
    module = decode_module(
        ModuleInstance(
            module_key='DSEAR_1_DANGEROUS_SUBSTANCES',
            data={'substances': [{'name': 'Acetone', 'LFL_UFL': '2.5% / 12.8%'}]},
        )
    )
    assert isinstance(module.answers, SubstancesAnswers)
    assert module.answers.substances[0].lfl_ufl == '2.5% / 12.8%'


def test_generic_entries_skip_notes_and_truncate():
    raw = {'notes': 'ignored', 'a': 1, 'b': {'nested': 'x' * 200}, 'c': 'three', 'd': 4, 'e': 5, 'f': 6}
    entries = generic_entries(raw)
    assert [entry.key for entry in entries] == ['a', 'b', 'c', 'd', 'e']
    assert len(entries[1].value) == 100


def test_structured_section_renders_substances_with_fallbacks(pager, make_context, text_of):
    instance = ModuleInstance(
        module_key='DSEAR_1_DANGEROUS_SUBSTANCES',
        data={'substances': [{'name': 'Acetone', 'physical_state': 'liquid'}, {}]},
    )
    pager.new_page()
    render_module_section(
        pager,
        make_context(),
        ModuleSection(instance, content=ModuleContent.structured, show_outcome=False),
    )
    text = text_of(pager)
    assert 'DSEAR-1 - Dangerous Substances Register' in text
    assert '1. Acetone' in text
    assert '2. Unnamed' in text
    assert 'Flash Point: unknown | LFL/UFL: unknown' in text
    assert 'Outcome:' not in text


def test_structured_section_placeholders(pager, make_context, text_of):
    pager.new_page()
    ctx = make_context()
    for key in ('DSEAR_3_HAZARDOUS_AREA_CLASSIFICATION', 'DSEAR_6_RISK_ASSESSMENT'):
        render_module_section(
            pager,
            ctx,
            ModuleSection(ModuleInstance(module_key=key), content=ModuleContent.structured, show_outcome=False),
        )
    text = text_of(pager)
    assert 'No zones recorded' in text
    assert 'No risk assessment rows recorded' in text


def test_unknown_module_renders_generic_entries(pager, make_context, text_of):
    instance = ModuleInstance(module_key='BESPOKE_CHECKLIST', data={'gas_cylinders': 'chained', 'notes': 'n/a'})
    pager.new_page()
    render_module_section(pager, make_context(), ModuleSection(instance, content=ModuleContent.structured))
    text = text_of(pager)
    assert 'gas_cylinders: chained' in text
    assert 'notes:' not in text


def test_key_details_section_shows_outcome_and_notes(pager, make_context, text_of):
    instance = ModuleInstance(
        module_key='A2_BUILDING_PROFILE',
        outcome='minor_def',
        assessor_notes='Mezzanine added in 2019.',
        data={'primary_use': 'Warehouse'},
    )
    pager.new_page()
    render_module_section(pager, make_context(), ModuleSection(instance))
    text = text_of(pager)
    assert 'Outcome:' in text
    assert 'Assessor Notes:' in text
    assert 'Mezzanine added in 2019.' in text
    assert '* Use: Warehouse' in text
