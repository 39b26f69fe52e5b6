from __future__ import annotations

from riskreport.modules import ModuleKind
from riskreport.rules.ordering import (
    COMBINED_FSD_ORDER,
    FRA_MODULE_ORDER,
    filter_modules,
    priority_rank,
    sort_actions_for_register,
    sort_modules,
    sort_recommendations,
)
from riskreport.types import Action, ModuleInstance


def _module(key: str, module_id: str = '') -> ModuleInstance:
    return ModuleInstance(id=module_id or key, module_key=key)


def test_sort_modules_follows_table_and_keeps_unknowns_last_in_input_order():
    modules = [
        _module('CUSTOM_B'),
        _module('FRA_3_PROTECTION_ASIS'),
        _module('CUSTOM_A'),
        _module('A1_DOC_CONTROL'),
        _module('FRA_1_HAZARDS'),
    ]
    ordered = [item.module_key for item in sort_modules(modules, FRA_MODULE_ORDER)]
    assert ordered == ['A1_DOC_CONTROL', 'FRA_1_HAZARDS', 'FRA_3_PROTECTION_ASIS', 'CUSTOM_B', 'CUSTOM_A']


def test_filter_modules_accepts_kinds_and_strings():
    modules = [_module('A1_DOC_CONTROL'), _module('FSD_7_DRAWINGS'), _module('FRA_1_HAZARDS')]
    kept = filter_modules(modules, [ModuleKind.fsd_7_drawings, 'FRA_1_HAZARDS'])
    assert [item.module_key for item in kept] == ['FSD_7_DRAWINGS', 'FRA_1_HAZARDS']


def test_combined_fsd_order_excludes_common_sections():
    assert ModuleKind.a1_doc_control not in COMBINED_FSD_ORDER
    assert ModuleKind.a2_building_profile not in COMBINED_FSD_ORDER
    assert ModuleKind.fsd_6_frs_access in COMBINED_FSD_ORDER
    assert ModuleKind.fsd_7_drawings in COMBINED_FSD_ORDER


def test_register_order_open_first_then_priority_then_target_date():
    actions = [
        Action(id='closed-p1', priority_band='P1', status='closed'),
        Action(id='open-p3', priority_band='P3', status='open'),
        Action(id='open-p1-late', priority_band='P1', status='open', target_date='2026-06-01'),
        Action(id='open-p1-undated', priority_band='P1', status='open'),
        Action(id='open-p1-early', priority_band='P1', status='in_progress', target_date='2026-04-01'),
    ]
    ordered = [action.id for action in sort_actions_for_register(actions)]
    assert ordered == ['open-p1-early', 'open-p1-late', 'open-p1-undated', 'open-p3', 'closed-p1']


def test_register_ties_put_newest_first():
    actions = [
        Action(id='older', priority_band='P2', created_at='2026-01-01T00:00:00Z'),
        Action(id='newer', priority_band='P2', created_at='2026-02-01T00:00:00Z'),
    ]
    assert [action.id for action in sort_actions_for_register(actions)] == ['newer', 'older']


def test_recommendations_sort_by_status_priority_then_reference_number():
    actions = [
        Action(id='c', priority_band='P1', status='closed', reference_number='R-01'),
        Action(id='b', priority_band='P2', status='open', reference_number='R-10'),
        Action(id='a', priority_band='P2', status='open', reference_number='R-2'),
        Action(id='s', priority_band='P1', status='superseded', reference_number='R-03'),
        Action(id='x', priority_band='P1', status='open'),
    ]
    ordered = [action.id for action in sort_recommendations(actions)]
    assert ordered == ['x', 'a', 'b', 'c', 's']


def test_priority_rank_unknown_sorts_last():
    assert priority_rank('p1') == 1
    assert priority_rank(None) > priority_rank('P4')
