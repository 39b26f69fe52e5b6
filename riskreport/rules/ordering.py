from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable, Sequence

from riskreport.modules import ModuleKind
from riskreport.types import Action, ModuleInstance

FRA_MODULE_ORDER: tuple[ModuleKind, ...] = (
    ModuleKind.a1_doc_control,
    ModuleKind.fra_4_significant_findings,
    ModuleKind.fra_1_hazards,
    ModuleKind.a4_management_controls,
    ModuleKind.a5_emergency_arrangements,
    ModuleKind.fra_2_escape,
    ModuleKind.fra_3_protection,
    ModuleKind.fra_5_external_fire_spread,
)

FSD_MODULE_ORDER: tuple[ModuleKind, ...] = (
    ModuleKind.a1_doc_control,
    ModuleKind.fsd_1_reg_basis,
    ModuleKind.fsd_2_evac_strategy,
    ModuleKind.a2_building_profile,
    ModuleKind.a3_persons_at_risk,
    ModuleKind.fsd_3_escape_design,
    ModuleKind.fsd_4_passive_protection,
    ModuleKind.fsd_5_active_systems,
    ModuleKind.fsd_6_frs_access,
    ModuleKind.fsd_7_drawings,
    ModuleKind.fsd_8_smoke_control,
    ModuleKind.fsd_9_construction_phase,
)

DSEAR_MODULE_ORDER: tuple[ModuleKind, ...] = (
    ModuleKind.a1_doc_control,
    ModuleKind.a2_building_profile,
    ModuleKind.a3_persons_at_risk,
    ModuleKind.dsear_1_dangerous_substances,
    ModuleKind.dsear_2_process_releases,
    ModuleKind.dsear_3_hazardous_area_classification,
    ModuleKind.dsear_4_ignition_sources,
    ModuleKind.dsear_5_explosion_protection,
    ModuleKind.dsear_6_risk_assessment,
    ModuleKind.dsear_10_hierarchy_of_control,
    ModuleKind.dsear_11_explosion_emergency_response,
)

COMBINED_COMMON_MODULES: tuple[ModuleKind, ...] = (
    ModuleKind.a1_doc_control,
    ModuleKind.a2_building_profile,
    ModuleKind.a3_persons_at_risk,
)

COMBINED_FRA_ORDER: tuple[ModuleKind, ...] = FRA_MODULE_ORDER

COMBINED_FSD_ORDER: tuple[ModuleKind, ...] = tuple(
    kind for kind in FSD_MODULE_ORDER if kind not in COMBINED_COMMON_MODULES
)

_PRIORITY_RANK = {'P1': 1, 'P2': 2, 'P3': 3, 'P4': 4}
_REGISTER_OPEN_STATUSES = frozenset({'open', 'in_progress'})
_RECOMMENDATION_STATUS_RANK = {
    'open': 1,
    'in_progress': 2,
    'closed': 3,
    'superseded': 4,
    'deferred': 5,
    'not_applicable': 6,
}
_REFERENCE_DIGITS_RE = re.compile(r'(\d+)')


def priority_rank(priority: str | None) -> int:
    return _PRIORITY_RANK.get(str(priority or '').upper(), 99)


def sort_modules(instances: Iterable[ModuleInstance], order: Sequence[ModuleKind | str]) -> list[ModuleInstance]:
    """Order by a fixed table; keys missing from the table go last, keeping their input order."""
    positions = {str(getattr(kind, 'value', kind)): index for index, kind in enumerate(order)}
    unknown = len(positions)
    return sorted(instances, key=lambda item: positions.get(item.module_key, unknown))


def filter_modules(instances: Iterable[ModuleInstance], kinds: Iterable[ModuleKind | str]) -> list[ModuleInstance]:
    wanted = {str(getattr(kind, 'value', kind)) for kind in kinds}
    return [item for item in instances if item.module_key in wanted]


def _timestamp(value: datetime | None) -> float:
    return value.timestamp() if value is not None else 0.0


def sort_actions_for_register(actions: Iterable[Action]) -> list[Action]:
    """Open before closed, then P1..P4, then target date ascending with nulls last, newest first on ties."""

    def _key(action: Action) -> tuple[int, int, int, float, float]:
        target = action.target_date
        return (
            0 if action.status in _REGISTER_OPEN_STATUSES else 1,
            priority_rank(action.priority_band),
            0 if target is not None else 1,
            _timestamp(target),
            -_timestamp(action.created_at),
        )

    return sorted(actions, key=_key)


def _reference_number(reference: str | None) -> int:
    match = _REFERENCE_DIGITS_RE.search(str(reference or ''))
    return int(match.group(1)) if match else 999


def sort_recommendations(actions: Iterable[Action]) -> list[Action]:
    def _key(action: Action) -> tuple[int, int, int]:
        return (
            _RECOMMENDATION_STATUS_RANK.get(action.status, 99),
            priority_rank(action.priority_band),
            _reference_number(action.reference_number),
        )

    return sorted(actions, key=_key)
