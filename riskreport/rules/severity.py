from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping


class SeverityTier(str, Enum):
    t1 = 'T1'
    t2 = 'T2'
    t3 = 'T3'
    t4 = 'T4'


class OccupancyRisk(str, Enum):
    non_sleeping = 'NonSleeping'
    sleeping = 'Sleeping'
    vulnerable = 'Vulnerable'


class ExecutiveOutcome(str, Enum):
    satisfactory_with_improvements = 'SatisfactoryWithImprovements'
    improvements_required = 'ImprovementsRequired'
    significant_deficiencies = 'SignificantDeficiencies'
    material_life_safety_risk = 'MaterialLifeSafetyRiskPresent'


EXECUTIVE_OUTCOME_LABELS = {
    ExecutiveOutcome.satisfactory_with_improvements: 'Satisfactory with Improvements',
    ExecutiveOutcome.improvements_required: 'Improvements Required',
    ExecutiveOutcome.significant_deficiencies: 'Significant Deficiencies',
    ExecutiveOutcome.material_life_safety_risk: 'Material Life Safety Risk Present',
}

FINDING_CATEGORIES = (
    'MeansOfEscape',
    'DetectionAlarm',
    'EmergencyLighting',
    'Compartmentation',
    'FireDoors',
    'FireFighting',
    'Management',
    'Housekeeping',
    'Other',
)

_TIER_PRIORITY = {
    SeverityTier.t4: 'P1',
    SeverityTier.t3: 'P2',
    SeverityTier.t2: 'P3',
    SeverityTier.t1: 'P4',
}

_IMPROVEMENT_CATEGORIES = frozenset({'Management', 'Housekeeping', 'FireFighting'})


@dataclass(frozen=True)
class FraContext:
    occupancy_risk: OccupancyRisk = OccupancyRisk.non_sleeping
    storeys: int | None = None


@dataclass(frozen=True)
class ActionFacts:
    """Objective trigger flags recorded against a finding."""

    category: str = 'Other'
    final_exit_obstructed: bool = False
    final_exit_locked: bool = False
    single_stair_compromised: bool = False
    no_fire_detection: bool = False
    detection_inadequate_coverage: bool = False
    no_emergency_lighting: bool = False
    serious_compartmentation_failure: bool = False
    high_risk_room_to_escape_route: bool = False
    no_fra_evidence_or_review: bool = False


@dataclass(frozen=True)
class MaterialDeficiencyCheck:
    is_material_deficiency: bool
    triggers: list[str] = field(default_factory=list)


def derive_severity_tier(action: ActionFacts, ctx: FraContext) -> SeverityTier:
    """Deterministic trigger rules; no likelihood x impact scoring."""
    sleeping_or_vulnerable = ctx.occupancy_risk in {OccupancyRisk.sleeping, OccupancyRisk.vulnerable}
    storeys = ctx.storeys or 0

    if action.final_exit_locked or action.final_exit_obstructed:
        return SeverityTier.t4
    if sleeping_or_vulnerable and action.no_fire_detection:
        return SeverityTier.t4
    if storeys >= 2 and action.no_emergency_lighting:
        return SeverityTier.t4
    if storeys >= 4 and action.single_stair_compromised:
        return SeverityTier.t4
    if sleeping_or_vulnerable and action.serious_compartmentation_failure:
        return SeverityTier.t4
    if action.high_risk_room_to_escape_route:
        return SeverityTier.t4

    if (
        action.no_fire_detection
        or action.detection_inadequate_coverage
        or action.serious_compartmentation_failure
        or action.single_stair_compromised
        or action.no_fra_evidence_or_review
    ):
        return SeverityTier.t3

    if action.category in _IMPROVEMENT_CATEGORIES:
        return SeverityTier.t2
    return SeverityTier.t1


def map_tier_to_priority(tier: SeverityTier | str) -> str:
    try:
        return _TIER_PRIORITY[SeverityTier(tier)]
    except ValueError:
        return 'P4'


def _priority_of(item: Any) -> str | None:
    if isinstance(item, Mapping):
        value = item.get('priority') or item.get('priority_band')
    else:
        value = getattr(item, 'priority_band', None) or getattr(item, 'priority', None)
    return str(value).upper() if value else None


def _tier_of(item: Any) -> str | None:
    if isinstance(item, Mapping):
        value = item.get('severity_tier')
    else:
        value = getattr(item, 'severity_tier', None)
    return str(value).upper() if value else None


def _counts_as(item: Any, priority: str, tier: SeverityTier) -> bool:
    return _priority_of(item) == priority or _tier_of(item) == tier.value


def derive_executive_outcome(actions: Iterable[Any]) -> ExecutiveOutcome:
    items = list(actions)
    p1 = sum(1 for item in items if _counts_as(item, 'P1', SeverityTier.t4))
    p2 = sum(1 for item in items if _counts_as(item, 'P2', SeverityTier.t3))
    if p1 >= 1:
        return ExecutiveOutcome.material_life_safety_risk
    if p2 >= 3:
        return ExecutiveOutcome.significant_deficiencies
    if p2 >= 1:
        return ExecutiveOutcome.improvements_required
    return ExecutiveOutcome.satisfactory_with_improvements


def check_material_deficiency(actions: Iterable[Any], ctx: FraContext) -> MaterialDeficiencyCheck:
    triggers: list[str] = []
    any_p1 = any(_counts_as(item, 'P1', SeverityTier.t4) for item in actions)
    if any_p1:
        triggers.append('One or more actions classified as P1 (Material Life Safety Risk).')
        if ctx.occupancy_risk == OccupancyRisk.vulnerable:
            triggers.append('Vulnerable occupants increase the criticality of life safety deficiencies.')
    return MaterialDeficiencyCheck(is_material_deficiency=bool(triggers), triggers=triggers)


def executive_outcome_label(outcome: ExecutiveOutcome | str) -> str:
    try:
        return EXECUTIVE_OUTCOME_LABELS[ExecutiveOutcome(outcome)]
    except ValueError:
        return str(outcome)
